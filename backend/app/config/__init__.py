"""Configuration package for the equity tracker service."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
