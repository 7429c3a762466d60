import asyncio
import inspect
import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.config import get_settings  # noqa: E402

REPORT_CSV = (
    '"Activity Date","Process Date","Settle Date","Instrument","Description","Trans Code","Quantity","Price","Amount"\n'
    '"1/2/2024","1/2/2024","1/4/2024","AAPL","Apple\nCUSIP: 037833100","Buy","10","$150.00","($1,500.00)"\n'
    '"1/3/2024","1/3/2024","1/3/2024","","ACH Deposit","ACH","","","$2,000.00"\n'
    '"1/5/2024","1/5/2024","1/9/2024","MSFT","Microsoft","Buy","2","$1,010.50","($2,021.00)"\n'
    '"1/8/2024","1/8/2024","1/8/2024","AAPL","Cash Div: R/D 2024-01-05","CDIV","","","$2.40"\n'
    '"1/9/2024","1/9/2024","1/11/2024","AAPL","Apple","Sell","4","$155.00","$620.00"\n'
    "\n"
    '"","","","","","","","","","The data provided is for informational purposes only."\n'
)


@pytest.fixture
def report_csv() -> str:
    return REPORT_CSV


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch, tmp_path):
    """Point the cache at a temp file and drop cached settings between tests."""

    monkeypatch.setenv("PRICE_CACHE_PATH", str(tmp_path / "price_cache.json"))
    monkeypatch.setenv("ALPHAVANTAGE_API_KEY", "test-key")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            argnames = inspect.signature(test_function).parameters
            loop.run_until_complete(test_function(**{name: pyfuncitem.funcargs[name] for name in argnames}))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None
