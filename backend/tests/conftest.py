import asyncio
import inspect
import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fund_ledger.db import Database  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.fixture
def database(tmp_path: pathlib.Path) -> Database:
    """Empty sqlite database file; tests create the schema inside their own loop."""

    return Database(url=f"sqlite+aiosqlite:///{tmp_path / 'daily.db'}")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run coroutine tests on a fresh event loop."""

    test_function = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_function):
        return None
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        argnames = pyfuncitem._fixtureinfo.argnames
        loop.run_until_complete(test_function(**{name: pyfuncitem.funcargs[name] for name in argnames}))
    finally:
        asyncio.set_event_loop(None)
        loop.close()
    return True
