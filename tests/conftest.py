"""
Shared fixtures for steptree tests.
"""

import io

import pytest
from rich.console import Console

from steptree.calltree.scope import RunScope, reset_run_scope
from steptree.config.settings import get_settings
from steptree.core.container import Container
from steptree.core.helper import Helper
from steptree.monitoring.output import Output


class FakeBrowser(Helper):
    """Helper that records the calls it receives."""

    def __init__(self, config=None):
        super().__init__(config)
        self.calls = []

    def fill_field(self, locator, value):
        self.calls.append(("fill_field", locator, value))

    def click(self, locator):
        self.calls.append(("click", locator))

    def see(self, text):
        self.calls.append(("see", text))
        return True

    def grab_title(self):
        return "Home"

    async def grab_title_async(self):
        return "Home"

    def explode(self, reason):
        raise RuntimeError(reason)


@pytest.fixture(autouse=True)
def fresh_process_state():
    """Drop the cached settings and the default run scope around each test."""
    get_settings.cache_clear()
    reset_run_scope()
    yield
    get_settings.cache_clear()
    reset_run_scope()


@pytest.fixture
def scope():
    """An isolated run scope."""
    return RunScope()


@pytest.fixture
def browser():
    """A recording helper."""
    return FakeBrowser()


@pytest.fixture
def container(scope, browser):
    """Container with the recording helper registered."""
    container = Container(scope=scope)
    container.add_helper(browser)
    return container


@pytest.fixture
def actor(container):
    """The ``I`` actor bound to the test container."""
    return container.actor()


@pytest.fixture
def console():
    """Plain-text console writing to memory."""
    return Console(file=io.StringIO(), width=200, color_system=None, highlight=False)


@pytest.fixture
def output(console):
    """Output surface writing to the in-memory console."""
    return Output(console=console)


def rendered_lines(console):
    """Lines printed to an in-memory console so far."""
    return [line.rstrip() for line in console.file.getvalue().splitlines()]


@pytest.fixture
def printed(console):
    """Callable returning the lines printed so far."""
    return lambda: rendered_lines(console)
