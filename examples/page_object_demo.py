#!/usr/bin/env python3
"""
Page Object Demo of steptree's step tracking.

Runs a small login scenario through a fake browser helper and a page object,
printing the step tree the way a runner integration would.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from steptree import CliReporter, Container, Helper, RunScope, Secret, within
from steptree.core.types import SuiteRecord, TestRecord
from steptree.monitoring.logger import setup_logging
from steptree.orchestration.communication import LifecycleEvent, StepEvent

console = Console()


class DemoBrowser(Helper):
    """Browser helper that only remembers what it was asked to do."""

    def __init__(self, config=None):
        super().__init__(config)
        self.page = "/"

    def am_on_page(self, url):
        self.page = url

    def fill_field(self, locator, value):
        pass

    def click(self, locator):
        if locator == "Sign in":
            self.page = "/dashboard"

    def see(self, text):
        return True

    def grab_current_url(self):
        return self.page


class LoginPage:
    """Page object grouping the login steps."""

    def __init__(self, actor):
        self.actor = actor

    def open(self):
        self.actor.am_on_page("/login")

    def submit(self, email, password):
        self.actor.fill_field("#email", email)
        self.actor.fill_field("#password", password)
        self.actor.click("Sign in")


def login_scenario(actor, login, scope):
    """Scenario body; its name makes it a boundary of the call tree."""
    login.open()
    login.submit("ada@example.com", Secret("s3cret"))
    within(".header", lambda: actor.see("Welcome"), scope=scope)
    return actor.grab_current_url()


def demo_page_objects():
    """Demonstrate step printing for a page-object driven test."""
    setup_logging(log_level="WARNING")

    console.print(Panel.fit(
        "[bold cyan]steptree Page Object Demo[/bold cyan]\n"
        "Steps grouped under the page-object calls that issued them",
        border_style="cyan",
    ))

    # Step 1: Register helpers and page objects
    console.print("\n[yellow]Step 1:[/yellow] Registering helpers and support objects...")
    scope = RunScope()
    container = Container(scope)
    container.add_helper(DemoBrowser())
    actor = container.actor()
    login = container.add_support("Login", LoginPage(actor))
    console.print(f"[green]✓[/green] Helpers: {', '.join(container.helpers())}")

    # Step 2: Attach the reporter and count events
    console.print("\n[yellow]Step 2:[/yellow] Attaching reporter at steps level...")
    counts = {event: 0 for event in StepEvent}
    for event in StepEvent:
        scope.events.subscribe(event, lambda *args, _event=event: counts.__setitem__(_event, counts[_event] + 1))
    CliReporter(scope, options={"steps": True}).attach()

    # Step 3: Run the scenario as a runner would
    console.print("\n[yellow]Step 3:[/yellow] Running scenario...\n")
    test = TestRecord(title="signs in with email", suite="Login")
    scope.events.emit(LifecycleEvent.SUITE_STARTED, SuiteRecord(title="Login"))
    scope.events.emit(LifecycleEvent.TEST_STARTED, test)
    try:
        url = login_scenario(actor, login, scope)
    except Exception as e:
        scope.events.emit(LifecycleEvent.TEST_FAILED, test, e)
        url = None
    else:
        scope.events.emit(LifecycleEvent.TEST_PASSED, test)
    scope.events.emit(LifecycleEvent.RUN_ENDED)

    # Step 4: Summarize what was recorded
    console.print("\n[yellow]Step 4:[/yellow] Recorded steps")
    table = Table(show_header=True)
    table.add_column("Step")
    table.add_column("Status")
    table.add_column("Code")
    for step in test.steps:
        table.add_row(step.to_string(), step.status.value, step.to_code())
    console.print(table)

    console.print(f"\nFinal page: [bold]{url}[/bold]")
    console.print("Step events: " + ", ".join(f"{event.name.lower()}={count}" for event, count in counts.items()))


if __name__ == "__main__":
    demo_page_objects()
