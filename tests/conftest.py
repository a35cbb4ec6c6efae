"""Pytest configuration and shared fixtures for testing"""

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import AsyncGenerator, Callable, Iterable, List

import pytest
from loguru import logger

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from readall.browser.snapshot_document import SnapshotDocument, SnapshotEvent


GMAIL_URL = "https://mail.google.com/mail/u/0/#inbox"
OUTLOOK_URL = "https://outlook.live.com/mail/0/"
YAHOO_URL = "https://mail.yahoo.com/d/folders/1"

SCOPE_MENU_HTML = """
<div role="menu" id="scope-menu">
  {items}
</div>
"""

CONFIRM_DIALOG_HTML = """
<div role="alertdialog" id="confirm-dialog" data-top="300">
  <span>This action will affect all 4,512 conversations in Inbox. Are you sure you want to continue?</span>
  <button name="ok">OK</button>
  <button name="cancel">Cancel</button>
</div>
"""

BULK_BANNER_HTML = """
<span role="link" id="bulk-link" tabindex="0">Select all 4,512 conversations in Inbox</span>
"""


@pytest.fixture
def test_fixture_path() -> Path:
    """Return the path to the test fixtures directory"""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def load_snapshot(test_fixture_path: Path) -> Callable[..., SnapshotDocument]:
    """Factory: load an HTML fixture as a SnapshotDocument, optionally dropping elements"""

    def _load(name: str, url: str, exclude: Iterable[str] = ()) -> SnapshotDocument:
        document = SnapshotDocument.from_file(test_fixture_path / name, url=url)
        for selector in exclude:
            for tag in document.soup.select(selector):
                tag.extract()
        return document

    return _load


def _menu_items(labels: List[str]) -> str:
    return "\n".join(f'<div role="menuitem">{label}</div>' for label in labels)


@pytest.fixture
def gmail_host(load_snapshot):
    """
    Factory: Gmail snapshot wired with handlers that behave like the real UI.

    Returns (document, state). state records what the "host page" did.
    """

    def _build(
        scope_items=("All", "None", "Read", "Unread", "Starred", "Unstarred"),
        more_items=("Mark as read", "Mark as unread", "Add star"),
        confirm_on_mark=False,
        bulk_banner=False,
        confirm_on_bulk=False,
        master_sticks=True,
        exclude=(),
    ):
        document = load_snapshot("gmail_inbox.html", GMAIL_URL, exclude=exclude)
        state = SimpleNamespace(marked_read=False, bulk_selected=False, confirmed=0, picked=[])

        def master_state() -> str:
            return document.soup.select_one("#master")["aria-checked"]

        def set_master(value: str):
            if master_sticks:
                document.set_attribute("#master", "aria-checked", value)

        def toggle_menu(menu_id: str, parent: str, items):
            if document.soup.select_one(f"#{menu_id}") is not None:
                document.remove(f"#{menu_id}")
            else:
                html = SCOPE_MENU_HTML.replace('id="scope-menu"', f'id="{menu_id}"')
                document.append_html(parent, html.format(items=_menu_items(list(items))))

        def on_select_menu(event: SnapshotEvent):
            toggle_menu("scope-menu", "#menus", scope_items)

        def on_more(event: SnapshotEvent):
            toggle_menu("more-menu", "#menus", more_items)

        def show_confirm():
            document.append_html("body", CONFIRM_DIALOG_HTML)

        def on_menu_item(event: SnapshotEvent):
            label = event.target.tag.get_text().strip()
            state.picked.append(label)
            if label == "Unread":
                set_master("mixed")
            elif label == "None":
                set_master("false")
            elif label == "All":
                set_master("true")
            elif label == "Mark as read":
                state.marked_read = True
            for menu in ("#scope-menu", "#more-menu"):
                if document.soup.select_one(menu) is not None:
                    document.remove(menu)
            if label == "Mark as read" and confirm_on_mark:
                show_confirm()

        def on_mark_read(event: SnapshotEvent):
            state.marked_read = True
            if confirm_on_mark:
                show_confirm()

        def on_master(event: SnapshotEvent):
            current = master_state()
            # Gmail toggles a mixed checkbox to "all selected"
            set_master("false" if current == "true" else "true")
            if bulk_banner and master_state() == "true" and document.soup.select_one("#bulk-link") is None:
                document.append_html("#banner-area", BULK_BANNER_HTML)

        def on_bulk_link(event: SnapshotEvent):
            state.bulk_selected = True
            if confirm_on_bulk:
                show_confirm()

        def on_confirm(event: SnapshotEvent):
            state.confirmed += 1
            document.remove("#confirm-dialog")

        document.on("#select-menu", "click", on_select_menu)
        document.on("#more", "click", on_more)
        document.on('[role="menuitem"]', "click", on_menu_item)
        document.on("#mark-read", "click", on_mark_read)
        document.on("#master", "click", on_master)
        document.on("#bulk-link", "click", on_bulk_link)
        document.on('#confirm-dialog button[name="ok"]', "click", on_confirm)
        return document, state

    return _build


@pytest.fixture
def fast_gmail():
    """Factory: shrink a Gmail provider's pauses so tests stay quick"""

    def _speed_up(provider):
        provider.selection_settle_ms = 0
        provider.banner_settle_ms = 0
        provider.deselect_settle_ms = 0
        provider.menu_settle_ms = 0
        provider.confirm_poll_ms = 100
        return provider

    return _speed_up


@pytest.fixture
def log_records():
    """Capture loguru records emitted during a test"""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
async def browser_page() -> AsyncGenerator:
    """Headless Chromium page; skips the test when no browser is installed"""
    from playwright.async_api import async_playwright

    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(headless=True)
    except Exception as e:
        await playwright.stop()
        pytest.skip(f"Chromium not available: {e}")

    context = await browser.new_context(viewport={"width": 1280, "height": 720}, locale="en-US")
    page = await context.new_page()
    yield page
    await context.close()
    await browser.close()
    await playwright.stop()


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "slow: mark test as slow (can be skipped with -m 'not slow')"
    )
