"""Yahoo Mail provider (mail.yahoo.com)"""

from loguru import logger

from readall.browser.document import DomDocument
from readall.browser.dom import simulate_click, wait_for_element
from readall.errors import ControlNotFoundError
from readall.providers.base import BaseProvider, READY_TIMEOUT_MS
from readall.providers.toolbar import CONFIRM_DIALOG_POLL_MS, handle_bulk_confirmation, is_selected


YAHOO_HOST_PATTERNS = ("mail.yahoo.com",)

YAHOO_READY_SELECTOR = 'div[data-test-id="virtual-list"]'

# The checkbox is wrapped in a button; clicking it cycles select-all / none
YAHOO_SELECT_ALL_SELECTOR = 'button[data-test-id="checkbox-select-all"]'

YAHOO_MARK_READ_SELECTORS = [
    'button[title="Mark as read"]',
    'button[data-test-id="toolbar-mark-read"]',
]

YAHOO_CONTROL_WAIT_MS = 3000


class YahooProvider(BaseProvider):
    """Yahoo Mail"""

    host_patterns = YAHOO_HOST_PATTERNS
    ready_selectors = (YAHOO_READY_SELECTOR,)
    probe_selectors = {
        "select_all": [YAHOO_SELECT_ALL_SELECTOR],
        "mark_as_read": YAHOO_MARK_READ_SELECTORS,
    }

    def __init__(self, document: DomDocument, confirm_poll_ms: int = CONFIRM_DIALOG_POLL_MS):
        super().__init__("Yahoo", document)
        self.confirm_poll_ms = confirm_poll_ms

    async def is_ready(self) -> bool:
        marker = await wait_for_element(self.document, self.ready_selectors[0], READY_TIMEOUT_MS)
        return marker is not None

    async def select_all(self) -> None:
        button = await wait_for_element(self.document, YAHOO_SELECT_ALL_SELECTOR, YAHOO_CONTROL_WAIT_MS)
        if button is None:
            raise ControlNotFoundError('the "Select all" checkbox')

        # State is usually only visible through the icon; trust aria-checked when present
        if await is_selected(button):
            logger.info("Messages already selected, keeping current selection")
            return

        await simulate_click(button)

    async def mark_as_read(self) -> None:
        button = None
        for selector in YAHOO_MARK_READ_SELECTORS:
            button = await self.document.query(selector)
            if button is not None:
                break

        if button is None:
            raise ControlNotFoundError('the "Mark as read" button')

        await simulate_click(button)
        await handle_bulk_confirmation(self.document, self.confirm_poll_ms)

    async def deselect_all(self) -> None:
        button = await self.document.query(YAHOO_SELECT_ALL_SELECTOR)
        if button is None:
            logger.warning('Could not find the "Select all" checkbox to clear the selection')
            return

        if await button.get_attribute("aria-checked") == "false":
            return

        await simulate_click(button)
