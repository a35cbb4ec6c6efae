"""Outlook on the web provider (outlook.live.com, outlook.office365.com)"""

from typing import Optional
from loguru import logger

from readall.browser.document import DomDocument, DomElement
from readall.browser.dom import simulate_click, wait_for_element
from readall.errors import ControlNotFoundError
from readall.providers.base import BaseProvider, READY_TIMEOUT_MS
from readall.providers.toolbar import (
    CONFIRM_DIALOG_POLL_MS,
    handle_bulk_confirmation,
    is_selected,
    wait_for_selection,
)


OUTLOOK_HOST_PATTERNS = (
    "outlook.live.com",
    "outlook.office365.com",
    "outlook.office.com",
)

OUTLOOK_READY_SELECTORS = [
    '[role="listbox"]',
    '[role="grid"]',
]

OUTLOOK_SELECT_ALL_SELECTOR = 'div[role="checkbox"][title*="Select all"]'

# The checkbox title changes between releases; its icon does not
OUTLOOK_SELECT_ALL_ICON_SELECTOR = 'i[data-icon-name="CircleRing"]'

OUTLOOK_MARK_READ_SELECTOR = 'button[name="Mark as read"]'
OUTLOOK_MARK_READ_ICON_SELECTOR = 'button i[data-icon-name="Read"]'

# Toolbar buttons only appear once something is selected
OUTLOOK_CONTROL_WAIT_MS = 3000


class OutlookProvider(BaseProvider):
    """Outlook on the web"""

    host_patterns = OUTLOOK_HOST_PATTERNS
    ready_selectors = tuple(OUTLOOK_READY_SELECTORS)
    probe_selectors = {
        "select_all": [OUTLOOK_SELECT_ALL_SELECTOR, OUTLOOK_SELECT_ALL_ICON_SELECTOR],
        "mark_as_read": [OUTLOOK_MARK_READ_SELECTOR, OUTLOOK_MARK_READ_ICON_SELECTOR],
    }

    def __init__(self, document: DomDocument, confirm_poll_ms: int = CONFIRM_DIALOG_POLL_MS):
        super().__init__("Outlook", document)
        self.confirm_poll_ms = confirm_poll_ms

    async def is_ready(self) -> bool:
        for selector in self.ready_selectors:
            if await wait_for_element(self.document, selector, READY_TIMEOUT_MS) is not None:
                return True
        return False

    async def select_all(self) -> None:
        checkbox = await self._find_select_all()
        if checkbox is None:
            raise ControlNotFoundError('the "Select all" checkbox')

        if await is_selected(checkbox):
            logger.info("Messages already selected, keeping current selection")
            return

        await simulate_click(checkbox)
        await wait_for_selection(checkbox)

    async def _find_select_all(self) -> Optional[DomElement]:
        checkbox = await wait_for_element(
            self.document, OUTLOOK_SELECT_ALL_SELECTOR, OUTLOOK_CONTROL_WAIT_MS
        )
        if checkbox is not None:
            return checkbox

        icon = await self.document.query(OUTLOOK_SELECT_ALL_ICON_SELECTOR)
        if icon is None:
            return None
        # The click handler sits on the surrounding checkbox container
        return await icon.closest('div[role="checkbox"]')

    async def mark_as_read(self) -> None:
        button = await wait_for_element(
            self.document, OUTLOOK_MARK_READ_SELECTOR, OUTLOOK_CONTROL_WAIT_MS
        )
        if button is None:
            icon = await self.document.query(OUTLOOK_MARK_READ_ICON_SELECTOR)
            if icon is not None:
                button = await icon.closest("button")

        if button is None:
            raise ControlNotFoundError('the "Mark as read" button')

        await simulate_click(button)
        await handle_bulk_confirmation(self.document, self.confirm_poll_ms)

    async def deselect_all(self) -> None:
        checkbox = await self.document.query(OUTLOOK_SELECT_ALL_SELECTOR)
        if checkbox is None:
            logger.warning('Could not find the "Select all" checkbox to clear the selection')
            return

        if await checkbox.get_attribute("aria-checked") == "true":
            await simulate_click(checkbox)
