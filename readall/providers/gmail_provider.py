"""Gmail provider implementation.

This module contains ALL Gmail-specific code:
- Hostname and readiness marker
- Selection menu ("Unread" / "None") lookup next to the master checkbox
- "Select all N conversations" banner for full-history selection
- Mark-as-read lookup (toolbar button, tooltip, then the "More" menu)

Gmail's labels are English-only here; the master checkbox itself is found
by layout (readall/providers/toolbar.py) and works in any language.
"""

import re
from typing import Optional, Sequence
from loguru import logger

from readall.browser.document import DomDocument, DomElement
from readall.browser.dom import pause, simulate_click, wait_for_element
from readall.errors import ControlNotFoundError
from readall.providers.base import BaseProvider, READY_TIMEOUT_MS, SelectScope
from readall.providers.toolbar import (
    CONFIRM_DIALOG_POLL_MS,
    find_master_checkbox,
    handle_bulk_confirmation,
    is_selected,
    locate_master_checkbox,
    pick_menu_item,
    wait_for_selection,
)


# =============================================================================
# GMAIL SELECTORS
# =============================================================================

GMAIL_HOST_PATTERNS = ("mail.google.com",)

GMAIL_READY_SELECTOR = 'table[role="grid"]'

# Selection menu trigger (the small triangle next to the master checkbox),
# looked up inside the checkbox's container
GMAIL_SCOPE_MENU_LABEL_SELECTOR = '[aria-label*="Select"]'

GMAIL_SCOPE_MENU_POPUP_SELECTORS = [
    '[aria-haspopup="true"][role="button"]',
    '[aria-haspopup="true"][role="menuitem"]',
]

# Only used when the "Select" label belongs to the checkbox itself
GMAIL_SCOPE_MENU_GENERIC_SELECTOR = 'div[role="button"]'

GMAIL_MENU_ITEM_SELECTOR = 'div[role="menuitem"]'

GMAIL_UNREAD_LABELS = ["Unread"]
GMAIL_NONE_LABELS = ["None"]

GMAIL_MARK_READ_SELECTORS = [
    'div[role="button"][aria-label="Mark as read"]',
    'div[data-tooltip="Mark as read"]',
]

GMAIL_MORE_SELECTORS = [
    'div[role="button"][aria-label="More"]',
    'div[role="button"][data-tooltip="More"]',
]

GMAIL_MARK_READ_LABELS = ["Mark as read", "Mark as Read"]

# "Select all 4,512 conversations in Inbox"
GMAIL_BULK_SELECT_SELECTORS = [
    'span[role="link"]',
    'div[role="link"]',
    'a[role="link"]',
]

GMAIL_BULK_SELECT_PATTERN = re.compile(r"^select all [\d,.\s]+ conversations", re.IGNORECASE)

GMAIL_LOCALE_HINT = "Is your Gmail in English?"


class GmailProvider(BaseProvider):
    """Gmail (mail.google.com)"""

    host_patterns = GMAIL_HOST_PATTERNS
    ready_selectors = (GMAIL_READY_SELECTOR,)
    probe_selectors = {
        "mark_as_read": GMAIL_MARK_READ_SELECTORS,
        "more_menu": GMAIL_MORE_SELECTORS,
        "bulk_select_link": GMAIL_BULK_SELECT_SELECTORS,
    }

    # Pause after picking a menu entry, for Gmail to apply the selection
    selection_settle_ms = 500
    # Pause before looking for the bulk-select banner
    banner_settle_ms = 500
    # Pause between the two checkbox toggles of the deselect fallback
    deselect_settle_ms = 500
    menu_settle_ms = 300

    def __init__(
        self,
        document: DomDocument,
        select_scope: SelectScope = SelectScope.UNREAD_ONLY,
        confirm_poll_ms: int = CONFIRM_DIALOG_POLL_MS
    ):
        """
        Args:
            document: Document showing the Gmail UI
            select_scope: Unread-only (default) or full-history selection
            confirm_poll_ms: How long to watch for a bulk-confirmation dialog
        """
        super().__init__("Gmail", document)
        self.select_scope = SelectScope(select_scope)
        self.confirm_poll_ms = confirm_poll_ms

    async def is_ready(self) -> bool:
        grid = await wait_for_element(self.document, self.ready_selectors[0], READY_TIMEOUT_MS)
        return grid is not None

    # -------------------------------------------------------------------------
    # Select
    # -------------------------------------------------------------------------

    async def select_all(self) -> None:
        if self.select_scope == SelectScope.FULL_HISTORY:
            await self._select_full_history()
        else:
            await self._select_unread()

    async def _select_unread(self) -> None:
        """Select unread messages through the selection menu, else the visible page"""
        master = await locate_master_checkbox(self.document)

        if await is_selected(master):
            logger.info("Messages already selected, keeping current selection")
            return

        trigger = await self._find_scope_menu_trigger(master)
        if trigger is not None:
            picked = await pick_menu_item(
                self.document, trigger, GMAIL_UNREAD_LABELS,
                item_selector=GMAIL_MENU_ITEM_SELECTOR,
                settle_ms=self.menu_settle_ms,
            )
            if picked:
                logger.info('Selected "Unread" via the selection menu')
                await pause(self.selection_settle_ms)
                return

        logger.info('"Unread" option not found, falling back to selecting the visible page')
        await self._check_master(master)

    async def _select_full_history(self) -> None:
        """Select the visible page, then extend to the whole folder via the banner"""
        master = await locate_master_checkbox(self.document)
        await self._check_master(master)

        await pause(self.banner_settle_ms)
        banner = await self._find_bulk_select_link()
        if banner is None:
            logger.info("No bulk-select banner, keeping page-level selection")
            return

        logger.info(f'Extending selection: "{(await banner.text_content()).strip()}"')
        await simulate_click(banner)
        await handle_bulk_confirmation(self.document, self.confirm_poll_ms)

    async def _check_master(self, master: DomElement) -> None:
        if await is_selected(master):
            return
        await simulate_click(master)
        await wait_for_selection(master)

    async def _find_scope_menu_trigger(self, master: DomElement) -> Optional[DomElement]:
        """
        Find the selection menu trigger sharing a container with the master checkbox.

        A button labelled "Select" wins, then a popup button. Any other
        button in the container is accepted only when the "Select" label
        turned out to be the checkbox's own.

        Returns:
            The trigger, never the master checkbox itself; None if absent
        """
        container = await master.container(2)
        if container is None:
            return None

        label_on_master = False
        for candidate in await container.query_all(GMAIL_SCOPE_MENU_LABEL_SELECTOR):
            if await candidate.same_as(master):
                label_on_master = True
            elif await candidate.get_attribute("role") == "button":
                return candidate

        trigger = await self._find_popup_trigger(master)
        if trigger is not None or not label_on_master:
            return trigger

        for candidate in await container.query_all(GMAIL_SCOPE_MENU_GENERIC_SELECTOR):
            if not await candidate.same_as(master):
                return candidate
        return None

    async def _find_popup_trigger(self, master: DomElement) -> Optional[DomElement]:
        """Popup button or menu item next to the master checkbox"""
        container = await master.container(2)
        if container is None:
            return None

        for selector in GMAIL_SCOPE_MENU_POPUP_SELECTORS:
            for candidate in await container.query_all(selector):
                if not await candidate.same_as(master):
                    return candidate
        return None

    async def _find_bulk_select_link(self) -> Optional[DomElement]:
        for selector in GMAIL_BULK_SELECT_SELECTORS:
            for link in await self.document.query_all(selector):
                text = (await link.text_content()).strip()
                if GMAIL_BULK_SELECT_PATTERN.match(text) and await link.is_rendered():
                    return link
        return None

    # -------------------------------------------------------------------------
    # Mark as read
    # -------------------------------------------------------------------------

    async def mark_as_read(self) -> None:
        button = await self._first_match(GMAIL_MARK_READ_SELECTORS)

        if button is not None:
            await simulate_click(button)
        else:
            more = await self._first_match(GMAIL_MORE_SELECTORS)
            picked = False
            if more is not None:
                picked = await pick_menu_item(
                    self.document, more, GMAIL_MARK_READ_LABELS,
                    item_selector=GMAIL_MENU_ITEM_SELECTOR,
                    settle_ms=self.menu_settle_ms,
                )
            if not picked:
                raise ControlNotFoundError('the "Mark as read" button', hint=GMAIL_LOCALE_HINT)
            logger.info('Used "Mark as read" from the "More" menu')

        await handle_bulk_confirmation(self.document, self.confirm_poll_ms)

    async def _first_match(self, selectors: Sequence[str]) -> Optional[DomElement]:
        """
        Return the first element matching any selector, preferring rendered ones.

        Gmail keeps hidden copies of its toolbar for other views.
        """
        fallback = None
        for selector in selectors:
            for element in await self.document.query_all(selector):
                if await element.is_rendered():
                    return element
                if fallback is None:
                    fallback = element
        return fallback

    # -------------------------------------------------------------------------
    # Deselect
    # -------------------------------------------------------------------------

    async def deselect_all(self) -> None:
        logger.info("Starting deselect phase (menu strategy)")

        master = await find_master_checkbox(self.document)
        if master is None:
            logger.warning("Could not find master checkbox to locate the selection menu")
            return

        trigger = await self._find_popup_trigger(master)
        if trigger is not None:
            picked = await pick_menu_item(
                self.document, trigger, GMAIL_NONE_LABELS,
                item_selector='[role="menuitem"]',
                settle_ms=self.menu_settle_ms,
            )
            if picked:
                logger.info('Clicked "None" in the selection menu')
                return
            logger.warning('Could not find "None" option, menu closed')
        else:
            logger.warning("Could not find the selection menu button")

        logger.info("Falling back to checkbox toggle")
        master = await find_master_checkbox(self.document) or master
        if not await is_selected(master):
            return

        await simulate_click(master)
        await pause(self.deselect_settle_ms)

        # Toggling a mixed checkbox can land on "all selected"
        master = await find_master_checkbox(self.document) or master
        if await master.get_attribute("aria-checked") == "true":
            await simulate_click(master)
