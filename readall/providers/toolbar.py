"""Toolbar heuristics shared by the provider fallback chains.

This module provides CORE (provider-agnostic) capabilities:
- Master checkbox location without stable ids or localized labels
- Selection state reads and the bounded confirmation poll
- Scope/overflow menu handling (open, pick an item, close on a miss)
- Bulk-confirmation dialog handling

Provider-specific selectors live in the respective provider modules.
"""

from typing import Optional, Sequence
from loguru import logger

from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_fixed

from readall.browser.document import DomDocument, DomElement
from readall.browser.dom import pause, simulate_click
from readall.errors import ControlNotFoundError


# =============================================================================
# MASTER CHECKBOX LOCATOR
# =============================================================================

CHECKBOX_SELECTOR = '[role="checkbox"]'

# Per-item checkboxes live inside the message grid or inside a row
ROW_CONTAINER_SELECTORS = [
    'table[role="grid"]',
    'tr',
]

SELECTED_STATES = ("true", "mixed")

SELECTION_POLL_ATTEMPTS = 10
SELECTION_POLL_INTERVAL_MS = 200

MENU_SETTLE_MS = 300

# Bulk-confirmation dialogs ("This action will affect all 4,512 conversations")
CONFIRM_DIALOG_SELECTOR = 'div[role="alertdialog"], div[role="dialog"]'
CONFIRM_DIALOG_POLL_MS = 1500
CONFIRM_DIALOG_INTERVAL_MS = 100

AFFIRMATIVE_BUTTON_SELECTORS = [
    'button[name="ok"]',
    'button[data-mdc-dialog-action="ok"]',
    '[role="button"][name="ok"]',
]

AFFIRMATIVE_LABELS = ["ok", "confirm", "yes", "continue"]


async def find_master_checkbox(document: DomDocument) -> Optional[DomElement]:
    """
    Locate the master "select all" checkbox of the message toolbar.

    Every checkbox-role element is a candidate. Candidates that are not
    rendered, or that sit inside the message grid or a row, are per-item
    checkboxes. Of the remaining ones the topmost is the master control,
    since it always sits above the list it governs. No text is read, so
    this works in any UI language.

    Args:
        document: Document to search

    Returns:
        The master checkbox, or None if no candidate survives filtering
    """
    candidates = []
    for checkbox in await document.query_all(CHECKBOX_SELECTOR):
        if not await checkbox.is_rendered():
            continue
        if await _inside_row(checkbox):
            continue
        candidates.append((await checkbox.top(), checkbox))

    if not candidates:
        return None

    # Stable sort keeps document order for candidates on the same line
    candidates.sort(key=lambda pair: pair[0])
    return candidates[0][1]


async def _inside_row(element: DomElement) -> bool:
    for selector in ROW_CONTAINER_SELECTORS:
        if await element.closest(selector) is not None:
            return True
    return False


async def locate_master_checkbox(document: DomDocument) -> DomElement:
    """Same as find_master_checkbox but raises ControlNotFoundError on a miss"""
    checkbox = await find_master_checkbox(document)
    if checkbox is None:
        raise ControlNotFoundError("the toolbar control")
    return checkbox


# =============================================================================
# SELECTION STATE
# =============================================================================

async def is_selected(checkbox: DomElement) -> bool:
    """Whether the checkbox currently reads checked or mixed"""
    return await checkbox.get_attribute("aria-checked") in SELECTED_STATES


async def wait_for_selection(
    checkbox: DomElement,
    attempts: int = SELECTION_POLL_ATTEMPTS,
    interval_ms: int = SELECTION_POLL_INTERVAL_MS
) -> bool:
    """
    Poll the checkbox until it reads checked or mixed.

    Exhausting the poll is a soft failure: the host UI may still converge,
    so callers log and carry on.

    Returns:
        True if the selection was confirmed within the poll window
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(interval_ms / 1000),
        retry=retry_if_result(lambda selected: not selected),
        retry_error_callback=lambda retry_state: False,
    )
    confirmed = await retrying(is_selected, checkbox)
    if not confirmed:
        logger.warning(f"Selection not confirmed after {attempts} checks, continuing anyway")
    return confirmed


# =============================================================================
# MENUS
# =============================================================================

async def find_by_text(
    document: DomDocument,
    selector: str,
    labels: Sequence[str]
) -> Optional[DomElement]:
    """
    Return the first element matching selector whose text equals one of labels.

    Text is compared after stripping surrounding whitespace.
    """
    for element in await document.query_all(selector):
        text = (await element.text_content()).strip()
        if text in labels:
            return element
    return None


async def pick_menu_item(
    document: DomDocument,
    trigger: DomElement,
    labels: Sequence[str],
    item_selector: str = '[role="menuitem"]',
    settle_ms: int = MENU_SETTLE_MS
) -> bool:
    """
    Open a menu and activate the item labelled with one of labels.

    If the item is missing the menu is closed again (by re-activating its
    trigger) so that no menu is left open.

    Args:
        document: Document holding the menu
        trigger: Control that opens the menu
        labels: Accepted item texts
        item_selector: Selector for menu entries
        settle_ms: Pause after opening, for the menu animation

    Returns:
        True if an item was activated
    """
    await simulate_click(trigger)
    await pause(settle_ms)

    item = await find_by_text(document, item_selector, labels)
    if item is None:
        logger.debug(f"Menu item {list(labels)} not found, closing menu")
        await simulate_click(trigger)
        return False

    await simulate_click(item)
    return True


# =============================================================================
# BULK CONFIRMATION
# =============================================================================

async def find_affirmative_button(dialog: DomElement) -> Optional[DomElement]:
    """Find the OK/Confirm control inside a confirmation dialog"""
    for selector in AFFIRMATIVE_BUTTON_SELECTORS:
        button = await dialog.query(selector)
        if button is not None:
            return button

    for button in await dialog.query_all('button, [role="button"]'):
        text = (await button.text_content()).strip().lower()
        if text in AFFIRMATIVE_LABELS:
            return button

    return None


async def handle_bulk_confirmation(
    document: DomDocument,
    poll_ms: int = CONFIRM_DIALOG_POLL_MS,
    settle_attempts: int = SELECTION_POLL_ATTEMPTS,
    settle_interval_ms: int = SELECTION_POLL_INTERVAL_MS
) -> bool:
    """
    Confirm a bulk-action dialog if one appears shortly after an action.

    Only large selections trigger such a dialog, so its absence within the
    poll window is the normal case. When it does appear, its affirmative
    control is activated and the dialog is given time to close, which
    signals that the bulk operation has started.

    Args:
        document: Document to watch
        poll_ms: How long to wait for the dialog to appear

    Returns:
        True if a dialog was found and confirmed
    """
    dialog = await wait_for_rendered_dialog(document, poll_ms)
    if dialog is None:
        return False

    button = await find_affirmative_button(dialog)
    if button is None:
        logger.warning("Confirmation dialog appeared but no affirmative control was found")
        return False

    logger.info("Confirming bulk action dialog")
    await simulate_click(button)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(settle_attempts),
        wait=wait_fixed(settle_interval_ms / 1000),
        retry=retry_if_result(lambda gone: not gone),
        retry_error_callback=lambda retry_state: False,
    )
    if not await retrying(_dialog_closed, document):
        logger.warning("Confirmation dialog still open, bulk action may not have started yet")
    return True


async def _dialog_closed(document: DomDocument) -> bool:
    return await find_rendered_dialog(document) is None


async def find_rendered_dialog(document: DomDocument) -> Optional[DomElement]:
    """First confirmation dialog that is actually shown; closed ones stay in the DOM hidden"""
    for dialog in await document.query_all(CONFIRM_DIALOG_SELECTOR):
        if await dialog.is_rendered():
            return dialog
    return None


async def wait_for_rendered_dialog(
    document: DomDocument,
    poll_ms: int = CONFIRM_DIALOG_POLL_MS,
    interval_ms: int = CONFIRM_DIALOG_INTERVAL_MS
) -> Optional[DomElement]:
    """Poll for up to poll_ms until a rendered confirmation dialog shows up"""
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, poll_ms // interval_ms) + 1),
        wait=wait_fixed(interval_ms / 1000),
        retry=retry_if_result(lambda dialog: dialog is None),
        retry_error_callback=lambda retry_state: None,
    )
    return await retrying(find_rendered_dialog, document)
