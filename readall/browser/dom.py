"""DOM primitives shared by every provider.

- wait_for_element: bounded wait for a selector to appear
- simulate_click: native-looking pointer sequence instead of element.click()
"""

import asyncio
from typing import Optional
from loguru import logger

from readall.browser.document import DomDocument, DomElement


DEFAULT_WAIT_TIMEOUT_MS = 10000

# Several webmail front ends attach handlers to raw pointer events and
# ignore a plain programmatic click, so all three are dispatched in order.
MOUSE_CLICK_SEQUENCE = ("mousedown", "click", "mouseup")

CLICK_EVENT_INIT = {
    "bubbles": True,
    "cancelable": True,
    "buttons": 1,  # primary button held
}


async def wait_for_element(
    document: DomDocument,
    selector: str,
    timeout_ms: int = DEFAULT_WAIT_TIMEOUT_MS
) -> Optional[DomElement]:
    """
    Wait for an element matching selector to appear in the document.

    Resolves immediately if the element is already present. Otherwise the
    body's subtree is observed and the selector is re-checked after every
    batch of changes. The subscription is cancelled on every exit path.

    Args:
        document: Document to query and observe
        selector: CSS selector to match
        timeout_ms: Maximum time to wait in milliseconds

    Returns:
        The matching element, or None if nothing matched before the timeout
    """
    element = await document.query(selector)
    if element is not None:
        return element

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_ms / 1000
    changed = asyncio.Event()
    unsubscribe = await document.observe(changed.set)

    try:
        # The element may have appeared while the subscription was set up
        element = await document.query(selector)
        if element is not None:
            return element

        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            try:
                await asyncio.wait_for(changed.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                break

            changed.clear()
            element = await document.query(selector)
            if element is not None:
                return element
    finally:
        unsubscribe()

    logger.debug(f"Timed out after {timeout_ms}ms waiting for {selector}")
    return None


async def simulate_click(element: DomElement) -> None:
    """
    Simulate a native click on an element.

    Dispatches mousedown, click and mouseup (in that order), each bubbling
    with the primary button marked active.

    Args:
        element: Element to click
    """
    for event_type in MOUSE_CLICK_SEQUENCE:
        await element.dispatch_event(event_type, dict(CLICK_EVENT_INIT))


async def pause(ms: int) -> None:
    """Sleep for ms milliseconds without blocking the event loop"""
    await asyncio.sleep(ms / 1000)
