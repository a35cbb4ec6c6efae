"""Playwright-backed implementation of the DOM capability surface"""

from typing import Any, Dict, List, Optional
from loguru import logger

from playwright.async_api import ElementHandle, Page

from readall.browser.document import DomDocument, DomElement, MutationCallback, Unsubscribe


MUTATION_BINDING = "__readAllDomChanged"

# Installs one MutationObserver per document. Notifications are coalesced
# to at most one per task so busy pages do not flood the Python side.
OBSERVER_SCRIPT = """
(binding) => {
    if (window.__readAllObserver) return;
    let scheduled = false;
    const observer = new MutationObserver(() => {
        if (scheduled) return;
        scheduled = true;
        setTimeout(() => {
            scheduled = false;
            window[binding]();
        }, 0);
    });
    observer.observe(document.body, { childList: true, subtree: true });
    window.__readAllObserver = observer;
}
"""

CONTAINER_SCRIPT = """
(el, levels) => {
    let node = el;
    for (let i = 0; i < levels && node; i++) {
        node = node.parentElement;
    }
    return node;
}
"""


class PageElement(DomElement):
    """DomElement wrapping a Playwright ElementHandle"""

    def __init__(self, handle: ElementHandle):
        self.handle = handle

    async def get_attribute(self, name: str) -> Optional[str]:
        return await self.handle.get_attribute(name)

    async def text_content(self) -> str:
        text = await self.handle.text_content()
        return text or ""

    async def is_rendered(self) -> bool:
        return await self.handle.evaluate("el => el.offsetParent !== null")

    async def top(self) -> float:
        return await self.handle.evaluate("el => el.getBoundingClientRect().top")

    async def closest(self, selector: str) -> Optional[DomElement]:
        js_handle = await self.handle.evaluate_handle("(el, sel) => el.closest(sel)", selector)
        return _wrap(js_handle.as_element())

    async def container(self, levels: int = 2) -> Optional[DomElement]:
        js_handle = await self.handle.evaluate_handle(CONTAINER_SCRIPT, levels)
        return _wrap(js_handle.as_element())

    async def query(self, selector: str) -> Optional[DomElement]:
        return _wrap(await self.handle.query_selector(selector))

    async def query_all(self, selector: str) -> List[DomElement]:
        return [PageElement(h) for h in await self.handle.query_selector_all(selector)]

    async def dispatch_event(self, event_type: str, event_init: Dict[str, Any]) -> None:
        await self.handle.dispatch_event(event_type, event_init)

    async def same_as(self, other: DomElement) -> bool:
        if not isinstance(other, PageElement):
            return False
        return await self.handle.evaluate("(a, b) => a === b", other.handle)


def _wrap(handle: Optional[ElementHandle]) -> Optional[PageElement]:
    return PageElement(handle) if handle else None


class PageDocument(DomDocument):
    """DomDocument backed by a live Playwright page"""

    def __init__(self, page: Page):
        """
        Args:
            page: Playwright page showing the webmail UI
        """
        self.page = page
        self._listeners: List[MutationCallback] = []
        self._binding_exposed = False

    @property
    def location(self) -> str:
        return self.page.url

    async def query(self, selector: str) -> Optional[DomElement]:
        return _wrap(await self.page.query_selector(selector))

    async def query_all(self, selector: str) -> List[DomElement]:
        return [PageElement(h) for h in await self.page.query_selector_all(selector)]

    async def observe(self, callback: MutationCallback) -> Unsubscribe:
        if not self._binding_exposed:
            await self.page.expose_function(MUTATION_BINDING, self._on_mutation)
            self._binding_exposed = True

        # Re-run on every subscription: a navigation drops the observer
        await self.page.evaluate(OBSERVER_SCRIPT, MUTATION_BINDING)
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _on_mutation(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.debug(f"Mutation listener failed: {e}")
