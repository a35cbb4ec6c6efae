"""Minimal DOM capability surface used by the automation engine.

The providers never touch Playwright (or any other DOM implementation)
directly. They read, observe and mutate the page through these two
interfaces so that the same fallback chains run against:

- a live Playwright page (readall/browser/page_document.py)
- an offline HTML snapshot (readall/browser/snapshot_document.py)

Element references are only valid until the host page re-renders, so
callers re-query instead of holding on to elements across pauses.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional


# Callback invoked whenever the document body's subtree changes
MutationCallback = Callable[[], None]

# Returned by DomDocument.observe(); calling it cancels the subscription
Unsubscribe = Callable[[], None]


class DomElement(ABC):
    """A single element in the host document"""

    @abstractmethod
    async def get_attribute(self, name: str) -> Optional[str]:
        """Return the attribute value, or None if the attribute is absent"""

    @abstractmethod
    async def text_content(self) -> str:
        """Return the element's text content (never None)"""

    @abstractmethod
    async def is_rendered(self) -> bool:
        """
        Whether the element currently has a rendered box.

        Mirrors the browser's ``offsetParent !== null`` check: hidden
        elements and elements inside hidden ancestors are not rendered.
        """

    @abstractmethod
    async def top(self) -> float:
        """Vertical position of the element's box (viewport coordinates)"""

    @abstractmethod
    async def closest(self, selector: str) -> Optional["DomElement"]:
        """Return the nearest ancestor-or-self matching selector"""

    @abstractmethod
    async def container(self, levels: int = 2) -> Optional["DomElement"]:
        """Return the ancestor ``levels`` steps up, or None"""

    @abstractmethod
    async def query(self, selector: str) -> Optional["DomElement"]:
        """Return the first descendant matching selector"""

    @abstractmethod
    async def query_all(self, selector: str) -> List["DomElement"]:
        """Return all descendants matching selector, in document order"""

    @abstractmethod
    async def dispatch_event(self, event_type: str, event_init: Dict[str, Any]) -> None:
        """Dispatch a synthetic DOM event on this element"""

    @abstractmethod
    async def same_as(self, other: "DomElement") -> bool:
        """Whether both references point at the same DOM node"""


class DomDocument(ABC):
    """The host page's document"""

    @property
    @abstractmethod
    def location(self) -> str:
        """Current page URL"""

    @abstractmethod
    async def query(self, selector: str) -> Optional[DomElement]:
        """Return the first element matching selector"""

    @abstractmethod
    async def query_all(self, selector: str) -> List[DomElement]:
        """Return all elements matching selector, in document order"""

    @abstractmethod
    async def observe(self, callback: MutationCallback) -> Unsubscribe:
        """
        Subscribe to structural changes (child list, whole subtree) of the body.

        Args:
            callback: Called with no arguments after each batch of changes

        Returns:
            A function that cancels the subscription. Calling it twice is
            harmless.
        """
