"""Offline, BeautifulSoup-backed implementation of the DOM capability surface.

Used by the snapshot probe (scripts/probe_snapshot.py) and by the test suite
to run the provider fallback chains without a rendering engine.

Layout is approximated from markup alone:
- an element is rendered unless it, or an ancestor, carries ``hidden`` or
  ``style="display: none"``
- vertical position comes from the nearest ``data-top`` attribute
  (ancestor-or-self), defaulting to 0

Dispatched events are recorded in ``events`` and delivered to listeners
registered with ``on()``. Listeners play the part of the host page and may
mutate the tree through the mutation helpers, which notify observers.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
from loguru import logger

from bs4 import BeautifulSoup, Tag

from readall.browser.document import DomDocument, DomElement, MutationCallback, Unsubscribe


DISPLAY_NONE = re.compile(r"display\s*:\s*none", re.IGNORECASE)


@dataclass
class SnapshotEvent:
    """A synthetic event dispatched on a snapshot element"""
    type: str
    target: "SnapshotElement"
    init: Dict[str, Any] = field(default_factory=dict)


EventHandler = Callable[[SnapshotEvent], None]


class SnapshotElement(DomElement):
    """DomElement wrapping a BeautifulSoup Tag"""

    def __init__(self, document: "SnapshotDocument", tag: Tag):
        self.document = document
        self.tag = tag

    def __repr__(self) -> str:
        attrs = " ".join(f'{k}="{self._attr(k)}"' for k in list(self.tag.attrs)[:3])
        return f"<SnapshotElement {self.tag.name} {attrs}>"

    def _attr(self, name: str) -> Optional[str]:
        value = self.tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    async def get_attribute(self, name: str) -> Optional[str]:
        return self._attr(name)

    async def text_content(self) -> str:
        return self.tag.get_text()

    async def is_rendered(self) -> bool:
        if not self.document.contains(self.tag):
            return False
        node = self.tag
        while isinstance(node, Tag) and node is not self.document.soup:
            if node.has_attr("hidden"):
                return False
            if DISPLAY_NONE.search(node.get("style", "")):
                return False
            node = node.parent
        return True

    async def top(self) -> float:
        node = self.tag
        while isinstance(node, Tag):
            if node.has_attr("data-top"):
                try:
                    return float(node["data-top"])
                except ValueError:
                    return 0.0
            node = node.parent
        return 0.0

    async def closest(self, selector: str) -> Optional[DomElement]:
        return self.document.wrap(self.tag.css.closest(selector))

    async def container(self, levels: int = 2) -> Optional[DomElement]:
        node = self.tag
        for _ in range(levels):
            if node is None:
                break
            node = node.parent
        if node is None or node is self.document.soup:
            return None
        return self.document.wrap(node)

    async def query(self, selector: str) -> Optional[DomElement]:
        return self.document.wrap(self.tag.select_one(selector))

    async def query_all(self, selector: str) -> List[DomElement]:
        return [self.document.wrap(t) for t in self.tag.select(selector)]

    async def dispatch_event(self, event_type: str, event_init: Dict[str, Any]) -> None:
        self.document.dispatch(SnapshotEvent(type=event_type, target=self, init=event_init))

    async def same_as(self, other: DomElement) -> bool:
        return isinstance(other, SnapshotElement) and other.tag is self.tag


class SnapshotDocument(DomDocument):
    """DomDocument backed by a parsed HTML snapshot"""

    def __init__(self, html: str, url: str = "about:blank"):
        """
        Args:
            html: Page markup
            url: Location reported to providers
        """
        self.soup = BeautifulSoup(html, "html.parser")
        self.url = url
        self.events: List[SnapshotEvent] = []
        self.mutation_count = 0
        self._observers: List[MutationCallback] = []
        self._handlers: List[tuple] = []

    @classmethod
    def from_file(cls, path: Union[str, Path], url: str = "about:blank") -> "SnapshotDocument":
        """Load a snapshot saved with the browser's "Save page as" or page.content()"""
        return cls(Path(path).read_text(encoding="utf-8"), url=url)

    @property
    def location(self) -> str:
        return self.url

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def wrap(self, tag: Optional[Tag]) -> Optional[SnapshotElement]:
        return SnapshotElement(self, tag) if tag is not None else None

    def contains(self, tag: Tag) -> bool:
        node = tag
        while node is not None:
            if node is self.soup:
                return True
            node = node.parent
        return False

    async def query(self, selector: str) -> Optional[DomElement]:
        return self.wrap(self.soup.select_one(selector))

    async def query_all(self, selector: str) -> List[DomElement]:
        return [self.wrap(t) for t in self.soup.select(selector)]

    async def observe(self, callback: MutationCallback) -> Unsubscribe:
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Host page simulation
    # -------------------------------------------------------------------------

    def on(self, selector: str, event_type: str, handler: EventHandler) -> None:
        """
        Register a delegated event handler.

        The handler fires for every dispatched event of event_type whose
        target, or one of its ancestors, matches selector at dispatch time.
        """
        self._handlers.append((selector, event_type, handler))

    def dispatch(self, event: SnapshotEvent) -> None:
        self.events.append(event)
        bubbles = event.init.get("bubbles", False)
        node = event.target.tag
        while isinstance(node, Tag) and node is not self.soup:
            for selector, event_type, handler in list(self._handlers):
                if event_type == event.type and node.css.match(selector):
                    handler(event)
            if not bubbles:
                break
            node = node.parent

    def notify(self) -> None:
        """Deliver a structural-change notification to every observer"""
        self.mutation_count += 1
        for callback in list(self._observers):
            callback()

    def set_attribute(self, selector: str, name: str, value: str) -> None:
        tag = self.soup.select_one(selector)
        if tag is None:
            logger.debug(f"set_attribute: nothing matches {selector}")
            return
        tag[name] = value
        self.mutation_count += 1

    def append_html(self, parent_selector: str, html: str) -> None:
        parent = self.soup.select_one(parent_selector)
        if parent is None:
            raise ValueError(f"No element matches {parent_selector}")
        fragment = BeautifulSoup(html, "html.parser")
        for child in list(fragment.contents):
            parent.append(child.extract())
        self.notify()

    def remove(self, selector: str) -> None:
        for tag in self.soup.select(selector):
            tag.extract()
        self.notify()
