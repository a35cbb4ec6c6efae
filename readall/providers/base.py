"""Base provider abstraction - one subclass per webmail front end

A provider knows how to find its webmail's controls and drives them through
the DOM primitives. The WorkflowOrchestrator sequences the operations.
"""

from abc import ABC, abstractmethod
from enum import Enum
from urllib.parse import urlparse
from loguru import logger

from readall.browser.document import DomDocument


READY_TIMEOUT_MS = 5000


class SelectScope(str, Enum):
    """Which messages select_all should pick on providers that support both"""

    # Unread messages only, through the selection menu; falls back to the
    # visible page. Never triggers the "select entire history" warning.
    UNREAD_ONLY = "unread"

    # Visible page, then the "select all N conversations" banner, then the
    # bulk-confirmation dialog
    FULL_HISTORY = "all"


def hostname_of(location: str) -> str:
    """Extract the lowercase hostname from a URL (empty string if none)"""
    return (urlparse(location).hostname or "").lower()


class BaseProvider(ABC):
    """Abstract base class for webmail providers"""

    # Hostname fragments this provider handles
    host_patterns: tuple = ()

    # Selectors signalling the message list has rendered
    ready_selectors: tuple = ()

    # Named selector groups reported by the snapshot probe
    probe_selectors: dict = {}

    def __init__(self, name: str, document: DomDocument):
        """
        Initialize provider

        Args:
            name: Display name (e.g. "Gmail")
            document: Document the provider reads and mutates
        """
        self.name = name
        self.document = document
        logger.debug(f"Initialized {name} provider")

    def is_applicable(self, location: str) -> bool:
        """
        Check whether this provider handles the given page.

        Pure hostname check, no DOM access.

        Args:
            location: Page URL
        """
        hostname = hostname_of(location)
        return any(pattern in hostname for pattern in self.host_patterns)

    @abstractmethod
    async def is_ready(self) -> bool:
        """
        Wait (bounded by READY_TIMEOUT_MS) for the message list to render.

        Returns:
            False on timeout; never raises for a missing marker
        """

    @abstractmethod
    async def select_all(self) -> None:
        """
        Select the messages to mark.

        Raises:
            ControlNotFoundError: if the selection control could not be located
        """

    @abstractmethod
    async def mark_as_read(self) -> None:
        """
        Mark the current selection as read.

        Raises:
            ControlNotFoundError: if no mark-as-read control could be located
        """

    @abstractmethod
    async def deselect_all(self) -> None:
        """Clear the selection. Misses are logged, never raised."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
