"""Provider registry for routing a page to the correct webmail provider"""

from typing import List, Optional
from loguru import logger

from readall.browser.document import DomDocument
from .base import BaseProvider, SelectScope
from .gmail_provider import GmailProvider
from .outlook_provider import OutlookProvider
from .yahoo_provider import YahooProvider


class ProviderRegistry:
    """Ordered registry of provider implementations"""

    def __init__(
        self,
        document: DomDocument,
        gmail_scope: SelectScope = SelectScope.UNREAD_ONLY,
        register_defaults: bool = True
    ):
        """
        Initialize provider registry

        Args:
            document: Document every registered provider operates on
            gmail_scope: Selection scope for the Gmail provider
            register_defaults: Register Gmail, Outlook and Yahoo
        """
        self.document = document
        self.providers: List[BaseProvider] = []
        if register_defaults:
            self._register_defaults(gmail_scope)
        logger.debug("Provider registry initialized")

    def _register_defaults(self, gmail_scope: SelectScope):
        """Register default provider implementations"""
        self.register(GmailProvider(self.document, select_scope=gmail_scope))
        self.register(OutlookProvider(self.document))
        self.register(YahooProvider(self.document))

    def register(self, provider: BaseProvider):
        """
        Register a provider. Earlier registrations win on overlapping matches.

        Args:
            provider: Provider instance
        """
        self.providers.append(provider)
        logger.debug(f"Registered provider: {provider.name}")

    def resolve(self, location: Optional[str] = None) -> Optional[BaseProvider]:
        """
        Find the provider for a page.

        Args:
            location: Page URL (defaults to the document's location)

        Returns:
            First provider whose is_applicable() matches, or None
        """
        if location is None:
            location = self.document.location

        for provider in self.providers:
            if provider.is_applicable(location):
                return provider
        return None

    def get(self, name: str) -> Optional[BaseProvider]:
        """
        Get a provider by display name

        Args:
            name: Provider name (case-insensitive)

        Returns:
            Provider instance or None
        """
        name_lower = name.lower()
        for provider in self.providers:
            if provider.name.lower() == name_lower:
                return provider

        logger.warning(f"Provider {name} not registered")
        return None

    @property
    def names(self) -> List[str]:
        return [provider.name for provider in self.providers]
