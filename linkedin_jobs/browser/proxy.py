import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from linkedin_jobs.config.settings import Settings

logger = logging.getLogger(__name__)


class ProxyProvider(ABC):
    """
    Abstract base class for proxy providers.
    Each provider implements its own configuration logic.
    """

    def __init__(self, config: Settings):
        self.config = config

    @abstractmethod
    def get_config(self) -> Optional[Dict[str, str]]:
        """
        Returns a Playwright proxy dict ('server', optional 'username'/'password'),
        or None if the proxy cannot be configured.
        """

    @abstractmethod
    def get_name(self) -> str:
        """Returns the display name of this proxy provider."""


class NoProxyProvider(ProxyProvider):
    """Provider that explicitly disables proxy usage."""

    def get_config(self) -> Optional[Dict[str, str]]:
        return None

    def get_name(self) -> str:
        return "No Proxy"


class GenericProxyProvider(ProxyProvider):
    """
    Generic HTTP/SOCKS proxy provider.
    Requires PROXY_SERVER; PROXY_USERNAME and PROXY_PASSWORD are optional.
    """

    def get_config(self) -> Optional[Dict[str, str]]:
        if not self.config.PROXY_SERVER:
            logger.warning("PROXY_SERVER not set. Cannot use generic proxy.")
            return None

        logger.info(f"Using Generic Proxy: {self.config.PROXY_SERVER}")
        proxy = {"server": self.config.PROXY_SERVER}
        if self.config.PROXY_USERNAME:
            proxy["username"] = self.config.PROXY_USERNAME
        if self.config.PROXY_PASSWORD:
            proxy["password"] = self.config.PROXY_PASSWORD
        return proxy

    def get_name(self) -> str:
        return "Generic Proxy"


PROXY_PROVIDERS: Dict[str, Type[ProxyProvider]] = {
    "none": NoProxyProvider,
    "generic": GenericProxyProvider,
}


def get_proxy_config(config: Settings) -> Optional[Dict[str, str]]:
    """
    Build the proxy configuration for the browser context based on PROXY_PROVIDER.

    Unknown providers log an error and fall back to no proxy.
    """
    provider_name = (config.PROXY_PROVIDER or "none").lower()
    provider_class = PROXY_PROVIDERS.get(provider_name)

    if not provider_class:
        logger.error(
            f"Unknown proxy provider: '{provider_name}'. "
            f"Available providers: {', '.join(PROXY_PROVIDERS.keys())}"
        )
        return None

    return provider_class(config).get_config()
