"""Runtime and shared-resource providers."""

from dockside.providers.base import BaseProvider, RuntimeClient, ResourceResolver
from dockside.providers.registry import ProviderRegistry

__all__ = [
    "BaseProvider",
    "RuntimeClient",
    "ResourceResolver",
    "ProviderRegistry",
]
