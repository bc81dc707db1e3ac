"""Provider interfaces for the container runtime and shared resources."""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, TYPE_CHECKING

from dockside.models.project import ProjectSpec
from dockside.models.request import CreateRequest, EndpointRequest
from dockside.models.state import ObservedState, ResolvedResources

if TYPE_CHECKING:
    from dockside.providers.registry import ProviderRegistry


class BaseProvider(ABC):
    """Base provider interface that all providers must implement."""

    @abstractmethod
    async def initialize(self, settings: Any, registry: "ProviderRegistry") -> None:
        """Initialize the provider with settings and its sibling providers."""
        pass


class RuntimeClient(BaseProvider):
    """Primitive operations against a container runtime.

    Every method raises ContainerRuntimeError on failure.
    """

    @abstractmethod
    async def list_containers(self, project: str) -> ObservedState:
        """All containers of a project, running or not, grouped by service."""
        pass

    @abstractmethod
    async def create(self, request: CreateRequest) -> str:
        """Create a container and return its id. Does not start it."""
        pass

    @abstractmethod
    async def start(self, container_id: str) -> None:
        """Start a created container."""
        pass

    @abstractmethod
    async def remove(self, container_id: str) -> None:
        """Stop and remove a container."""
        pass

    @abstractmethod
    async def connect_network(self, container_id: str, endpoint: EndpointRequest) -> None:
        """Attach an existing container to one more network."""
        pass

    @abstractmethod
    async def ensure_network(
        self,
        name: str,
        labels: Dict[str, str],
        driver: Optional[str] = None,
        options: Optional[Dict[str, str]] = None,
        internal: bool = False,
        attachable: bool = False,
    ) -> str:
        """Create the network unless it exists; return its name."""
        pass

    @abstractmethod
    async def ensure_volume(
        self,
        name: str,
        labels: Dict[str, str],
        driver: Optional[str] = None,
        options: Optional[Dict[str, str]] = None,
    ) -> str:
        """Create the volume unless it exists; return its name."""
        pass

    @abstractmethod
    async def network_exists(self, name: str) -> bool:
        pass

    @abstractmethod
    async def volume_exists(self, name: str) -> bool:
        pass

    @abstractmethod
    async def remove_networks(self, project: str) -> None:
        """Remove every network labelled with the project."""
        pass

    @abstractmethod
    async def remove_volumes(self, project: str) -> None:
        """Remove every volume labelled with the project."""
        pass


class ResourceResolver(BaseProvider):
    """Turns declared shared resources into runtime identifiers."""

    @abstractmethod
    async def resolve(self, project: str, spec: ProjectSpec) -> ResolvedResources:
        """Resolve, creating missing resources. Raises ResourceError."""
        pass
