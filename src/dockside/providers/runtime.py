"""Docker engine runtime client."""

import asyncio
import logging
from typing import Callable, Dict, Any, Optional, List, Tuple, TYPE_CHECKING

import docker
from docker.errors import DockerException, NotFound
from docker.types import Mount

from dockside.engine.fingerprint import read_fingerprint
from dockside.errors import ContainerRuntimeError
from dockside.models.config import LABEL_PROJECT, LABEL_SERVICE
from dockside.models.request import CreateRequest, EndpointRequest
from dockside.models.state import ObservedContainer, ObservedState
from dockside.providers.base import RuntimeClient

if TYPE_CHECKING:
    from dockside.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


def project_filter(project: str) -> Dict[str, List[str]]:
    """Label filter selecting the resources of one project."""
    return {"label": [f"{LABEL_PROJECT}={project}"]}


def _exposed_port(key: str) -> Tuple[str, str]:
    port, _, proto = key.partition("/")
    return port, proto or "tcp"


class DockerRuntime(RuntimeClient):
    """Runtime client backed by the docker SDK.

    SDK calls block, so each one is pushed to a worker thread and awaited
    before the next is issued.
    """

    def __init__(self, client: Optional[docker.DockerClient] = None):
        """Initialize runtime client."""
        self.client = client
        self.stop_timeout = 10

    async def initialize(self, settings, registry: "ProviderRegistry") -> None:
        """Connect to the engine configured by the environment."""
        self.stop_timeout = settings.stop_timeout
        if self.client is None:
            self.client = await self._call("connect to the Docker engine", docker.from_env)
        logger.debug("Docker runtime initialized")

    async def _call(self, action: str, func: Callable[..., Any], *args, **kwargs) -> Any:
        """Run a blocking SDK call in a thread, translating SDK errors."""
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except DockerException as e:
            logger.error(f"Failed to {action}: {e}")
            raise ContainerRuntimeError(f"Failed to {action}: {e}") from e

    async def list_containers(self, project: str) -> ObservedState:
        """Collect containers of the project grouped by their service label."""
        containers = await self._call(
            f"list containers of project {project}",
            self.client.containers.list,
            all=True,
            filters=project_filter(project),
        )

        observed: ObservedState = {}
        for container in containers:
            labels = container.labels or {}
            service = labels.get(LABEL_SERVICE, "")
            if not service:
                logger.warning(f"Container {container.name} has no service label")
            observed.setdefault(service, []).append(
                ObservedContainer(
                    id=container.id,
                    name=container.name,
                    project=project,
                    service=service,
                    fingerprint=read_fingerprint(labels),
                    status=container.status,
                )
            )

        logger.debug(f"Observed {len(containers)} containers for project {project}")
        return observed

    async def create(self, request: CreateRequest) -> str:
        """Create a container from a request."""
        api = self.client.api

        def _create() -> str:
            host_config = api.create_host_config(
                network_mode=request.network_mode,
                restart_policy=request.restart_policy or None,
                mounts=[
                    Mount(
                        target=m.target,
                        source=m.source,
                        type=m.type,
                        read_only=m.read_only,
                    )
                    for m in request.mounts
                ],
                port_bindings={
                    key: [
                        {"HostIp": b.host_ip or "", "HostPort": str(b.host_port or "")}
                        for b in bindings
                    ]
                    for key, bindings in request.port_bindings.items()
                },
                cap_add=request.cap_add or None,
                cap_drop=request.cap_drop or None,
                dns=request.dns or None,
                dns_search=request.dns_search or None,
                extra_hosts=request.extra_hosts or None,
                links=request.links or None,
                ipc_mode=request.ipc_mode,
                pid_mode=request.pid_mode,
                privileged=request.privileged,
                read_only=request.read_only,
                security_opt=request.security_opt or None,
                userns_mode=request.userns_mode,
                shm_size=request.shm_size,
                sysctls=request.sysctls or None,
                isolation=request.isolation,
                init=request.init,
            )

            networking_config = None
            if request.endpoint:
                networking_config = api.create_networking_config({
                    request.endpoint.network: api.create_endpoint_config(
                        aliases=request.endpoint.aliases or None,
                        ipv4_address=request.endpoint.ipv4_address,
                        ipv6_address=request.endpoint.ipv6_address,
                    )
                })

            created = api.create_container(
                request.image,
                command=request.command,
                entrypoint=request.entrypoint,
                name=request.name,
                hostname=request.hostname,
                domainname=request.domainname,
                user=request.user,
                working_dir=request.working_dir,
                tty=request.tty,
                stdin_open=request.stdin_open,
                environment=request.environment,
                labels=request.labels,
                mac_address=request.mac_address,
                stop_signal=request.stop_signal,
                network_disabled=request.network_disabled,
                ports=[_exposed_port(p) for p in request.exposed_ports] or None,
                host_config=host_config,
                networking_config=networking_config,
            )
            return created["Id"]

        container_id = await self._call(f"create container {request.name}", _create)
        logger.debug(f"Created container {request.name} ({container_id})")
        return container_id

    async def start(self, container_id: str) -> None:
        """Start a container."""
        await self._call(f"start container {container_id}", self.client.api.start, container_id)

    async def remove(self, container_id: str) -> None:
        """Stop then remove a container. A container that is already gone is not an error."""
        api = self.client.api

        def _remove() -> None:
            try:
                api.stop(container_id, timeout=self.stop_timeout)
                api.remove_container(container_id)
            except NotFound:
                logger.debug(f"Container {container_id} already removed")

        await self._call(f"remove container {container_id}", _remove)

    async def connect_network(self, container_id: str, endpoint: EndpointRequest) -> None:
        """Connect a container to a network."""
        await self._call(
            f"connect container {container_id} to network {endpoint.network}",
            self.client.api.connect_container_to_network,
            container_id,
            endpoint.network,
            aliases=endpoint.aliases or None,
            ipv4_address=endpoint.ipv4_address,
            ipv6_address=endpoint.ipv6_address,
        )

    async def ensure_network(
        self,
        name: str,
        labels: Dict[str, str],
        driver: Optional[str] = None,
        options: Optional[Dict[str, str]] = None,
        internal: bool = False,
        attachable: bool = False,
    ) -> str:
        """Create the network if missing."""
        def _ensure() -> str:
            try:
                self.client.networks.get(name)
                logger.debug(f"Network {name} already exists")
            except NotFound:
                self.client.networks.create(
                    name,
                    driver=driver,
                    options=options or None,
                    labels=labels,
                    internal=internal,
                    attachable=attachable,
                )
                logger.info(f"Created network {name}")
            return name

        return await self._call(f"create network {name}", _ensure)

    async def ensure_volume(
        self,
        name: str,
        labels: Dict[str, str],
        driver: Optional[str] = None,
        options: Optional[Dict[str, str]] = None,
    ) -> str:
        """Create the volume if missing."""
        def _ensure() -> str:
            try:
                self.client.volumes.get(name)
                logger.debug(f"Volume {name} already exists")
            except NotFound:
                kwargs: Dict[str, Any] = {"name": name, "labels": labels}
                if driver:
                    kwargs["driver"] = driver
                if options:
                    kwargs["driver_opts"] = options
                self.client.volumes.create(**kwargs)
                logger.info(f"Created volume {name}")
            return name

        return await self._call(f"create volume {name}", _ensure)

    async def network_exists(self, name: str) -> bool:
        def _exists() -> bool:
            try:
                self.client.networks.get(name)
                return True
            except NotFound:
                return False

        return await self._call(f"inspect network {name}", _exists)

    async def volume_exists(self, name: str) -> bool:
        def _exists() -> bool:
            try:
                self.client.volumes.get(name)
                return True
            except NotFound:
                return False

        return await self._call(f"inspect volume {name}", _exists)

    async def remove_networks(self, project: str) -> None:
        """Remove networks created for the project."""
        networks = await self._call(
            f"list networks of project {project}",
            self.client.networks.list,
            filters=project_filter(project),
        )
        for network in networks:
            logger.info(f"Removing network {network.name}")
            await self._call(f"remove network {network.name}", network.remove)

    async def remove_volumes(self, project: str) -> None:
        """Remove volumes created for the project."""
        volumes = await self._call(
            f"list volumes of project {project}",
            self.client.volumes.list,
            filters=project_filter(project),
        )
        for volume in volumes:
            logger.info(f"Removing volume {volume.name}")
            await self._call(f"remove volume {volume.name}", volume.remove)
