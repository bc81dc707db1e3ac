"""Resolution of networks, volumes, configs and secrets."""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional, TYPE_CHECKING

from dockside.errors import ContainerRuntimeError, ResourceError
from dockside.models.config import LABEL_PROJECT
from dockside.models.project import ProjectSpec, FileObjectSpec
from dockside.models.state import ResolvedResources
from dockside.providers.base import ResourceResolver, RuntimeClient

if TYPE_CHECKING:
    from dockside.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "default"


def scoped_name(project: str, name: str) -> str:
    """Runtime name of a project-scoped resource."""
    return f"{project}_{name}"


class DockerResourceResolver(ResourceResolver):
    """Creates missing project networks and volumes, and locates config and secret files."""

    def __init__(self, runtime: Optional[RuntimeClient] = None):
        """Initialize resolver."""
        self._runtime = runtime

    async def initialize(self, settings, registry: "ProviderRegistry") -> None:
        """Pick up the runtime provider from the registry."""
        if self._runtime is None:
            self._runtime = registry.get_provider("runtime")

    @property
    def runtime(self) -> RuntimeClient:
        if self._runtime is None:
            raise ResourceError("Resource resolver has no runtime client")
        return self._runtime

    async def resolve(self, project: str, spec: ProjectSpec) -> ResolvedResources:
        """Resolve every shared resource the project declares.

        Safe to call on every run: existing resources are reused.
        """
        logger.info(f"Resolving shared resources for project {project}")
        try:
            networks = await self._resolve_networks(project, spec)
            volumes = await self._resolve_volumes(project, spec)
        except ContainerRuntimeError as e:
            raise ResourceError(str(e)) from e

        working_dir = Path(spec.working_dir)
        configs = await self._resolve_files("config", spec.configs, working_dir)
        secrets = await self._resolve_files("secret", spec.secrets, working_dir)

        return ResolvedResources(
            networks=networks,
            volumes=volumes,
            configs=configs,
            secrets=secrets,
            working_dir=str(working_dir),
        )

    async def _resolve_networks(self, project: str, spec: ProjectSpec) -> Dict[str, str]:
        labels = {LABEL_PROJECT: project}
        resolved: Dict[str, str] = {}

        declared = dict(spec.networks)
        if DEFAULT_NETWORK not in declared and spec.uses_default_network():
            declared = {DEFAULT_NETWORK: None, **declared}

        for name, network in declared.items():
            if network is not None and network.external:
                runtime_name = network.name or name
                if not await self.runtime.network_exists(runtime_name):
                    raise ResourceError(f"External network {runtime_name} not found")
                resolved[name] = runtime_name
                continue

            runtime_name = (network.name if network else None) or scoped_name(project, name)
            resolved[name] = await self.runtime.ensure_network(
                runtime_name,
                labels={**(network.labels if network else {}), **labels},
                driver=network.driver if network else None,
                options=network.driver_opts if network else None,
                internal=network.internal if network else False,
                attachable=network.attachable if network else False,
            )

        return resolved

    async def _resolve_volumes(self, project: str, spec: ProjectSpec) -> Dict[str, str]:
        labels = {LABEL_PROJECT: project}
        resolved: Dict[str, str] = {}

        for name, volume in spec.volumes.items():
            if volume.external:
                runtime_name = volume.name or name
                if not await self.runtime.volume_exists(runtime_name):
                    raise ResourceError(f"External volume {runtime_name} not found")
                resolved[name] = runtime_name
                continue

            resolved[name] = await self.runtime.ensure_volume(
                volume.name or scoped_name(project, name),
                labels={**volume.labels, **labels},
                driver=volume.driver,
                options=volume.driver_opts,
            )

        return resolved

    async def _resolve_files(
        self, kind: str, objects: Dict[str, FileObjectSpec], working_dir: Path
    ) -> Dict[str, str]:
        """Absolute host paths of file-backed configs or secrets."""
        resolved: Dict[str, str] = {}
        for name, obj in objects.items():
            if obj.external:
                raise ResourceError(f"External {kind} {name} is not supported; use a file")

            path = Path(obj.file).expanduser()
            if not path.is_absolute():
                path = working_dir / path
            path = path.resolve()

            if not await asyncio.to_thread(path.exists):
                raise ResourceError(f"File for {kind} {name} not found: {path}")
            resolved[name] = str(path)
            logger.debug(f"Resolved {kind} {name} to {path}")

        return resolved
