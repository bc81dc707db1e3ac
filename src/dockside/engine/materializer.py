"""Translation of a service specification into a running container."""

import logging
import secrets
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from docker.errors import DockerException
from docker.utils import parse_bytes

from dockside.engine.fingerprint import fingerprint
from dockside.errors import ConfigError, ResourceError
from dockside.models.config import LABEL_PROJECT, LABEL_SERVICE, LABEL_CONFIG
from dockside.models.request import CreateRequest, EndpointRequest, MountRequest, PortBinding
from dockside.models.service import ServiceSpec
from dockside.models.state import ResolvedResources
from dockside.providers.base import RuntimeClient
from dockside.providers.resources import DEFAULT_NETWORK


logger = logging.getLogger(__name__)

SECRETS_DIR = "/run/secrets"


def parse_shm_size(value: Optional[str]) -> Optional[int]:
    """Byte count of a size such as ``128m``."""
    if value is None or value == "":
        return None
    try:
        return int(parse_bytes(value))
    except (DockerException, ValueError) as e:
        raise ConfigError(f"Invalid size '{value}': {e}") from e


def parse_restart_policy(restart: str) -> Dict[str, object]:
    name, _, retries = restart.partition(":")
    policy: Dict[str, object] = {"Name": name}
    if retries:
        policy["MaximumRetryCount"] = int(retries)
    return policy


def parse_links(links: List[str]) -> Dict[str, str]:
    parsed = {}
    for link in links:
        name, _, alias = link.partition(":")
        parsed[name] = alias or name
    return parsed


class ServiceMaterializer:
    """Builds creation requests and drives create, connect and start."""

    def __init__(self, runtime: RuntimeClient):
        """Initialize materializer."""
        self.runtime = runtime

    async def materialize(self, spec: ServiceSpec, resolved: ResolvedResources, project: str) -> str:
        """Create, attach and start one container for the service.

        Any failure propagates as-is; a container that was created before the
        failure is left in place.
        """
        request, extra_endpoints = self.plan(spec, resolved, project)

        logger.info(f"Creating container for service {spec.name}")
        container_id = await self.runtime.create(request)

        for endpoint in extra_endpoints:
            logger.info(f"Connecting {request.name} to network {endpoint.network}")
            await self.runtime.connect_network(container_id, endpoint)

        await self.runtime.start(container_id)
        logger.info(f"Started container {request.name} ({container_id[:12]})")
        return container_id

    def plan(
        self, spec: ServiceSpec, resolved: ResolvedResources, project: str
    ) -> Tuple[CreateRequest, List[EndpointRequest]]:
        """Creation request plus the networks to connect after creation."""
        labels = dict(spec.labels)
        labels[LABEL_PROJECT] = project
        labels[LABEL_SERVICE] = spec.name
        labels[LABEL_CONFIG] = fingerprint(spec)

        network_mode, network_disabled, endpoints = self._networking(spec, resolved)
        exposed_ports, port_bindings = self._ports(spec)

        request = CreateRequest(
            name=f"{project}_{spec.name}_{secrets.token_hex(3)}",
            image=spec.image,
            command=spec.command,
            entrypoint=spec.entrypoint,
            environment=spec.environment,
            labels=labels,
            hostname=spec.hostname,
            domainname=spec.domainname,
            user=spec.user,
            working_dir=spec.working_dir,
            tty=spec.tty,
            stdin_open=spec.stdin_open,
            mac_address=spec.mac_address,
            stop_signal=spec.stop_signal,
            network_disabled=network_disabled,
            exposed_ports=exposed_ports,
            network_mode=network_mode,
            restart_policy=parse_restart_policy(spec.restart),
            mounts=self._mounts(spec, resolved),
            port_bindings=port_bindings,
            cap_add=spec.cap_add,
            cap_drop=spec.cap_drop,
            dns=spec.dns,
            dns_search=spec.dns_search,
            extra_hosts=spec.extra_hosts,
            links=parse_links(spec.links),
            ipc_mode=spec.ipc,
            pid_mode=spec.pid,
            privileged=spec.privileged,
            read_only=spec.read_only,
            security_opt=spec.security_opt,
            userns_mode=spec.userns_mode,
            shm_size=parse_shm_size(spec.shm_size),
            sysctls=spec.sysctls,
            isolation=spec.isolation,
            init=spec.init,
            endpoint=endpoints[0] if endpoints else None,
        )
        return request, endpoints[1:]

    def _mounts(self, spec: ServiceSpec, resolved: ResolvedResources) -> List[MountRequest]:
        """Service mounts, then config files, then secret files."""
        working_dir = Path(resolved.working_dir)
        mounts = []

        for mount in spec.volumes:
            source = mount.source
            if mount.type == "bind":
                path = Path(source).expanduser()
                if not path.is_absolute():
                    path = working_dir / path
                source = str(path.resolve())
            elif mount.type == "volume" and source:
                if source not in resolved.volumes:
                    raise ResourceError(f"Volume {source} for service {spec.name} was not resolved")
                source = resolved.volumes[source]
            mounts.append(MountRequest(
                type=mount.type, source=source, target=mount.target, read_only=mount.read_only
            ))

        for ref in spec.configs:
            if ref.source not in resolved.configs:
                raise ResourceError(f"Config {ref.source} for service {spec.name} was not resolved")
            mounts.append(MountRequest(
                type="bind",
                source=resolved.configs[ref.source],
                target=ref.target or f"/{ref.source}",
                read_only=True,
            ))

        for ref in spec.secrets:
            if ref.source not in resolved.secrets:
                raise ResourceError(f"Secret {ref.source} for service {spec.name} was not resolved")
            target = ref.target or ref.source
            if not target.startswith("/"):
                target = f"{SECRETS_DIR}/{target}"
            mounts.append(MountRequest(
                type="bind",
                source=resolved.secrets[ref.source],
                target=target,
                read_only=True,
            ))

        return mounts

    def _networking(
        self, spec: ServiceSpec, resolved: ResolvedResources
    ) -> Tuple[Optional[str], bool, List[EndpointRequest]]:
        """Network mode, whether networking is disabled, and endpoints in declaration order."""
        if spec.network_mode:
            if spec.network_mode.startswith("service:"):
                raise ConfigError(f"network_mode {spec.network_mode} of {spec.name} is not supported")
            if spec.network_mode == "disabled":
                return "none", True, []
            return spec.network_mode, False, []

        attachments = spec.networks or {DEFAULT_NETWORK: None}
        endpoints = []
        for name, attachment in attachments.items():
            if name not in resolved.networks:
                raise ResourceError(f"Network {name} for service {spec.name} was not resolved")
            endpoints.append(EndpointRequest(
                network=resolved.networks[name],
                aliases=[spec.name, *(attachment.aliases if attachment else [])],
                ipv4_address=attachment.ipv4_address if attachment else None,
                ipv6_address=attachment.ipv6_address if attachment else None,
            ))

        return endpoints[0].network, False, endpoints

    def _ports(self, spec: ServiceSpec) -> Tuple[List[str], Dict[str, List[PortBinding]]]:
        """Exposed port keys and host bindings.

        Every ``ports`` entry is bound; one without a published port gets an
        engine-assigned host port. ``expose`` entries are never bound.
        """
        exposed: List[str] = []
        bindings: Dict[str, List[PortBinding]] = {}

        for port in spec.ports:
            if port.key not in exposed:
                exposed.append(port.key)
            bindings.setdefault(port.key, []).append(
                PortBinding(host_ip=port.host_ip, host_port=port.published)
            )

        for entry in spec.expose:
            key = entry if "/" in entry else f"{entry}/tcp"
            if key not in exposed:
                exposed.append(key)

        return exposed, bindings
