"""Shared fixtures: an in-memory container runtime."""

from typing import Dict, List, Optional, Any

import pytest

from dockside.errors import ContainerRuntimeError
from dockside.models.config import LABEL_PROJECT, LABEL_SERVICE, LABEL_CONFIG
from dockside.models.request import CreateRequest, EndpointRequest
from dockside.models.state import ObservedContainer, ObservedState, ResolvedResources
from dockside.providers.base import RuntimeClient


class FakeRuntime(RuntimeClient):
    """Runtime that keeps containers, networks and volumes in dicts and records every call."""

    def __init__(self):
        self.containers: Dict[str, Dict[str, Any]] = {}
        self.networks: Dict[str, Dict[str, str]] = {}
        self.volumes: Dict[str, Dict[str, str]] = {}
        self.calls: List[tuple] = []
        self.fail_on: Dict[str, Exception] = {}
        self._counter = 0

    def _record(self, op: str, *args):
        self.calls.append((op, *args))
        if op in self.fail_on:
            raise self.fail_on[op]

    def ops(self) -> List[str]:
        return [call[0] for call in self.calls]

    def calls_of(self, op: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == op]

    def add_container(self, project: str, service: str, fingerprint: Optional[str], status: str = "running") -> str:
        """Seed a container as if an earlier run had created it."""
        self._counter += 1
        container_id = f"seed{self._counter:08d}"
        labels = {LABEL_PROJECT: project, LABEL_SERVICE: service}
        if fingerprint is not None:
            labels[LABEL_CONFIG] = fingerprint
        self.containers[container_id] = {
            "name": f"{project}_{service}_{self._counter}",
            "labels": labels,
            "status": status,
            "networks": [],
        }
        return container_id

    async def initialize(self, settings, registry) -> None:
        pass

    async def list_containers(self, project: str) -> ObservedState:
        self._record("list", project)
        observed: ObservedState = {}
        for container_id, c in self.containers.items():
            if c["labels"].get(LABEL_PROJECT) != project:
                continue
            service = c["labels"].get(LABEL_SERVICE, "")
            observed.setdefault(service, []).append(ObservedContainer(
                id=container_id,
                name=c["name"],
                project=project,
                service=service,
                fingerprint=c["labels"].get(LABEL_CONFIG),
                status=c["status"],
            ))
        return observed

    async def create(self, request: CreateRequest) -> str:
        self._record("create", request)
        self._counter += 1
        container_id = f"new{self._counter:09d}"
        self.containers[container_id] = {
            "name": request.name,
            "labels": dict(request.labels),
            "status": "created",
            "networks": [request.endpoint.network] if request.endpoint else [],
        }
        return container_id

    async def start(self, container_id: str) -> None:
        self._record("start", container_id)
        self.containers[container_id]["status"] = "running"

    async def remove(self, container_id: str) -> None:
        self._record("remove", container_id)
        self.containers.pop(container_id, None)

    async def connect_network(self, container_id: str, endpoint: EndpointRequest) -> None:
        self._record("connect", container_id, endpoint)
        self.containers[container_id]["networks"].append(endpoint.network)

    async def ensure_network(self, name, labels, driver=None, options=None, internal=False, attachable=False) -> str:
        self._record("ensure_network", name)
        self.networks.setdefault(name, dict(labels))
        return name

    async def ensure_volume(self, name, labels, driver=None, options=None) -> str:
        self._record("ensure_volume", name)
        self.volumes.setdefault(name, dict(labels))
        return name

    async def network_exists(self, name: str) -> bool:
        return name in self.networks

    async def volume_exists(self, name: str) -> bool:
        return name in self.volumes

    async def remove_networks(self, project: str) -> None:
        self._record("remove_networks", project)
        for name in [n for n, labels in self.networks.items() if labels.get(LABEL_PROJECT) == project]:
            del self.networks[name]

    async def remove_volumes(self, project: str) -> None:
        self._record("remove_volumes", project)
        for name in [n for n, labels in self.volumes.items() if labels.get(LABEL_PROJECT) == project]:
            del self.volumes[name]


@pytest.fixture
def runtime():
    """Empty in-memory runtime."""
    return FakeRuntime()


@pytest.fixture
def resolved():
    """Resources of a project that only uses its default network."""
    return ResolvedResources(
        networks={"default": "demo_default"},
        working_dir="/srv/demo",
    )


@pytest.fixture
def runtime_error():
    return ContainerRuntimeError("engine unavailable")
