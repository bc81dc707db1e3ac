"""Pydantic models for configuration and runtime state."""

from dockside.models.config import DocksideSettings, LABEL_PROJECT, LABEL_SERVICE, LABEL_CONFIG
from dockside.models.service import (
    ServiceSpec,
    MountSpec,
    FileReferenceSpec,
    NetworkAttachment,
    PortSpec,
)
from dockside.models.project import ProjectSpec, NetworkSpec, VolumeSpec, FileObjectSpec
from dockside.models.state import ObservedContainer, ObservedState, ResolvedResources
from dockside.models.request import CreateRequest, MountRequest, EndpointRequest, PortBinding

__all__ = [
    "DocksideSettings",
    "LABEL_PROJECT",
    "LABEL_SERVICE",
    "LABEL_CONFIG",
    "ServiceSpec",
    "MountSpec",
    "FileReferenceSpec",
    "NetworkAttachment",
    "PortSpec",
    "ProjectSpec",
    "NetworkSpec",
    "VolumeSpec",
    "FileObjectSpec",
    "ObservedContainer",
    "ObservedState",
    "ResolvedResources",
    "CreateRequest",
    "MountRequest",
    "EndpointRequest",
    "PortBinding",
]
