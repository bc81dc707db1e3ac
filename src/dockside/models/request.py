"""Container creation requests handed to the runtime client."""

from typing import Literal, Optional, Dict, List, Any

from pydantic import BaseModel, ConfigDict, Field


class MountRequest(BaseModel):
    """A mount with its source already resolved."""
    model_config = ConfigDict(frozen=True)

    type: Literal["bind", "volume", "tmpfs"]
    source: Optional[str] = None
    target: str
    read_only: bool = False


class EndpointRequest(BaseModel):
    """Attachment of a container to one network."""
    model_config = ConfigDict(frozen=True)

    network: str = Field(..., description="Runtime network name")
    aliases: List[str] = Field(default_factory=list)
    ipv4_address: Optional[str] = None
    ipv6_address: Optional[str] = None


class PortBinding(BaseModel):
    """Host side of a published port."""
    model_config = ConfigDict(frozen=True)

    host_ip: Optional[str] = None
    host_port: Optional[int] = None


class CreateRequest(BaseModel):
    """Everything the runtime needs to create one container."""
    model_config = ConfigDict(frozen=True)

    name: str
    image: str
    command: Optional[List[str]] = None
    entrypoint: Optional[List[str]] = None
    environment: Dict[str, str] = Field(default_factory=dict)
    labels: Dict[str, str] = Field(default_factory=dict)
    hostname: Optional[str] = None
    domainname: Optional[str] = None
    user: Optional[str] = None
    working_dir: Optional[str] = None
    tty: bool = False
    stdin_open: bool = False
    mac_address: Optional[str] = None
    stop_signal: Optional[str] = None
    network_disabled: bool = False
    exposed_ports: List[str] = Field(default_factory=list)

    # Host configuration
    network_mode: Optional[str] = None
    restart_policy: Dict[str, Any] = Field(default_factory=dict)
    mounts: List[MountRequest] = Field(default_factory=list)
    port_bindings: Dict[str, List[PortBinding]] = Field(default_factory=dict)
    cap_add: List[str] = Field(default_factory=list)
    cap_drop: List[str] = Field(default_factory=list)
    dns: List[str] = Field(default_factory=list)
    dns_search: List[str] = Field(default_factory=list)
    extra_hosts: List[str] = Field(default_factory=list)
    links: Dict[str, str] = Field(default_factory=dict)
    ipc_mode: Optional[str] = None
    pid_mode: Optional[str] = None
    privileged: bool = False
    read_only: bool = False
    security_opt: List[str] = Field(default_factory=list)
    userns_mode: Optional[str] = None
    shm_size: Optional[int] = None
    sysctls: Dict[str, str] = Field(default_factory=dict)
    isolation: Optional[str] = None
    init: Optional[bool] = None

    # Network joined at creation time; further networks are connected afterwards.
    endpoint: Optional[EndpointRequest] = None
