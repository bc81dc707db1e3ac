"""Service specification models."""

import os
import re
import shlex
from typing import Literal, Optional, Dict, List, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


RESTART_RE = re.compile(r"^(no|always|unless-stopped|on-failure(:\d+)?)$")
PORT_RE = re.compile(
    r"^(?:(?:(?P<host_ip>[^:]+):)?(?P<published>\d*):)?(?P<target>\d+)(?:/(?P<protocol>tcp|udp|sctp))?$"
)


def _is_path(source: str) -> bool:
    return source.startswith((".", "/", "~"))


class MountSpec(BaseModel):
    """A bind, volume or tmpfs mount."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["bind", "volume", "tmpfs"] = Field(default="volume")
    source: Optional[str] = Field(None, description="Host path or named volume")
    target: str = Field(..., description="Path inside the container")
    read_only: bool = Field(default=False)

    @model_validator(mode="before")
    @classmethod
    def parse_short_syntax(cls, data: Any) -> Any:
        """Accept ``source:target[:mode]`` strings."""
        if not isinstance(data, str):
            return data
        parts = data.split(":")
        if len(parts) == 1:
            return {"type": "volume", "target": parts[0]}
        if len(parts) > 3:
            raise ValueError(f"Invalid volume specification: {data}")
        source, target = parts[0], parts[1]
        mode = parts[2] if len(parts) == 3 else "rw"
        if mode not in ("ro", "rw"):
            raise ValueError(f"Invalid volume mode '{mode}' in {data}")
        return {
            "type": "bind" if _is_path(source) else "volume",
            "source": source,
            "target": target,
            "read_only": mode == "ro",
        }

    @model_validator(mode="after")
    def check_source(self) -> "MountSpec":
        if self.type == "bind" and not self.source:
            raise ValueError(f"Bind mount for {self.target} needs a source")
        if self.type == "tmpfs" and self.source:
            raise ValueError(f"tmpfs mount for {self.target} cannot have a source")
        return self


class FileReferenceSpec(BaseModel):
    """Reference from a service to a top-level config or secret."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    source: str = Field(..., description="Name of the config or secret")
    target: Optional[str] = Field(None, description="Path inside the container")

    @model_validator(mode="before")
    @classmethod
    def parse_short_syntax(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"source": data}
        return data


class NetworkAttachment(BaseModel):
    """Per-service options for one attached network."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    aliases: List[str] = Field(default_factory=list)
    ipv4_address: Optional[str] = None
    ipv6_address: Optional[str] = None


class PortSpec(BaseModel):
    """A container port, optionally published on the host."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    target: int = Field(..., ge=1, le=65535)
    published: Optional[int] = Field(None, ge=0, le=65535)
    protocol: Literal["tcp", "udp", "sctp"] = Field(default="tcp")
    host_ip: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def parse_short_syntax(cls, data: Any) -> Any:
        """Accept ``[[host_ip:]published:]target[/protocol]`` strings."""
        if isinstance(data, int):
            return {"target": data}
        if not isinstance(data, str):
            return data
        match = PORT_RE.match(data.strip())
        if not match:
            raise ValueError(f"Invalid port specification: {data}")
        parsed: Dict[str, Any] = {"target": int(match.group("target"))}
        if match.group("published"):
            parsed["published"] = int(match.group("published"))
        if match.group("protocol"):
            parsed["protocol"] = match.group("protocol")
        if match.group("host_ip"):
            parsed["host_ip"] = match.group("host_ip")
        return parsed

    @property
    def key(self) -> str:
        """Port key as the engine API spells it, e.g. ``80/tcp``."""
        return f"{self.target}/{self.protocol}"


class ServiceSpec(BaseModel):
    """Desired configuration of one service."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., description="Service name")
    image: str = Field(..., description="Image reference")
    command: Optional[List[str]] = None
    entrypoint: Optional[List[str]] = None
    environment: Dict[str, str] = Field(default_factory=dict)
    labels: Dict[str, str] = Field(default_factory=dict)

    # Storage
    volumes: List[MountSpec] = Field(default_factory=list)
    configs: List[FileReferenceSpec] = Field(default_factory=list)
    secrets: List[FileReferenceSpec] = Field(default_factory=list)

    # Networking
    networks: Dict[str, NetworkAttachment] = Field(default_factory=dict)
    network_mode: Optional[str] = None
    ports: List[PortSpec] = Field(default_factory=list)
    expose: List[str] = Field(default_factory=list)
    hostname: Optional[str] = None
    domainname: Optional[str] = None
    mac_address: Optional[str] = None
    dns: List[str] = Field(default_factory=list)
    dns_search: List[str] = Field(default_factory=list)
    extra_hosts: List[str] = Field(default_factory=list)
    links: List[str] = Field(default_factory=list)

    # Lifecycle
    restart: str = Field(default="no")
    stop_signal: Optional[str] = None
    init: Optional[bool] = None

    # Security
    cap_add: List[str] = Field(default_factory=list)
    cap_drop: List[str] = Field(default_factory=list)
    privileged: bool = False
    read_only: bool = False
    security_opt: List[str] = Field(default_factory=list)
    userns_mode: Optional[str] = None
    ipc: Optional[str] = None
    pid: Optional[str] = None
    isolation: Optional[str] = None
    user: Optional[str] = None

    # Runtime
    working_dir: Optional[str] = None
    tty: bool = False
    stdin_open: bool = False
    shm_size: Optional[str] = None
    sysctls: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def fold_tmpfs(cls, data: Any) -> Any:
        """Turn the ``tmpfs`` shorthand into tmpfs mounts."""
        if not isinstance(data, dict) or "tmpfs" not in data:
            return data
        data = dict(data)
        tmpfs = data.pop("tmpfs")
        if isinstance(tmpfs, str):
            tmpfs = [tmpfs]
        volumes = list(data.get("volumes") or [])
        volumes.extend({"type": "tmpfs", "target": path} for path in tmpfs or [])
        data["volumes"] = volumes
        return data

    @field_validator("command", "entrypoint", mode="before")
    @classmethod
    def split_command(cls, v):
        if isinstance(v, str):
            return shlex.split(v)
        return v

    @field_validator("environment", mode="before")
    @classmethod
    def parse_environment(cls, v):
        """Accept ``KEY=VALUE`` lists; bare keys are taken from the process environment."""
        if v is None:
            return {}
        if not isinstance(v, (dict, list, tuple)):
            raise ValueError(f"environment must be a list or a mapping, got {type(v).__name__}")
        if isinstance(v, dict):
            items = v.items()
        else:
            items = []
            for entry in v:
                key, sep, value = str(entry).partition("=")
                items.append((key, value if sep else None))
        env = {}
        for key, value in items:
            if value is None:
                value = os.environ.get(key)
                if value is None:
                    continue
            env[key] = _stringify(value)
        return env

    @field_validator("labels", "sysctls", mode="before")
    @classmethod
    def parse_mapping(cls, v):
        if v is None:
            return {}
        if not isinstance(v, (dict, list, tuple)):
            raise ValueError(f"Expected a list or a mapping, got {type(v).__name__}")
        if isinstance(v, dict):
            return {k: _stringify(val) for k, val in v.items()}
        mapping = {}
        for entry in v:
            key, _, value = str(entry).partition("=")
            mapping[key] = value
        return mapping

    @field_validator("networks", mode="before")
    @classmethod
    def parse_networks(cls, v):
        if v is None:
            return {}
        if isinstance(v, (list, tuple)):
            return {name: {} for name in v}
        if not isinstance(v, dict):
            raise ValueError(f"networks must be a list or a mapping, got {type(v).__name__}")
        return {name: opts or {} for name, opts in v.items()}

    @field_validator("extra_hosts", mode="before")
    @classmethod
    def parse_extra_hosts(cls, v):
        if isinstance(v, dict):
            return [f"{host}:{ip}" for host, ip in v.items()]
        return v

    @field_validator("expose", mode="before")
    @classmethod
    def parse_expose(cls, v):
        return [str(p) for p in v or []]

    @field_validator("dns", "dns_search", mode="before")
    @classmethod
    def parse_string_list(cls, v):
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("restart")
    @classmethod
    def validate_restart(cls, v):
        if not RESTART_RE.match(v):
            raise ValueError(f"Invalid restart policy: {v}")
        return v

    @model_validator(mode="after")
    def check_network_mode(self) -> "ServiceSpec":
        if self.network_mode and self.networks:
            raise ValueError(f"Service {self.name} sets both network_mode and networks")
        return self


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
