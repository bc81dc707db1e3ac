"""Project-level models: the whole Compose file."""

from typing import Optional, Dict, List, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dockside.models.service import ServiceSpec


class NetworkSpec(BaseModel):
    """Top-level network definition."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: Optional[str] = Field(None, description="Explicit runtime name")
    driver: Optional[str] = None
    driver_opts: Dict[str, str] = Field(default_factory=dict)
    labels: Dict[str, str] = Field(default_factory=dict)
    external: bool = False
    internal: bool = False
    attachable: bool = False


class VolumeSpec(BaseModel):
    """Top-level named volume definition."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: Optional[str] = Field(None, description="Explicit runtime name")
    driver: Optional[str] = None
    driver_opts: Dict[str, str] = Field(default_factory=dict)
    labels: Dict[str, str] = Field(default_factory=dict)
    external: bool = False


class FileObjectSpec(BaseModel):
    """Top-level config or secret backed by a file."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    file: Optional[str] = Field(None, description="Path relative to the project directory")
    name: Optional[str] = None
    external: bool = False

    @model_validator(mode="after")
    def check_source(self) -> "FileObjectSpec":
        if not self.external and not self.file:
            raise ValueError("Only file-based configs and secrets are supported")
        return self


def _none_to_empty(v):
    """Normalize ``name:`` entries with no body into empty definitions."""
    if v is None:
        return {}
    if not isinstance(v, dict):
        raise ValueError(f"Expected a mapping of names to definitions, got {type(v).__name__}")
    return {name: body or {} for name, body in v.items()}


class ProjectSpec(BaseModel):
    """A loaded and validated Compose file."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(default="", description="Project name declared in the file")
    services: List[ServiceSpec] = Field(default_factory=list)
    networks: Dict[str, NetworkSpec] = Field(default_factory=dict)
    volumes: Dict[str, VolumeSpec] = Field(default_factory=dict)
    configs: Dict[str, FileObjectSpec] = Field(default_factory=dict)
    secrets: Dict[str, FileObjectSpec] = Field(default_factory=dict)
    filename: str = Field(default="compose.yaml")
    working_dir: str = Field(default=".", description="Directory containing the Compose file")

    @field_validator("services", mode="before")
    @classmethod
    def parse_services(cls, v: Any):
        """Services are keyed by name in the file; keep declaration order."""
        if v is None:
            return []
        if isinstance(v, list) and all(isinstance(s, ServiceSpec) for s in v):
            return v
        if not isinstance(v, dict):
            raise ValueError(f"services must be a mapping of names to definitions, got {type(v).__name__}")
        services = []
        for name, body in v.items():
            if body is not None and not isinstance(body, dict):
                raise ValueError(f"Service {name} must be a mapping")
            services.append({**(body or {}), "name": name})
        return services

    @field_validator("networks", "volumes", "configs", "secrets", mode="before")
    @classmethod
    def parse_definitions(cls, v):
        return _none_to_empty(v)

    @model_validator(mode="after")
    def check_references(self) -> "ProjectSpec":
        """Every reference from a service must name a top-level definition."""
        seen = set()
        for service in self.services:
            if service.name in seen:
                raise ValueError(f"Duplicate service name: {service.name}")
            seen.add(service.name)
            for network in service.networks:
                if network != "default" and network not in self.networks:
                    raise ValueError(f"Service {service.name} uses undefined network {network}")
            for mount in service.volumes:
                if mount.type == "volume" and mount.source and mount.source not in self.volumes:
                    raise ValueError(f"Service {service.name} uses undefined volume {mount.source}")
            for ref in service.configs:
                if ref.source not in self.configs:
                    raise ValueError(f"Service {service.name} uses undefined config {ref.source}")
            for ref in service.secrets:
                if ref.source not in self.secrets:
                    raise ValueError(f"Service {service.name} uses undefined secret {ref.source}")
        return self

    def get_service(self, name: str) -> Optional[ServiceSpec]:
        """Get a service specification by name."""
        for service in self.services:
            if service.name == name:
                return service
        return None

    def uses_default_network(self) -> bool:
        """Whether any service lands on the implicit project network."""
        return any(
            not s.network_mode and (not s.networks or "default" in s.networks)
            for s in self.services
        )
