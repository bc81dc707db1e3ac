"""Observed runtime state and resolved shared resources."""

from typing import Optional, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class ObservedContainer(BaseModel):
    """One container found on the runtime."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    project: str
    service: str
    fingerprint: Optional[str] = Field(None, description="Configuration label the container was created with")
    status: str = Field(default="unknown")


# Service name -> containers, in the order the runtime listed them.
ObservedState = Dict[str, List[ObservedContainer]]


class ResolvedResources(BaseModel):
    """Runtime identifiers for the shared resources of one project."""
    model_config = ConfigDict(frozen=True)

    networks: Dict[str, str] = Field(default_factory=dict)
    volumes: Dict[str, str] = Field(default_factory=dict)
    configs: Dict[str, str] = Field(default_factory=dict)
    secrets: Dict[str, str] = Field(default_factory=dict)
    working_dir: str = Field(default=".")
