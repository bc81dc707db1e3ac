"""Compose file loading."""

from dockside.config.loader import ComposeLoader, load_project, get_project_name, interpolate

__all__ = [
    "ComposeLoader",
    "load_project",
    "get_project_name",
    "interpolate",
]
