"""Compose file loading."""

import asyncio
import logging
import os
import re
from pathlib import Path
from typing import Dict, Any, Optional, Mapping

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from pydantic import ValidationError

from dockside.errors import ConfigError
from dockside.models.project import ProjectSpec


logger = logging.getLogger(__name__)

INTERPOLATION_RE = re.compile(
    r"\$(?:(?P<escaped>\$)|\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<sep>:?[-?])(?P<default>[^}]*))?\}|(?P<named>[A-Za-z_][A-Za-z0-9_]*))"
)


def get_project_name(project_name: Optional[str], file_path: Path) -> str:
    """Explicit project name, or the name of the directory holding the Compose file."""
    if project_name:
        return project_name
    return Path(file_path).resolve().parent.name


def interpolate(value: Any, environ: Mapping[str, str]) -> Any:
    """Substitute ``$VAR``, ``${VAR}``, ``${VAR:-default}`` and ``${VAR-default}`` in all strings.

    ``${VAR:?message}`` and ``${VAR?message}`` raise ConfigError with the
    message when the variable is unset (or empty, for the ``:?`` form).
    """
    if isinstance(value, dict):
        return {k: interpolate(v, environ) for k, v in value.items()}
    if isinstance(value, list):
        return [interpolate(v, environ) for v in value]
    if not isinstance(value, str):
        return value

    def replace(match: "re.Match[str]") -> str:
        if match.group("escaped"):
            return "$"
        name = match.group("braced") or match.group("named")
        current = environ.get(name)
        sep = match.group("sep")
        if sep == ":-" and not current:
            return match.group("default")
        if sep == "-" and current is None:
            return match.group("default")
        if (sep == ":?" and not current) or (sep == "?" and current is None):
            raise ConfigError(match.group("default") or f"Required variable {name} is missing a value")
        if current is None:
            logger.warning(f"Variable {name} is not set, substituting an empty string")
            return ""
        return current

    return INTERPOLATION_RE.sub(replace, value)


class ComposeLoader:
    """Loads one Compose file into a validated ProjectSpec."""

    def __init__(self, file_path: Path, environ: Optional[Mapping[str, str]] = None):
        """Initialize the loader."""
        self.file_path = Path(file_path)
        self.environ = os.environ if environ is None else environ
        self.yaml = YAML(typ="safe")

    async def load(self) -> ProjectSpec:
        """Read, interpolate and validate the Compose file."""
        logger.info(f"Loading Compose file {self.file_path}")

        if not self.file_path.is_file():
            raise ConfigError(f"Compose file not found: {self.file_path}")

        try:
            data = await self._read_yaml(self.file_path)
        except (OSError, YAMLError) as e:
            raise ConfigError(f"Cannot read {self.file_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self.file_path} must contain a mapping at the top level")

        data = interpolate(data, self.environ)
        working_dir = str(self.file_path.resolve().parent)

        try:
            project = ProjectSpec(
                **data,
                filename=str(self.file_path),
                working_dir=working_dir,
            )
        except ValidationError as e:
            logger.error(f"Invalid Compose file {self.file_path}: {e}")
            raise ConfigError(f"Invalid Compose file {self.file_path}: {e}") from e
        except TypeError as e:
            raise ConfigError(f"Invalid Compose file {self.file_path}: {e}") from e

        logger.debug(f"Loaded {len(project.services)} services from {self.file_path}")
        return project

    async def _read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse a YAML file off the event loop."""
        return await asyncio.to_thread(lambda: self.yaml.load(file_path.read_text()))


async def load_project(file_path: Path, environ: Optional[Mapping[str, str]] = None) -> ProjectSpec:
    """Load a Compose file, raising ConfigError on any failure."""
    return await ComposeLoader(file_path, environ=environ).load()
