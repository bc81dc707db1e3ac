"""Configuration fingerprints stored on managed containers."""

import io
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from dockside.models.config import LABEL_CONFIG
from dockside.models.service import ServiceSpec


def _ordered(value: Any) -> Any:
    """Convert nested dicts to CommentedMap so the dump keeps insertion order."""
    if isinstance(value, dict):
        mapping = CommentedMap()
        for key, item in value.items():
            mapping[key] = _ordered(item)
        return mapping
    if isinstance(value, list):
        return [_ordered(item) for item in value]
    return value


def fingerprint(spec: ServiceSpec) -> str:
    """Serialize the full service specification as YAML.

    Output depends only on the service: fields appear in model order and maps in
    the order they were declared, so identical files give identical
    fingerprints and any changed field changes the text.
    """
    yaml = YAML()
    yaml.default_flow_style = False
    yaml.width = 4096
    stream = io.StringIO()
    yaml.dump(_ordered(spec.model_dump(mode="json")), stream)
    return stream.getvalue()


def read_fingerprint(labels: Optional[Dict[str, str]]) -> Optional[str]:
    """Fingerprint label of a container, if it has one."""
    if not labels:
        return None
    return labels.get(LABEL_CONFIG)
