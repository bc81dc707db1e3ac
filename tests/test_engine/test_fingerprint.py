"""Tests for configuration fingerprints."""

from dockside.engine.fingerprint import fingerprint, read_fingerprint
from dockside.models.config import LABEL_CONFIG
from dockside.models.service import ServiceSpec


def _spec(**overrides):
    data = {
        "name": "web",
        "image": "nginx:latest",
        "command": ["nginx", "-g", "daemon off;"],
        "environment": {"A": "1", "B": "2"},
        "networks": {"front": {}, "back": {"aliases": ["api"]}},
        "volumes": ["./html:/usr/share/nginx/html:ro"],
        "ports": ["8080:80"],
    }
    data.update(overrides)
    return ServiceSpec(**data)


class TestFingerprint:
    """Determinism and change detection."""

    def test_same_spec_same_fingerprint(self):
        assert fingerprint(_spec()) == fingerprint(_spec())

    def test_is_readable_yaml(self):
        text = fingerprint(_spec())

        assert "image: nginx:latest" in text
        assert text.startswith("name: web\n")

    def test_image_change(self):
        assert fingerprint(_spec()) != fingerprint(_spec(image="nginx:1.21"))

    def test_nested_change(self):
        changed = _spec(networks={"front": {}, "back": {"aliases": ["api", "v2"]}})
        assert fingerprint(_spec()) != fingerprint(changed)

    def test_mount_mode_change(self):
        changed = _spec(volumes=["./html:/usr/share/nginx/html"])
        assert fingerprint(_spec()) != fingerprint(changed)

    def test_primary_network_change(self):
        swapped = _spec(networks={"back": {"aliases": ["api"]}, "front": {}})
        assert fingerprint(_spec()) != fingerprint(swapped)

    def test_default_valued_field_change(self):
        assert fingerprint(_spec()) != fingerprint(_spec(privileged=True))
        assert fingerprint(_spec()) != fingerprint(_spec(restart="always"))

    def test_empty_and_missing_command_differ(self):
        assert fingerprint(_spec(command=None)) != fingerprint(_spec(command=[]))

    def test_multiline_values_survive(self):
        spec = _spec(environment={"SCRIPT": "line one\nline two"})
        assert fingerprint(spec) != fingerprint(_spec(environment={"SCRIPT": "line one line two"}))


class TestReadFingerprint:
    """Label accessor."""

    def test_present(self):
        assert read_fingerprint({LABEL_CONFIG: "name: web\n"}) == "name: web\n"

    def test_absent(self):
        assert read_fingerprint({"other": "x"}) is None
        assert read_fingerprint(None) is None
