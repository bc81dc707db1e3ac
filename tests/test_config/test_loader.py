"""Tests for Compose file loading."""

from pathlib import Path

import pytest

from dockside.config.loader import ComposeLoader, load_project, interpolate, get_project_name
from dockside.errors import ConfigError


COMPOSE = """\
services:
  web:
    image: nginx:${TAG:-latest}
    command: nginx -g "daemon off;"
    ports:
      - "8080:80"
    networks: [front]
  db:
    image: postgres:16
    environment:
      POSTGRES_PASSWORD: $DB_PASSWORD
    volumes:
      - data:/var/lib/postgresql/data

networks:
  front:

volumes:
  data:
"""


@pytest.fixture
def compose_file(tmp_path):
    project_dir = tmp_path / "shop"
    project_dir.mkdir()
    path = project_dir / "compose.yaml"
    path.write_text(COMPOSE)
    return path


@pytest.mark.asyncio
class TestComposeLoader:
    """Reading and validating files."""

    async def test_load(self, compose_file):
        project = await load_project(compose_file, environ={"DB_PASSWORD": "s3cret"})

        assert [s.name for s in project.services] == ["web", "db"]
        web = project.get_service("web")
        assert web.image == "nginx:latest"
        assert web.command == ["nginx", "-g", "daemon off;"]
        assert list(web.networks) == ["front"]
        assert project.get_service("db").environment == {"POSTGRES_PASSWORD": "s3cret"}
        assert project.working_dir == str(compose_file.parent.resolve())
        assert "data" in project.volumes

    async def test_interpolated_tag(self, compose_file):
        project = await ComposeLoader(compose_file, environ={"TAG": "1.21", "DB_PASSWORD": "x"}).load()

        assert project.get_service("web").image == "nginx:1.21"

    async def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            await load_project(tmp_path / "compose.yaml")

        assert "not found" in str(exc_info.value)

    async def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "compose.yaml"
        path.write_text("services:\n  web: [unclosed\n")

        with pytest.raises(ConfigError):
            await load_project(path)

    async def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "compose.yaml"
        path.write_text("- web\n- db\n")

        with pytest.raises(ConfigError):
            await load_project(path)

    async def test_invalid_service(self, tmp_path):
        path = tmp_path / "compose.yaml"
        path.write_text("services:\n  web:\n    restart: sometimes\n")

        with pytest.raises(ConfigError) as exc_info:
            await load_project(path, environ={})

        assert "Invalid Compose file" in str(exc_info.value)

    @pytest.mark.parametrize("content", [
        "services:\n  web:\n    image: nginx\nvolumes:\n  - data\n",
        "services:\n  web:\n    image: nginx\nnetworks: front\n",
        "services:\n  web:\n    image: nginx\n    networks: front\n",
        "services:\n  web:\n    image: nginx\n    environment: DEBUG=1\n",
        "services:\n  web:\n    image: nginx\n    labels: tier\n",
        "services:\n  - web\n",
        "services:\n  web: nginx\n",
    ])
    async def test_wrong_section_shape(self, tmp_path, content):
        path = tmp_path / "compose.yaml"
        path.write_text(content)

        with pytest.raises(ConfigError) as exc_info:
            await load_project(path, environ={})

        assert "Invalid Compose file" in str(exc_info.value)

    async def test_required_variable_unset(self, tmp_path):
        path = tmp_path / "compose.yaml"
        path.write_text("services:\n  web:\n    image: nginx:${TAG:?TAG must be set}\n")

        with pytest.raises(ConfigError) as exc_info:
            await load_project(path, environ={})

        assert "TAG must be set" in str(exc_info.value)

    async def test_empty_file(self, tmp_path):
        path = tmp_path / "compose.yaml"
        path.write_text("")

        project = await load_project(path, environ={})

        assert project.services == []


class TestInterpolate:
    """Variable substitution."""

    def test_forms(self):
        env = {"A": "1", "EMPTY": ""}

        assert interpolate("$A-${A}", env) == "1-1"
        assert interpolate("${EMPTY:-d}", env) == "d"
        assert interpolate("${EMPTY-d}", env) == ""
        assert interpolate("${MISSING-d}", env) == "d"
        assert interpolate("$$A", env) == "$A"

    def test_required_forms(self):
        assert interpolate("${A:?need A}", {"A": "1"}) == "1"
        assert interpolate("${A?need A}", {"A": ""}) == ""

        with pytest.raises(ConfigError, match="need A"):
            interpolate("${A:?need A}", {"A": ""})
        with pytest.raises(ConfigError, match="need A"):
            interpolate("${A?need A}", {})
        with pytest.raises(ConfigError, match="Required variable A"):
            interpolate({"image": ["${A:?}"]}, {})

    def test_missing_variable_is_empty(self, caplog):
        assert interpolate("x${MISSING}y", {}) == "xy"
        assert "MISSING" in caplog.text

    def test_nested(self):
        data = {"services": {"web": {"ports": ["${PORT}:80"], "tty": True}}}

        assert interpolate(data, {"PORT": "8080"}) == {"services": {"web": {"ports": ["8080:80"], "tty": True}}}


class TestGetProjectName:
    """Project naming."""

    def test_explicit(self):
        assert get_project_name("custom", Path("/srv/shop/compose.yaml")) == "custom"

    def test_directory_name(self, tmp_path):
        project_dir = tmp_path / "shop"
        project_dir.mkdir()

        assert get_project_name(None, project_dir / "compose.yaml") == "shop"
