"""
Tests for configuration loading — ctgen.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from ctgen.core.config.loader import ConfigError, build_root, find_build_file, load_build
from ctgen.core.use_cases.config_check import check_config


@pytest.fixture
def valid_build_yml(tmp_path: Path) -> Path:
    """Create a valid ctgen.yml in a temp directory."""
    content = textwrap.dedent("""\
        version: 1
        name: petshop
        cache_dir: .build-cache

        modules:
          - id: api
            path: server
            source_roots: [".", "src"]
            build: "make compile"
            server:
              generator: "petgen:generate"
              timeout: 120
              settings:
                - api: "petstore_api:schema"
                  client:
                    package_name: pets.client
                    client_name: PetClient
                    headers:
                      X-Api-Key: "{{ env.API_KEY }}"
                    scalar_mappings:
                      DateTime: datetime.datetime
                    split_files: true

          - id: web
            path: web
            client:
              servers: [api]
              versioned_code: false
    """)
    config = tmp_path / "ctgen.yml"
    config.write_text(content)
    (tmp_path / "server").mkdir()
    (tmp_path / "web").mkdir()
    return config


class TestLoadBuild:
    def test_load_valid_config(self, valid_build_yml: Path):
        definition = load_build(valid_build_yml)
        assert definition.name == "petshop"
        assert definition.cache_dir == ".build-cache"
        assert [m.id for m in definition.modules] == ["api", "web"]

    def test_server_settings_populated(self, valid_build_yml: Path):
        api = load_build(valid_build_yml).get_module("api")
        assert api.build == "make compile"
        assert api.server.timeout == 120
        client = api.server.settings[0].client
        assert client.client_name == "PetClient"
        assert client.headers == {"X-Api-Key": "{{ env.API_KEY }}"}
        assert client.scalar_mappings == {"DateTime": "datetime.datetime"}
        assert client.split_files is True

    def test_client_settings_populated(self, valid_build_yml: Path):
        web = load_build(valid_build_yml).get_module("web")
        assert web.client.servers == ["api"]
        assert web.client.versioned_code is False

    def test_empty_file_is_empty_build(self, tmp_path: Path):
        path = tmp_path / "ctgen.yml"
        path.write_text("")
        assert load_build(path).modules == []

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_build(tmp_path / "nonexistent.yml")

    def test_invalid_yaml_raises(self, tmp_path: Path):
        path = tmp_path / "ctgen.yml"
        path.write_text("modules: [\n  - broken")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_build(path)

    def test_non_mapping_raises(self, tmp_path: Path):
        path = tmp_path / "ctgen.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_build(path)

    def test_unknown_upstream_raises(self, tmp_path: Path):
        path = tmp_path / "ctgen.yml"
        path.write_text(textwrap.dedent("""\
            modules:
              - id: web
                client:
                  servers: [ghost]
        """))
        with pytest.raises(ConfigError, match="unknown server module 'ghost'"):
            load_build(path)

    def test_auto_search_returns_none(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigError, match="No ctgen.yml found"):
            load_build()

    def test_build_root(self, valid_build_yml: Path):
        assert build_root(valid_build_yml) == valid_build_yml.parent.resolve()


class TestFindBuildFile:
    def test_find_in_current_dir(self, valid_build_yml: Path):
        assert find_build_file(valid_build_yml.parent) == valid_build_yml.resolve()

    def test_find_in_parent_dir(self, valid_build_yml: Path):
        nested = valid_build_yml.parent / "server" / "deep"
        nested.mkdir(parents=True)
        assert find_build_file(nested) == valid_build_yml.resolve()

    def test_not_found_returns_none(self, tmp_path: Path):
        assert find_build_file(tmp_path) is None


class TestConfigCheck:
    def test_valid(self, valid_build_yml: Path):
        result = check_config(valid_build_yml)
        assert result.valid
        assert result.errors == []
        assert result.to_dict()["server_count"] == 1

    def test_missing_module_path_warns(self, valid_build_yml: Path):
        (valid_build_yml.parent / "web").rmdir()
        result = check_config(valid_build_yml)
        assert result.valid
        assert any("web" in w for w in result.warnings)

    def test_empty_server_settings(self, tmp_path: Path):
        path = tmp_path / "ctgen.yml"
        path.write_text("modules:\n  - id: api\n    server: {}\n")
        result = check_config(path)
        assert not result.valid
        assert "Module 'api' has no server settings" in result.errors

    def test_delimiter_in_package_name(self, valid_build_yml: Path):
        valid_build_yml.write_text(
            valid_build_yml.read_text().replace("pets.client", "pets#client")
        )
        result = check_config(valid_build_yml)
        assert not result.valid
        assert "contains '#'" in result.errors[0]

    def test_empty_client_servers(self, tmp_path: Path):
        path = tmp_path / "ctgen.yml"
        path.write_text("modules:\n  - id: web\n    client: {}\n")
        result = check_config(path)
        assert "Module 'web' lists no server modules" in result.errors

    def test_no_modules_warns(self, tmp_path: Path):
        path = tmp_path / "ctgen.yml"
        path.write_text("name: empty\n")
        result = check_config(path)
        assert result.valid
        assert result.warnings

    def test_invalid_config(self, tmp_path: Path):
        path = tmp_path / "ctgen.yml"
        path.write_text("modules: oops\n")
        result = check_config(path)
        assert not result.valid
        assert result.definition is None
