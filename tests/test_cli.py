"""
Tests for CLI commands — generate, config check, cache clear, and global options.
"""

import json
from pathlib import Path

from click.testing import CliRunner
from conftest import BUILD_YML, write_build

from ctgen.main import cli


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "client code generation" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_subcommands_listed(self):
        result = CliRunner().invoke(cli, ["--help"])
        for command in ("generate", "config", "cache"):
            assert command in result.output


class TestGenerateCommand:
    def test_generate(self, build_file: Path, build_root: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(build_file), "generate"])
        assert result.exit_code == 0, result.output
        assert "petshop" in result.output
        assert "api [server]" in result.output
        assert "web [client]" in result.output
        assert (build_root / "web" / "src" / "pets" / "client" / "petclient.py").is_file()

    def test_generate_verbose_lists_files(self, build_file: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["-v", "--config", str(build_file), "generate"])
        assert result.exit_code == 0, result.output
        assert "petclient.py" in result.output

    def test_generate_cached_second_time(self, build_file: Path):
        runner = CliRunner()
        runner.invoke(cli, ["--config", str(build_file), "generate"])
        result = runner.invoke(cli, ["--config", str(build_file), "generate"])
        assert result.exit_code == 0
        assert "cached" in result.output

    def test_generate_json(self, build_file: Path):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["--config", str(build_file), "generate", "--phase", "server", "--json"],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["status"] == "ok"
        assert data["results"][0]["phase"] == "server"
        assert len(data["results"][0]["files"]) == 2

    def test_generate_failure_exits_nonzero(self, build_root: Path):
        config = write_build(build_root, BUILD_YML.replace("petgen:generate", "petgen:explode"))
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "generate"])
        assert result.exit_code == 1
        assert "✗ web [client]" in result.output
        assert "generator exploded" in result.output

    def test_generate_unknown_module(self, build_file: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(build_file), "generate", "-m", "ghost"])
        assert result.exit_code == 1
        assert "Unknown module(s): ghost" in result.output

    def test_generate_missing_config(self, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(tmp_path / "ctgen.yml"), "generate"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_generate_skipped_module(self, build_root: Path):
        config = write_build(build_root, """\
            modules:
              - id: api
                path: server
                server: {}
        """)
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "generate"])
        assert result.exit_code == 0
        assert "not configured" in result.output


class TestConfigCheckCommand:
    def test_config_check_valid(self, build_file: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(build_file), "config", "check"])
        assert result.exit_code == 0
        assert "valid" in result.output.lower()
        assert "Servers: 1" in result.output

    def test_config_check_json(self, build_file: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(build_file), "config", "check", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["valid"] is True
        assert data["module_count"] == 2

    def test_config_check_invalid(self, tmp_path: Path):
        config = tmp_path / "ctgen.yml"
        config.write_text("modules:\n  - id: web\n    client: {}\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "config", "check"])
        assert result.exit_code == 1
        assert "lists no server modules" in result.output


class TestCacheClearCommand:
    def test_cache_clear(self, build_file: Path):
        runner = CliRunner()
        runner.invoke(cli, ["--config", str(build_file), "generate"])
        result = runner.invoke(cli, ["--config", str(build_file), "cache", "clear"])
        assert result.exit_code == 0
        assert "Removed 4 cache record(s)" in result.output

        regenerated = runner.invoke(cli, ["--config", str(build_file), "generate"])
        assert "generated" in regenerated.output

    def test_cache_clear_unknown_module(self, build_file: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(build_file), "cache", "clear", "-m", "ghost"])
        assert result.exit_code == 1
