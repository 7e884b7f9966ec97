"""
End-to-end tests — real launcher subprocesses through the generate use case.
"""

import json
from pathlib import Path

from conftest import BUILD_YML, write_build

from ctgen.core.persistence.audit import AuditWriter
from ctgen.core.use_cases.cache import clear_cache
from ctgen.core.use_cases.generate import run_generate

SERVER = "server/target/ctgen-server"


class TestGenerateEndToEnd:
    def test_full_build(self, build_file: Path, build_root: Path):
        result = run_generate(config_path=build_file)

        assert result.ok, result.to_dict()
        assert [(r.module, r.phase, r.status) for r in result.results] == [
            ("api", "server", "generated"),
            ("web", "client", "generated"),
        ]

        client = build_root / "web" / "src" / "pets" / "client" / "petclient.py"
        admin = build_root / "web" / "src" / "pets" / "admin" / "adminclient.py"
        assert client.read_text() == (
            "class PetClient:\n    OPERATIONS = ['listPets', 'getPet']\n"
        )
        assert admin.is_file()

        web = result.results[1]
        assert set(web.files) == {
            client,
            client.parent / "__init__.py",
            admin,
            admin.parent / "__init__.py",
        }
        assert not (build_root / SERVER / "metadata").exists()

    def test_second_run_uses_cache(self, build_file: Path, build_root: Path):
        first = run_generate(config_path=build_file)
        second = run_generate(config_path=build_file)

        assert second.ok
        assert [r.status for r in second.results] == ["cached", "cached"]
        assert sorted(second.results[1].files) == sorted(first.results[1].files)
        assert (build_root / ".ctgen" / "cache").is_dir()

    def test_server_edit_regenerates(self, build_file: Path, build_root: Path):
        run_generate(config_path=build_file)
        write_build(build_root, BUILD_YML.replace("AdminClient", "OpsClient"))

        result = run_generate(config_path=build_file)

        assert [r.status for r in result.results] == ["generated", "generated"]
        assert (build_root / "web" / "src" / "pets" / "admin" / "opsclient.py").is_file()

    def test_client_edit_regenerates(self, build_file: Path, build_root: Path):
        run_generate(config_path=build_file)
        write_build(build_root, BUILD_YML.replace(
            "servers: [api]", "servers: [api]\n      versioned_code: false",
        ))

        result = run_generate(config_path=build_file)

        managed = build_root / "web" / "target" / "src_managed"
        assert [r.status for r in result.results] == ["cached", "generated"]
        pets = managed / "pets"
        assert set(result.results[1].files) == {
            pets / "client" / "__init__.py",
            pets / "client" / "petclient.py",
            pets / "admin" / "__init__.py",
            pets / "admin" / "adminclient.py",
        }
        assert all(f.is_file() for f in result.results[1].files)

    def test_client_phase_alone_builds_upstream(self, build_file: Path, build_root: Path):
        result = run_generate(config_path=build_file, phase="client")

        assert result.ok
        assert [(r.module, r.phase) for r in result.results] == [("web", "client")]
        assert (build_root / "web" / "src" / "pets" / "client" / "petclient.py").is_file()

    def test_server_phase_alone(self, build_file: Path, build_root: Path):
        result = run_generate(config_path=build_file, phase="server", modules=["api"])

        assert result.ok
        assert len(result.results) == 1
        assert (build_root / SERVER / "metadata").is_file()
        assert not (build_root / "web" / "src").exists()

    def test_generator_error(self, build_root: Path):
        config = write_build(build_root, BUILD_YML.replace("petgen:generate", "petgen:explode"))

        result = run_generate(config_path=config)

        assert not result.ok
        web = result.results[-1]
        assert web.status == "failed"
        assert len(web.errors) == 2
        assert "generator exploded" in web.errors[0]
        assert result.to_dict()["status"] == "failed"

    def test_audit_ledger(self, build_file: Path, build_root: Path):
        result = run_generate(config_path=build_file)

        entries = AuditWriter(build_root / ".ctgen" / "audit.ndjson").read_all()
        assert {e.operation_id for e in entries} == {result.operation_id}
        assert [(e.module, e.phase) for e in entries][-1] == ("web", "client")

    def test_unknown_module(self, build_file: Path):
        result = run_generate(config_path=build_file, modules=["ghost"])
        assert result.error == "Unknown module(s): ghost"

    def test_unknown_phase(self, build_file: Path):
        assert "Unknown phase" in run_generate(config_path=build_file, phase="deploy").error

    def test_invalid_config(self, build_root: Path):
        config = write_build(build_root, "modules: [1, 2]\n")
        result = run_generate(config_path=config)
        assert not result.ok
        assert "Invalid build definition" in result.error

    def test_to_dict_is_json(self, build_file: Path):
        data = json.loads(json.dumps(run_generate(config_path=build_file).to_dict()))
        assert data["status"] == "ok"
        assert data["results"][0]["module"] == "api"


class TestClearCache:
    def test_clear_forces_regeneration(self, build_file: Path):
        run_generate(config_path=build_file)

        cleared = clear_cache(config_path=build_file)
        result = run_generate(config_path=build_file)

        assert cleared.removed == 4
        assert [r.status for r in result.results] == ["generated", "generated"]

    def test_clear_one_module(self, build_file: Path):
        run_generate(config_path=build_file)

        cleared = clear_cache(config_path=build_file, module="web")

        assert cleared.removed == 2
        assert cleared.to_dict()["removed"] == 2

    def test_clear_unknown_module(self, build_file: Path):
        assert clear_cache(config_path=build_file, module="ghost").error == "Unknown module: ghost"
