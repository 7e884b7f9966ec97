"""
Shared test fixtures and configuration.

Most engine tests run against a small two-module build:

    server/               server module "api"
        petstore_api.py   the API object
        petgen.py         a tiny generator library
    web/                  client module "web"
"""

import ast
import json
import logging
import textwrap
from pathlib import Path

import pytest

from ctgen.adapters.mock import MockAdapter
from ctgen.adapters.registry import AdapterRegistry
from ctgen.adapters.shell.command import ShellCommandAdapter
from ctgen.core.config.loader import load_build
from ctgen.core.engine.cache import GenerationCache
from ctgen.core.engine.context import PhaseContext
from ctgen.core.models.action import Action
from ctgen.core.persistence.audit import AuditWriter
from ctgen.core.persistence.cache_store import CacheStore, MemoryCacheStore

BUILD_YML = textwrap.dedent("""\
    name: petshop
    modules:
      - id: api
        path: server
        server:
          generator: "petgen:generate"
          timeout: 60
          settings:
            - api: "petstore_api:schema"
              client:
                package_name: pets.client
                client_name: PetClient
            - api: "petstore_api:schema"
              client:
                package_name: pets.admin
                client_name: AdminClient
      - id: web
        path: web
        client:
          servers: [api]
""")

PETSTORE_API = textwrap.dedent("""\
    schema = {"name": "petstore", "operations": ["listPets", "getPet"]}
""")

PETGEN = textwrap.dedent("""\
    from pathlib import Path


    def generate(api, settings, destination):
        out = Path(destination).joinpath(*settings.package_name.split("."))
        out.mkdir(parents=True, exist_ok=True)
        (out / "__init__.py").write_text("")
        ops = ", ".join(repr(op) for op in api["operations"])
        (out / f"{settings.client_name.lower()}.py").write_text(
            f"class {settings.client_name}:\\n    OPERATIONS = [{ops}]\\n"
        )


    def explode(api, settings, destination):
        raise RuntimeError("generator exploded")
""")


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """The CLI reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def build_root(tmp_path: Path) -> Path:
    """A resolved build root with the server and web module directories."""
    root = tmp_path.resolve()
    server = root / "server"
    server.mkdir()
    (server / "petstore_api.py").write_text(PETSTORE_API)
    (server / "petgen.py").write_text(PETGEN)
    (root / "web").mkdir()
    return root


@pytest.fixture
def build_file(build_root: Path) -> Path:
    """ctgen.yml of the default two-module build."""
    path = build_root / "ctgen.yml"
    path.write_text(BUILD_YML)
    return path


def write_build(root: Path, content: str) -> Path:
    """Write (or overwrite) ctgen.yml under a build root."""
    path = root / "ctgen.yml"
    path.write_text(textwrap.dedent(content))
    return path


# ── Fake launcher adapter ───────────────────────────────────────────


def read_launcher_settings(launcher: Path) -> dict:
    """Client settings frozen into a materialized launcher."""
    prefix = "SETTINGS = json.loads("
    for line in launcher.read_text().splitlines():
        if line.startswith(prefix):
            return json.loads(ast.literal_eval(line[len(prefix):-1]))
    raise AssertionError(f"No SETTINGS line in {launcher}")


def fake_generation(action: Action) -> None:
    """Side effect standing in for a launcher subprocess.

    Writes one file named after the client into the package directory
    under the destination, like petgen.generate does.
    """
    params = action.params
    launcher = (
        Path(params["python_path"][0])
        .joinpath(*params["entry_point"].split("."))
        .with_suffix(".py")
    )
    settings = read_launcher_settings(launcher)
    out = Path(params["argument"]).joinpath(*settings["package_name"].split("."))
    out.mkdir(parents=True, exist_ok=True)
    (out / f"{settings['client_name'].lower()}.py").write_text("# generated\n")


@pytest.fixture
def launcher_mock() -> MockAdapter:
    return MockAdapter(adapter_name="launcher", side_effect=fake_generation)


@pytest.fixture
def registry(launcher_mock: MockAdapter) -> AdapterRegistry:
    """Registry with the fake launcher and the real shell adapter."""
    return AdapterRegistry(launcher_mock, ShellCommandAdapter())


def make_context(
    config: Path,
    registry: AdapterRegistry,
    store: CacheStore | None = None,
) -> PhaseContext:
    """Phase context over a build file, with an in-memory cache by default."""
    root = config.parent.resolve()
    return PhaseContext(
        build_root=root,
        definition=load_build(config),
        cache=GenerationCache(store or MemoryCacheStore()),
        registry=registry,
        audit=AuditWriter(root / ".ctgen" / "audit.ndjson"),
        operation_id="op-test",
    )
