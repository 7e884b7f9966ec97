"""
Build definition model — the modules ctgen generates for.

Loaded from ctgen.yml. A module can act as a *server* (it owns the API
definitions and materializes one launcher per configured client), as a
*client* (it consumes the launchers of upstream server modules and
receives the generated sources), or both.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, Field, model_validator

# Module ids end up in cache paths and metadata namespaces.
MODULE_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"


class ClientGenerationSettings(BaseModel):
    """Options handed to the external generator for one client."""

    package_name: str
    client_name: str = "Client"
    headers: dict[str, str] = Field(default_factory=dict)
    scalar_mappings: dict[str, str] = Field(default_factory=dict)
    imports: list[str] = Field(default_factory=list)
    split_files: bool = False
    enable_fs_cache: bool = False
    extensible_enums: bool = False
    preserve_input_names: bool = False
    exclude_deprecated: bool = False
    gen_view: bool = False
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def package_path(self) -> str:
        """Package name as a relative directory path."""
        return self.package_name.replace(".", "/")


class ServerTarget(BaseModel):
    """One (API reference, client settings) pair."""

    api: str                        # "module.path:attribute"
    client: ClientGenerationSettings


class ServerSettings(BaseModel):
    """Server-phase configuration of a module."""

    generator: str = ""             # "module.path:callable"
    timeout: float = 600
    settings: list[ServerTarget] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_generator(self) -> ServerSettings:
        if self.settings and not self.generator:
            raise ValueError("'generator' is required when server settings are configured")
        return self

    def serialize(self) -> str:
        """Stable string form of every configured target, in order."""
        return json.dumps(
            [t.model_dump(mode="json") for t in self.settings],
            sort_keys=True,
            separators=(",", ":"),
        )


class ClientSettings(BaseModel):
    """Client-phase configuration of a module."""

    servers: list[str] = Field(default_factory=list)
    versioned_code: bool = True
    source_dir: str = "src"


class BuildModule(BaseModel):
    """A build module declared in ctgen.yml."""

    id: str = Field(pattern=MODULE_ID_PATTERN)
    path: str = "."
    target: str = "target"
    source_roots: list[str] = Field(default_factory=lambda: ["."])
    build: str = ""
    build_timeout: float = 600
    server: ServerSettings | None = None
    client: ClientSettings | None = None

    @property
    def is_server(self) -> bool:
        return self.server is not None

    @property
    def is_client(self) -> bool:
        return self.client is not None


class BuildDefinition(BaseModel):
    """Root build definition — loaded from ctgen.yml."""

    version: int = 1

    name: str = ""
    cache_dir: str = ".ctgen"
    extension: str = ".py"
    modules: list[BuildModule] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_modules(self) -> BuildDefinition:
        ids = [m.id for m in self.modules]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ValueError(f"Duplicate module ids: {', '.join(dupes)}")

        for module in self.modules:
            if module.client is None:
                continue
            for server_id in module.client.servers:
                upstream = self.get_module(server_id)
                if upstream is None:
                    raise ValueError(
                        f"Module '{module.id}' references unknown server module '{server_id}'"
                    )
                if upstream.server is None:
                    raise ValueError(
                        f"Module '{module.id}' references '{server_id}', "
                        "which has no server configuration"
                    )
        return self

    def get_module(self, module_id: str) -> BuildModule | None:
        """Look up a module by id."""
        for module in self.modules:
            if module.id == module_id:
                return module
        return None

    def server_modules(self) -> list[BuildModule]:
        return [m for m in self.modules if m.is_server]

    def client_modules(self) -> list[BuildModule]:
        return [m for m in self.modules if m.is_client]
