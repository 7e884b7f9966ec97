"""
Domain models — Pydantic types for ctgen.

All models are re-exported here for convenient access:

    from ctgen.core.models import BuildDefinition, GenerationRecord, Receipt
"""

from ctgen.core.models.action import Action, Receipt
from ctgen.core.models.build import (
    BuildDefinition,
    BuildModule,
    ClientGenerationSettings,
    ClientSettings,
    ServerSettings,
    ServerTarget,
)
from ctgen.core.models.generation import (
    GenerationRecord,
    OutputFileSet,
    OutputsRecord,
    TrackedSettings,
)

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # build.py
    "BuildDefinition",
    "BuildModule",
    "ClientGenerationSettings",
    "ClientSettings",
    "ServerSettings",
    "ServerTarget",
    # generation.py
    "GenerationRecord",
    "OutputFileSet",
    "OutputsRecord",
    "TrackedSettings",
]
