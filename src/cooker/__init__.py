"""Cook a new WordPress theme from the Palamut template.

The package derives theme identifiers from a human friendly name, collects and
confirms them interactively, stamps them into a fresh clone of the template and
runs the remaining setup steps as a fail-fast pipeline.
"""

from __future__ import annotations

from .config import CookerSettings, IdentitySpec
from .naming import derive_namespace, derive_prefix, derive_slug
from .pipeline import Step, StepContext, StepPipeline, StepResult, StepStatus
from .substitute import ExclusionPolicy, Placeholders, Replacement, SubstitutionEngine

__all__ = [
    "CookerSettings",
    "ExclusionPolicy",
    "IdentitySpec",
    "Placeholders",
    "Replacement",
    "Step",
    "StepContext",
    "StepPipeline",
    "StepResult",
    "StepStatus",
    "SubstitutionEngine",
    "derive_namespace",
    "derive_prefix",
    "derive_slug",
]

__version__ = "0.1.0"
