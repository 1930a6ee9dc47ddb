"""patchchain - patch-chain resolver for launcher client updates.

Given the installed client version and a target version, patchchain decides
which patch archives to download: a single differential patch when the
manifest offers one for the installed build, otherwise the chain of full
archives up to the target. Downloaded files are checked against the
manifest's SHA-256.

Key modules:
- core: Resolver (versions, catalog client, discovery, planner, integrity)
- commands: CLI command implementations
"""

__version__ = "0.1.0"
__author__ = "patchchain contributors"

from patchchain.core.types import (
    OperatingSystem,
    PatchManifestEntry,
    UpdatePlanItem,
    UpdateStrategy,
)

__all__ = [
    "__version__",
    "__author__",
    "OperatingSystem",
    "PatchManifestEntry",
    "UpdatePlanItem",
    "UpdateStrategy",
]
