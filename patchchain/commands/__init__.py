"""CLI command implementations for patchchain.

This module contains all command-line interface implementations:
- latest: Resolve the latest client version of a branch
- plan: Plan the downloads from the installed version to a target
- probe: Probe which full archives are downloadable
- verify: Check a downloaded file against its SHA-256
"""

from patchchain.commands.update import latest, plan, probe
from patchchain.commands.verify import verify

__all__ = ["latest", "plan", "probe", "verify"]
