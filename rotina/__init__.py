"""ROTINA Python package.

Public API:
  - import from `rotina.api` (preferred) or `import rotina` (re-export)
"""

from __future__ import annotations

from .api import *  # noqa: F401,F403
from . import api as _api

__all__ = list(_api.__all__)
