"""Workflow Studio.

Editing engine for branching automation workflows:
- an immutable step tree with copy-on-write edits
- canvas layout, validation and interpolation token discovery
- a CLI and a small REST adapter over the same engine
"""

__version__ = "0.1.0"

from workflow_studio.studio.config import StudioSettings

__all__ = ["__version__", "StudioSettings"]
