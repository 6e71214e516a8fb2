"""Module entrypoint: `python -m workflow_studio.cli`.

The CLI itself lives in `workflow_studio.studio.main`.
"""

from __future__ import annotations

from workflow_studio.studio.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
