"""CLI module for roicrop.

Provides the command-line interface for batch cropping and for replaying
recorded pointer-event sessions.
"""

from __future__ import annotations

from roicrop.cli.main import app

__all__ = ["app"]
