"""Command line entry point (python -m patient_panel.cli)."""

from .__main__ import main

__all__ = [
    "main",
]
