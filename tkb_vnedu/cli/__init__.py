"""Command line interface (python -m tkb_vnedu.cli / tkb-vnedu)."""

from .__main__ import main

__all__ = ["main"]
