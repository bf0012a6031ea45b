"""Punto de entrada: python -m basal_tool."""

from __future__ import annotations

from basal_tool.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
