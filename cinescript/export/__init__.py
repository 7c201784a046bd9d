"""
cinescript.export - Shot list export.

- CSV shot chart for spreadsheets and call-sheet tools
"""

from __future__ import annotations
