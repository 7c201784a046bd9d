"""
CineScript - shot list management for film productions.

Keeps a hierarchical shot list (Project → Scene → Shot) with strict shot
numbering, tracks the active project and scene across edits, and calls out to
generative AI for shot suggestions and storyboard frames.
"""

__version__ = "0.1.0"
