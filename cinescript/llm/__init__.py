"""
cinescript.llm - AI collaborators.

- Shot detail suggestions from a description (enrich)
- Image prompt refinement (enrich)
- Storyboard frame generation and editing (images)
"""

from __future__ import annotations
