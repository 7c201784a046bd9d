"""
cinescript.exceptions - Custom exception classes.

All CineScript-specific exceptions inherit from CineScriptError. Lookups of
missing projects, scenes or shots are not errors: store operations return
their input unchanged instead.
"""


class CineScriptError(Exception):
    """Base exception for all CineScript errors."""

    pass


class ConfigError(CineScriptError):
    """Configuration loading or validation error."""

    pass


class WorkspaceError(CineScriptError):
    """Workspace directory missing or already present."""

    pass


class PersistenceError(CineScriptError):
    """Durable storage read or write failed."""

    pass


class InvariantError(CineScriptError):
    """Shot numbering or selection post-condition failed after an operation."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


class CollaboratorError(CineScriptError):
    """An external AI collaborator failed or returned an unusable payload."""

    pass


class LLMError(CollaboratorError):
    """LLM backend or prompt error."""

    pass


class LLMResponseError(LLMError):
    """LLM returned malformed or unexpected response."""

    pass


class EnrichmentError(CollaboratorError):
    """Shot detail suggestion or prompt refinement failed."""

    pass


class ImageSynthesisError(CollaboratorError):
    """Image generation or editing failed."""

    pass


class ExportError(CineScriptError):
    """Shot list export error."""

    pass
