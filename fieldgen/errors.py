"""
Field Resolution Errors

Exception taxonomy for the field resolution engine. Every per-field
failure derives from FieldResolutionError and carries the offending field
name plus a stable code used in diagnostics.
"""

from typing import Optional


class FieldgenError(Exception):
    """Base exception for fieldgen errors"""
    pass


class ConfigError(FieldgenError):
    """Generator configuration could not be loaded or is invalid"""
    pass


class ShapeGraphError(FieldgenError):
    """Shape graph document could not be loaded or is malformed"""
    pass


# ============================================================================
# Per-field resolution errors
# ============================================================================

class FieldResolutionError(FieldgenError):
    """A single field could not be resolved."""

    code = "resolution_error"

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class UnknownField(FieldResolutionError):
    """Override names a field with no lineage and no source redirection."""
    code = "unknown_field"


class TypeAmbiguity(FieldResolutionError):
    """Same field name carries divergent types and nothing disambiguates."""
    code = "type_ambiguity"


class BadSourceRedirect(FieldResolutionError):
    """A `from` redirect names a missing operation or an unresolvable path."""
    code = "bad_source_redirect"


class ConflictingOverride(FieldResolutionError):
    """Mutually exclusive directives were set together."""
    code = "conflicting_override"


class InvalidBackoffBounds(FieldResolutionError):
    """Late initialization backoff bounds are out of order or negative."""
    code = "invalid_backoff_bounds"


class ResolutionFailed(FieldgenError):
    """
    Resolution produced one or more errors.

    Raised once at the end of a run so every problem is reported together.
    No partial resolved field set is ever returned.
    """

    def __init__(self, resource: str, errors: list, diagnostics: Optional[list] = None):
        self.resource = resource
        self.errors = list(errors)
        self.diagnostics = list(diagnostics or [])
        lines = [f"  - [{e.code}] {e}" for e in self.errors]
        super().__init__(
            f"Field resolution failed for {resource} "
            f"({len(self.errors)} error(s)):\n" + "\n".join(lines)
        )

    @property
    def codes(self) -> list[str]:
        """Error codes in the order they were detected."""
        return [e.code for e in self.errors]
