"""Failure types raised at the provider boundary."""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for provider call failures."""


class TransportError(GatewayError):
    """The provider could not be reached, timed out or rejected the call."""


class SchemaViolation(GatewayError):
    """The provider answered, but not with the declared JSON contract."""


class _OperationError(GatewayError):
    """Operation-level failure carrying the underlying kind."""

    def __init__(self, message: str, kind: str) -> None:
        super().__init__(message)
        self.kind = kind

    @classmethod
    def wrap(cls, exc: GatewayError) -> "_OperationError":
        kind = "schema" if isinstance(exc, SchemaViolation) else "transport"
        return cls(str(exc), kind=kind)


class GenerationError(_OperationError):
    """Outfit generation failed; no recommendation exists."""


class AnalysisError(_OperationError):
    """Photo analysis failed; the profile must stay as it was."""


__all__ = [
    "GatewayError",
    "TransportError",
    "SchemaViolation",
    "GenerationError",
    "AnalysisError",
]
