from __future__ import annotations


class ValidationError(ValueError):
    """Input rejected before any state was touched."""


class ExportError(RuntimeError):
    """An export aborted without producing an artifact."""


class ExportInProgressError(ExportError):
    """Another export is already running on this engine."""
