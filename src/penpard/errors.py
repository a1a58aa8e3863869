"""Error taxonomy for the scan-to-report pipeline.

Lifecycle, access, readiness and synthesis errors propagate to callers.
Provider and validation errors are raised inside the enhancement pipeline
and recovered there; they never reach a report caller.
"""

from __future__ import annotations


class PenpardError(Exception):
    """Base class for all classified PenPard errors."""

    code = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class NotFound(PenpardError):
    """The requested scan does not exist."""

    code = "not_found"


class Forbidden(PenpardError):
    """The caller may not access the scan's owner data."""

    code = "forbidden"


class NotReady(PenpardError):
    """A report was requested before the scan reached a report-eligible state."""

    code = "not_ready"


class IllegalTransition(PenpardError):
    """A lifecycle transition outside the allowed graph was attempted."""

    code = "illegal_transition"

    def __init__(self, message: str = "", *, current: str | None = None, target: str | None = None):
        super().__init__(message)
        self.current = current
        self.target = target


class ProviderUnavailable(PenpardError):
    """No provider is configured, or the provider could not be reached."""

    code = "provider_unavailable"


class ProviderError(PenpardError):
    """The provider answered with an error or a malformed payload."""

    code = "provider_error"


class ValidationRejected(PenpardError):
    """Generated text failed its sanity bounds."""

    code = "validation_rejected"


class GenerationFailure(PenpardError):
    """Artifact synthesis failed."""

    code = "generation_failure"


class UnsupportedFormat(PenpardError):
    """Unknown report format or generation mode."""

    code = "unsupported_format"


class PollTimeout(PenpardError):
    """The poller exhausted its attempt budget without a terminal status."""

    code = "poll_timeout"

    def __init__(self, message: str = "", *, attempts: int = 0):
        super().__init__(message or f"Analysis timed out after {attempts} attempts")
        self.attempts = attempts


class AnalysisFailed(PenpardError):
    """The tracked analysis job reported a terminal failure."""

    code = "analysis_failed"
