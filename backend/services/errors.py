"""Typed errors raised by the recruitment core.

Neutral outcomes (a spec without requirements, a candidate with missing
fields) are never errors: they resolve to default scores instead.
"""


class RecruitmentError(Exception):
    """Base class for every error the core raises.

    ``retryable`` tells callers whether re-running the operation against
    freshly fetched state can succeed.
    """

    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RecruitmentError):
    """Malformed input (bad weight, inconsistent job graph, illegal transition)."""


class NotFoundError(RecruitmentError):
    """A referenced family, template, variant, application or version is absent."""


class ConflictError(RecruitmentError):
    """Duplicate application, or a change attempted on a finalized application."""


class StaleStateError(ConflictError):
    """A transition was computed against an application status that has since changed."""

    retryable = True
