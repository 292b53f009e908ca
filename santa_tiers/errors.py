from __future__ import annotations


class SantaError(RuntimeError):
    """Base for failures reported back to the caller of a round operation."""

    http_status = 500
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"error": self.message}


class InvalidParticipant(SantaError):
    http_status = 400
    default_message = "Invalid or missing participant."


class InconsistentRoundState(SantaError):
    http_status = 409
    default_message = (
        "Assignments already exist for this round, but none were found for you. "
        "Admin may need to reset."
    )


class PersistenceFailure(SantaError):
    http_status = 500
    default_message = "Database error."


class AuthorizationFailure(SantaError):
    http_status = 403
    default_message = "Invalid admin token."


class PatternError(ValueError):
    """The base pattern does not satisfy its structural invariants."""
