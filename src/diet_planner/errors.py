"""Error hierarchy shared by services, adapters, and the API layer."""


class DietPlannerError(Exception):
    """Base error carrying a stable code and an HTTP status."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DietPlannerError):
    """Raised when caller input is invalid. Never retried."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class NotFoundError(DietPlannerError):
    """Raised when a requested resource does not exist."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, identifier: object) -> None:
        super().__init__(
            f"{resource} '{identifier}' not found",
            {"resource": resource, "id": str(identifier)},
        )


class ForbiddenError(DietPlannerError):
    """Raised when a user touches a resource owned by someone else."""

    code = "FORBIDDEN"
    status_code = 403


class DatabaseError(DietPlannerError):
    """Raised when a persistence operation fails."""

    code = "DATABASE_ERROR"
    status_code = 500


class ConcurrentUpdateError(DatabaseError):
    """Raised when a versioned update loses a race."""

    code = "CONFLICT"
    status_code = 409


class GenerationError(DietPlannerError):
    """Base class for failures on the generative side of plan creation."""

    code = "GENERATION_ERROR"
    status_code = 502


class UpstreamUnavailable(GenerationError):
    """The generative client is unset or the call failed."""

    code = "UPSTREAM_UNAVAILABLE"


class UpstreamTimeout(GenerationError):
    """The generative call exceeded its hard timeout."""

    code = "UPSTREAM_TIMEOUT"
    status_code = 504


class MalformedResponse(GenerationError):
    """The generative response could not be turned into a candidate plan."""

    code = "MALFORMED_RESPONSE"


class NoJsonFound(MalformedResponse):
    """No JSON object could be located in the response text."""

    code = "NO_JSON_FOUND"


class MalformedJson(MalformedResponse):
    """A JSON-looking block was found but did not parse."""

    code = "MALFORMED_JSON"


class InvalidPlanStructure(MalformedResponse):
    """Parsed JSON has no recognisable days collection."""

    code = "INVALID_PLAN_STRUCTURE"


class RepairExhausted(GenerationError):
    """A repaired plan still violates its structural invariants."""

    code = "REPAIR_EXHAUSTED"
    status_code = 500
