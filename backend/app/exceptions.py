"""
Error kinds raised by the diet plan services.

Every error carries the HTTP status the API layer answers with. Upstream
errors (5xx) mean the caller sent valid input but the generator misbehaved;
the API logs their detail and answers with ``public_message``. Client errors
(4xx) answer with ``message``.
"""


class DietServiceError(Exception):
    status_code = 500
    public_message = "Something went wrong. Please try again."

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    @property
    def is_upstream(self) -> bool:
        return self.status_code >= 500


class InvalidInputError(DietServiceError):
    status_code = 400
    public_message = "Invalid input."


class GenerationTimeoutError(DietServiceError):
    status_code = 504
    public_message = "The diet plan generator took too long to respond. Please try again."


class GenerationFailedError(DietServiceError):
    status_code = 502
    public_message = "The diet plan generator is unavailable right now. Please try again."


class NoJsonFoundError(DietServiceError):
    status_code = 502
    public_message = "Could not generate a diet plan. Please try again."


class IncompleteJsonError(DietServiceError):
    status_code = 502
    public_message = "Could not generate a complete diet plan. Please try again."


class SchemaViolationError(DietServiceError):
    status_code = 502
    public_message = "Could not generate a valid diet plan. Please try again."

    def __init__(self, message: str = None, errors: list = None):
        super().__init__(message)
        self.errors = errors or []


class PlanNotFoundError(DietServiceError):
    status_code = 404
    public_message = "No active diet plan found. Please generate one first."


class ForbiddenError(DietServiceError):
    status_code = 403
    public_message = "You do not have permission to access this diet plan."


class PlanConflictError(DietServiceError):
    status_code = 409
    public_message = "Another diet plan was generated at the same time. Please reload."
