"""
Service-layer exceptions.

Services raise these instead of returning status codes; create_app()
maps each one to a JSON error response:

    NotFoundError    404  missing, or outside the caller's center
    ValidationError  400  payload fails a business rule
    ConflictError    409  unique value already taken

    raise NotFoundError("Parent questionnaire", questionnaire_id, center_id=ctx.center_id)
    raise ValidationError("madressah_app_id is required to create questionnaire")
"""


class WelfareError(Exception):
    """Base class for errors the API reports to the client verbatim."""


class NotFoundError(WelfareError):
    """Record absent from the caller's tenant scope.

    A row that exists in another center raises this as well, so the
    response never confirms that it exists. ``center_id`` is the scope
    that was applied and only goes to the log.
    """

    def __init__(self, resource: str, resource_id=None, center_id: int | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        self.center_id = center_id
        label = resource if resource_id is None else f"{resource} id={resource_id}"
        super().__init__(f"{label} not found")


class ValidationError(WelfareError):
    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(WelfareError):
    def __init__(self, resource: str, field: str, value=None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f"{resource} with {field}={value!r} already exists")
