"""Domain exceptions raised by the service layer, independent of FastAPI."""


class YardError(Exception):
    """Base class for recoverable yard errors."""


class ValidationError(YardError):
    """Raised when a field is malformed or a required field is missing."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class DuplicateEntityError(ValidationError):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists", field=field)


class NotFoundError(YardError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, key: str, key_name: str = "id"):
        self.entity_type = entity_type
        self.key = key
        super().__init__(f"{entity_type} with {key_name} '{key}' not found")


class InvalidStateError(YardError):
    """Raised when a lifecycle transition is not allowed from the current status."""

    def __init__(self, message: str, current_status: str | None = None):
        self.current_status = current_status
        super().__init__(message)
