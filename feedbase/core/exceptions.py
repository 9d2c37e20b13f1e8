"""Custom exceptions for the feedbase mapping layer."""


class FeedBaseException(Exception):
    """Base class for exceptions raised by feedbase."""

    pass


class FeedContractError(FeedBaseException, AssertionError):
    """
    Raised when calling code breaks a usage contract of the mapping layer.

    Examples are updating a model that never entered editing mode, passing a
    scalar uid to a model with a composite primary key, or persisting a model
    without a storage descriptor in strict mode. These are programmer errors
    and abort the current operation; callers are not expected to recover.
    """

    def __init__(self, message: str, model_name: str | None = None) -> None:
        super().__init__(message)
        self.model_name = model_name

    def __str__(self) -> str:
        base_str = super().__str__()
        if self.model_name:
            return f"{self.model_name}: {base_str}"
        return base_str


class FeedNotFoundError(FeedContractError, LookupError):
    """Raised by the `prepare*` lookups when the requested row does not exist."""

    def __init__(self, model_name: str, params: dict | None = None) -> None:
        super().__init__("object not found.", model_name=model_name)
        self.params = params or {}


class UnsupportedDialectError(FeedBaseException):
    """Raised when a statement has no implementation for the engine's SQL dialect."""

    def __init__(self, operation: str, dialect_name: str) -> None:
        super().__init__(f"{operation} is not supported for dialect '{dialect_name}'")
        self.operation = operation
        self.dialect_name = dialect_name
