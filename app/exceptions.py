"""
Error types raised below the HTTP layer.

Services raise ``DomainError`` subclasses; routers translate them into
``HTTPException`` responses.  ``UniqueConstraintViolation`` is a store-level
signal and only ever escapes the service after passing through
``translate_storage_error``.
"""


class DomainError(Exception):
    """Base class for all domain exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    """Raised when a requested product does not exist."""

    def __init__(self, product_id: int) -> None:
        self.product_id = product_id
        super().__init__(f"Product with id {product_id} not found")


class ConflictError(DomainError):
    """Raised when a write collides with existing state (duplicate token)."""


class UniqueConstraintViolation(Exception):
    """Raised by a store when an insert would break a uniqueness invariant."""

    def __init__(self, field: str, value: object = None) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Unique constraint violated on {field!r}")


def translate_storage_error(exc: Exception, product_token: str) -> Exception:
    """
    Map a storage failure raised while creating *product_token*.

    A uniqueness violation on ``product_token`` becomes a ``ConflictError``;
    anything else is returned as-is so the caller can re-raise it verbatim.
    """
    if isinstance(exc, UniqueConstraintViolation) and exc.field == "product_token":
        return ConflictError(f"Product token '{product_token}' already exists")
    return exc
