# core/errors.py


class IdentityError(Exception):
    """Base class for failures raised by the account/session core."""


class ValidationError(IdentityError):
    """Input is malformed or carries no usable identity."""


class ConflictError(IdentityError):
    """A uniqueness rule would be broken, or two hints point at different users.

    Callers should re-run resolution rather than replay the same write.
    """


class NotFoundError(IdentityError):
    def __init__(self, message: str, resource: str = "user"):
        super().__init__(message)
        self.resource = resource


class AuthError(IdentityError):
    """A credential failed signature, expiry or type checks."""


class StoreError(IdentityError):
    """The database failed underneath an operation."""
