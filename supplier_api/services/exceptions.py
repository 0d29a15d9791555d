# supplier_api/services/exceptions.py


class ServiceError(Exception):
    """Base class for service-layer errors."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class DomainValidationError(ServiceError):
    """Inbound record failed its rule table."""

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        super().__init__("One or more validation errors occurred.")


class ResourceNotFoundError(ServiceError):
    """Resource not found."""
    pass


class PersistenceError(ServiceError):
    """The store reported zero rows affected."""

    def __init__(self, detail: str = "There was a problem saving the record"):
        super().__init__(detail)


class IdentityError(ServiceError):
    """User creation rejected; ``errors`` holds one ``{code, description}`` per reason."""

    def __init__(self, errors: list[dict[str, str]]):
        self.errors = errors
        super().__init__("User could not be created")


class InvalidCredentialsError(ServiceError):
    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class LockedOutError(ServiceError):
    def __init__(self, detail: str = "User is locked out"):
        super().__init__(detail)
