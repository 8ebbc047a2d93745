class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class RoleNotFoundError(DomainError):
    """Raised when a role name is absent from the catalog."""

    def __init__(self, role_name: str):
        super().__init__(f"Role '{role_name}' not found")
        self.role_name = role_name
