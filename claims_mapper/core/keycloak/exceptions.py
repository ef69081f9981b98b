"""Keycloak-specific exceptions for error handling."""
from claims_mapper.core.exceptions import AttributeLookupError


class KeycloakError(Exception):
    """Base exception for all Keycloak operations."""
    pass


class KeycloakAPIError(KeycloakError):
    """HTTP error from Keycloak Admin API.

    Attributes:
        status_code: HTTP status code
        message: Error message from response
        endpoint: API endpoint that failed
    """

    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class UserNotFoundError(KeycloakError):
    """User lookup failed - username or id does not exist."""
    pass


class RoleAttributesUnavailableError(KeycloakError, AttributeLookupError):
    """Admin API call for a role's attributes failed."""

    def __init__(self, role_name: str, message: str):
        AttributeLookupError.__init__(self, role_name, message)
