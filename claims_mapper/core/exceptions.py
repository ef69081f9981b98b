"""Exceptions raised by host adapters and handled by the mapper."""


class MapperError(Exception):
    """Base exception for claim mapping."""
    pass


class AttributeLookupError(MapperError):
    """Reading one role's attributes failed.

    The claim builder skips the role and keeps going.

    Attributes:
        role_name: Role whose attributes could not be resolved
    """

    def __init__(self, role_name: str, message: str):
        self.role_name = role_name
        super().__init__(f"Attributes of role '{role_name}' unavailable: {message}")
