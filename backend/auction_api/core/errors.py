"""Domain exceptions raised below the HTTP layer.

Routers translate these into status codes; repositories and services never
build HTTP responses themselves.
"""


class AuctionAPIError(Exception):
    """Base class for every domain error of the API."""


class InvalidTokenError(AuctionAPIError):
    """A JWT failed signature, expiry, issuer or type validation."""


class DuplicateEmailError(AuctionAPIError):
    """A user with the same email already exists."""


class VerificationTokenError(AuctionAPIError):
    """An email verification token is unknown, used or expired."""


class VehicleNotFoundError(AuctionAPIError):
    """The referenced vehicle does not exist."""
