class AppError(Exception):
    """Base application error for the GeoIP service."""


class InvalidInputError(AppError):
    """Raised when a check request is rejected before any lookup happens."""


class MissingIpError(InvalidInputError):
    """Raised when the request carries no IP address."""


class MissingCountriesError(InvalidInputError):
    """Raised when the allow-list is empty."""


class InvalidIpError(InvalidInputError):
    """Raised when the supplied IP address is not a valid IPv4 or IPv6 literal."""


class ResolutionFailureError(AppError):
    """Raised when the country could not be resolved because of an internal fault."""


class GeoLookupError(AppError):
    """Raised by a geo-lookup client when reading the database fails."""


class DatabaseOpenError(AppError):
    """Raised when the geo-database is missing, corrupt or of an unsupported type."""


class TransportBindError(AppError):
    """Raised when a listening port for one of the transports cannot be bound."""


class ServerStoppedError(AppError):
    """Raised when the HTTP or gRPC server stops without a shutdown being requested."""
