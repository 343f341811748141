from abc import ABC, abstractmethod
from ipaddress import IPv4Address, IPv6Address


class BaseGeoLookupClient(ABC):
    """Abstract base for geo-database backed country lookups.

    Implementations wrap a read-only database handle that is opened once at
    startup and shared by every concurrent request until `close()` is called.
    """

    @abstractmethod
    def lookup_country(self, ip: IPv4Address | IPv6Address) -> str:
        """Return the ISO country code for `ip`, or an empty string if it has no entry.

        Raises GeoLookupError when the underlying database cannot be read.
        """
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """Release the database handle."""
        raise NotImplementedError
