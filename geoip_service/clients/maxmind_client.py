from ipaddress import IPv4Address, IPv6Address
from typing import Any

import geoip2.database
from geoip2.errors import AddressNotFoundError, GeoIP2Error
from maxminddb import InvalidDatabaseError

from geoip_service.clients.base import BaseGeoLookupClient
from geoip_service.errors import DatabaseOpenError, GeoLookupError
from geoip_service.logger import logger

# Record kinds that carry `country.iso_code`, keyed by the substring of the
# database type they are found in (e.g. "GeoLite2-Country", "GeoIP2-City").
_SUPPORTED_RECORDS = ("Country", "City")


class MaxMindCountryClient(BaseGeoLookupClient):
    """Country lookups against a MaxMind GeoIP2 / GeoLite2 database.

    The reader is memory-mapped and safe for concurrent reads, so a single
    instance is shared across all request handlers without locking. It is kept
    private; callers only get `lookup_country` and `close`.
    """

    def __init__(self, reader: Any, record_kind: str) -> None:
        self._reader = reader
        self._record_kind = record_kind
        self._closed = False

    @classmethod
    def open(cls, db_path: str) -> "MaxMindCountryClient":
        """Open the database at `db_path`.

        Raises DatabaseOpenError if the file is missing, unreadable, corrupt or
        does not contain country data.
        """
        try:
            reader = geoip2.database.Reader(db_path)
        except (OSError, InvalidDatabaseError, ValueError) as exc:
            raise DatabaseOpenError(f"failed to open MaxMind database at {db_path}: {exc}") from exc

        database_type = reader.metadata().database_type
        record_kind = next((kind for kind in _SUPPORTED_RECORDS if kind in database_type), None)
        if record_kind is None:
            reader.close()
            raise DatabaseOpenError(
                f"unsupported MaxMind database type {database_type!r} at {db_path}: country data is required"
            )

        logger.info(f"GeoIP database loaded successfully path={db_path} database_type={database_type}")
        return cls(reader, record_kind)

    @property
    def database_type(self) -> str:
        return self._reader.metadata().database_type

    def lookup_country(self, ip: IPv4Address | IPv6Address) -> str:
        try:
            if self._record_kind == "City":
                record = self._reader.city(ip)
            else:
                record = self._reader.country(ip)
        except AddressNotFoundError:
            return ""
        except (GeoIP2Error, InvalidDatabaseError, OSError, ValueError) as exc:
            raise GeoLookupError(f"failed to lookup IP {ip}: {exc}") from exc

        return record.country.iso_code or ""

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._reader.close()
        logger.info("GeoIP database closed")
