from ipaddress import IPv4Address, IPv6Address
from types import SimpleNamespace
from typing import Any

import grpc

from geoip_service.clients.base import BaseGeoLookupClient
from geoip_service.models.common import CheckRequest, CheckResult


class FakeLookupClient(BaseGeoLookupClient):
    """In-memory geo-lookup client keyed by the string form of the IP."""

    def __init__(self, countries: dict[str, str] | None = None, error: Exception | None = None) -> None:
        self._countries = countries or {}
        self._error = error
        self.lookups: list[IPv4Address | IPv6Address] = []
        self.close_calls = 0

    def lookup_country(self, ip: IPv4Address | IPv6Address) -> str:
        self.lookups.append(ip)
        if self._error is not None:
            raise self._error
        return self._countries.get(str(ip), "")

    def close(self) -> None:
        self.close_calls += 1


class ErrorRaisingService:
    """Test double for LookupService that always raises a configured exception."""

    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    def check_country(self, request: CheckRequest) -> CheckResult:
        raise self._exc


class FakeReader:
    """Minimal stand-in for geoip2.database.Reader."""

    def __init__(self, database_type: str = "GeoLite2-Country", records: dict[str, Any] | None = None) -> None:
        self._database_type = database_type
        self._records = records or {}
        self.calls: list[tuple[str, Any]] = []
        self.closed = False

    def metadata(self) -> SimpleNamespace:
        return SimpleNamespace(database_type=self._database_type)

    def _get(self, method: str, ip: Any) -> Any:
        self.calls.append((method, ip))
        record = self._records.get(str(ip))
        if isinstance(record, Exception):
            raise record
        return record

    def country(self, ip: Any) -> Any:
        return self._get("country", ip)

    def city(self, ip: Any) -> Any:
        return self._get("city", ip)

    def close(self) -> None:
        self.closed = True


def country_record(iso_code: str | None) -> SimpleNamespace:
    return SimpleNamespace(country=SimpleNamespace(iso_code=iso_code))


class AbortedRpc(Exception):
    def __init__(self, code: grpc.StatusCode, details: str) -> None:
        super().__init__(details)
        self.code = code
        self.details = details


class FakeServicerContext:
    """Async servicer context whose abort() raises like grpc.aio does."""

    async def abort(self, code: grpc.StatusCode, details: str = "") -> None:
        raise AbortedRpc(code, details)
