from ipaddress import ip_address

from geoip_service.clients.base import BaseGeoLookupClient
from geoip_service.errors import (
    GeoLookupError,
    InvalidIpError,
    MissingCountriesError,
    MissingIpError,
    ResolutionFailureError,
)
from geoip_service.logger import logger
from geoip_service.models.common import CheckRequest, CheckResult


class LookupService:
    """Decides whether an IP address resolves to one of the allowed countries.

    This is the only place that validates a check request, so the HTTP and gRPC
    adapters share the exact same rules and only differ in how they report the
    resulting error.
    """

    def __init__(self, client: BaseGeoLookupClient) -> None:
        self._client = client

    def check_country(self, request: CheckRequest) -> CheckResult:
        """Resolve the country of `request.ip_address` and test it against the allow-list.

        - Raises MissingIpError if no IP is given.
        - Raises MissingCountriesError if the allow-list is empty.
        - Raises InvalidIpError if the IP is not a valid IPv4/IPv6 literal.
        - Raises ResolutionFailureError if the database read fails.

        An IP without a database entry is not an error: it yields
        `allowed=False` with an empty country.
        """
        if not request.ip_address:
            raise MissingIpError("IP address is required")

        if not request.allowed_countries:
            raise MissingCountriesError("at least one allowed country is required")

        try:
            parsed_ip = ip_address(request.ip_address)
        except ValueError as exc:
            raise InvalidIpError(f"invalid IP address: {request.ip_address}") from exc

        # Zone-scoped IPv6 literals (fe80::1%eth0) are not plain addresses.
        if getattr(parsed_ip, "scope_id", None) is not None:
            raise InvalidIpError(f"invalid IP address: {request.ip_address}")

        try:
            country_code = self._client.lookup_country(parsed_ip)
        except GeoLookupError as exc:
            logger.error(f"Failed to lookup IP ip={request.ip_address} error={exc}")
            raise ResolutionFailureError("internal error") from exc

        if not country_code:
            logger.warning(f"No country found for IP ip={request.ip_address}")
            return CheckResult(allowed=False, country="")

        # Exact, case-sensitive membership.
        allowed = country_code in request.allowed_countries

        logger.info(
            "Country check performed "
            f"ip={request.ip_address} country={country_code} allowed={allowed} "
            f"allowed_countries={list(request.allowed_countries)}"
        )
        return CheckResult(allowed=allowed, country=country_code)
