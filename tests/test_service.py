from ipaddress import IPv6Address

import pytest

from geoip_service.errors import (
    GeoLookupError,
    InvalidInputError,
    InvalidIpError,
    MissingCountriesError,
    MissingIpError,
    ResolutionFailureError,
)
from geoip_service.models.common import CheckRequest, CheckResult
from geoip_service.service import LookupService
from tests.common import FakeLookupClient

COUNTRIES = {
    "8.8.8.8": "US",
    "1.1.1.1": "AU",
    "2001:4860:4860::8888": "US",
}


def _check(ip_address: str, allowed_countries: tuple[str, ...], client: FakeLookupClient | None = None) -> CheckResult:
    service = LookupService(client or FakeLookupClient(COUNTRIES))
    return service.check_country(CheckRequest(ip_address=ip_address, allowed_countries=allowed_countries))


def test_check_country_allowed_when_country_in_allow_list() -> None:
    result = _check("8.8.8.8", ("US",))

    assert result == CheckResult(allowed=True, country="US")


def test_check_country_denied_when_country_not_in_allow_list() -> None:
    result = _check("1.1.1.1", ("DE",))

    assert result == CheckResult(allowed=False, country="AU")


def test_check_country_supports_ipv6() -> None:
    client = FakeLookupClient(COUNTRIES)

    result = _check("2001:4860:4860::8888", ("CA", "US"), client)

    assert result.allowed is True
    assert client.lookups == [IPv6Address("2001:4860:4860::8888")]


def test_check_country_unknown_ip_is_denied_without_error() -> None:
    result = _check("203.0.113.10", ("US",))

    assert result == CheckResult(allowed=False, country="")


def test_check_country_membership_is_case_sensitive() -> None:
    result = _check("8.8.8.8", ("us",))

    assert result == CheckResult(allowed=False, country="US")


def test_check_country_tolerates_duplicate_allowed_countries() -> None:
    result = _check("8.8.8.8", ("DE", "US", "US"))

    assert result.allowed is True


@pytest.mark.parametrize("ip_address", ["not-an-ip", "999.1.1.1", "8.8.8", " 8.8.8.8", "fe80::1%eth0"])
def test_check_country_rejects_malformed_ip(ip_address: str) -> None:
    client = FakeLookupClient(COUNTRIES)

    with pytest.raises(InvalidIpError):
        _check(ip_address, ("US",), client)

    assert client.lookups == []


def test_check_country_rejects_missing_ip() -> None:
    with pytest.raises(MissingIpError):
        _check("", ("US",))


@pytest.mark.parametrize("ip_address", ["8.8.8.8", "not-an-ip"])
def test_check_country_rejects_empty_allow_list_regardless_of_ip(ip_address: str) -> None:
    with pytest.raises(MissingCountriesError):
        _check(ip_address, ())


def test_validation_errors_share_invalid_input_base() -> None:
    for error_cls in (MissingIpError, MissingCountriesError, InvalidIpError):
        assert issubclass(error_cls, InvalidInputError)


def test_check_country_wraps_lookup_error_as_resolution_failure() -> None:
    client = FakeLookupClient(error=GeoLookupError("corrupt search tree"))

    with pytest.raises(ResolutionFailureError) as exc_info:
        _check("8.8.8.8", ("US",), client)

    # Driver details stay on the cause, not in the caller-facing message.
    assert "corrupt" not in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, GeoLookupError)
