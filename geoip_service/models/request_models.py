from typing import Any

from pydantic import BaseModel, Field, field_validator

from geoip_service.models.common import CheckRequest


class CheckCountryBody(BaseModel):
    """JSON body of `POST /v1/check`.

    Missing or null fields are treated as empty so that the lookup service can
    report them as `missing_ip` / `missing_countries` rather than as a malformed
    request. Wrongly typed values (e.g. a number for `ip_address`) still fail
    validation and surface as `invalid_request`.
    """

    ip_address: str = Field(
        default="",
        description="IPv4 or IPv6 address to check.",
        examples=["8.8.8.8", "2001:4860:4860::8888"],
    )
    allowed_countries: list[str] = Field(
        default_factory=list,
        description="ISO 3166-1 alpha-2 country codes the IP is allowed to resolve to. Case sensitive.",
        examples=[["US", "CA"]],
    )

    @field_validator("ip_address", mode="before")
    @classmethod
    def _null_ip_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("allowed_countries", mode="before")
    @classmethod
    def _null_countries_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_check_request(self) -> CheckRequest:
        return CheckRequest(ip_address=self.ip_address, allowed_countries=tuple(self.allowed_countries))
