from pydantic import BaseModel, ConfigDict


class CheckRequest(BaseModel):
    """Transport-independent input of a country check.

    Built by the HTTP and gRPC adapters from their own envelopes and passed
    unchanged to the lookup service, which owns all semantic validation.
    """

    model_config = ConfigDict(frozen=True)

    ip_address: str = ""
    allowed_countries: tuple[str, ...] = ()


class CheckResult(BaseModel):
    """Outcome of a country check; `country` is empty when the IP is unknown."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    country: str = ""
