from pydantic import BaseModel

from geoip_service.config import SERVICE_NAME


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str = "healthy"
    service: str = SERVICE_NAME


class CheckCountryResponse(BaseModel):
    """Response model for a country check."""

    allowed: bool
    country: str


class ErrorResponse(BaseModel):
    """Error body shared by every non-2xx HTTP response."""

    error: str
    message: str | None = None
