from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request, status
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from geoip_service.errors import InvalidIpError, MissingCountriesError, MissingIpError, ResolutionFailureError
from geoip_service.exception_handlers import (
    http_exception_handler,
    pydantic_validation_exception_handler,
    unhandled_exception_handler,
)
from geoip_service.logger import logger
from geoip_service.middleware import register_middleware
from geoip_service.models.request_models import CheckCountryBody
from geoip_service.models.response_models import CheckCountryResponse, ErrorResponse, HealthResponse
from geoip_service.service import LookupService

app = FastAPI(
    title="GeoIP Service",
    version="0.1.0",
    description="Checks whether an IP address resolves to one of an allow-list of countries.",
)


def get_lookup_service(request: Request) -> LookupService:
    """Dependency returning the process-wide lookup service.

    The service is attached to `app.state` by the process runner once the
    database is open; tests override this dependency instead.
    """
    service = getattr(request.app.state, "lookup_service", None)
    if service is None:
        raise RuntimeError("lookup service is not initialised")
    return service


app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)
register_middleware(app)


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health() -> HealthResponse:
    """Static liveness check; does not touch the database."""
    return HealthResponse()


@app.post(
    "/v1/check",
    response_model=CheckCountryResponse,
    status_code=status.HTTP_200_OK,
    tags=["geoip"],
    summary="Check whether an IP address belongs to one of the allowed countries.",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": CheckCountryBody.model_json_schema()}},
        }
    },
)
async def check_country(
    request: Request,
    service: Annotated[LookupService, Depends(get_lookup_service)],
) -> CheckCountryResponse:
    """Resolve the country of `ip_address` and test it against `allowed_countries`.

    - A missing IP or empty allow-list is a 400.
    - An IP that is unknown to the database is allowed=false with an empty country.
    - Unparseable IPs and database faults are reported as `lookup_failed` (500).
    """
    # Decoded by hand so that any Content-Type carrying a JSON body is accepted.
    body = CheckCountryBody.model_validate_json(await request.body())

    try:
        result = service.check_country(body.to_check_request())
    except MissingIpError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "missing_ip", "message": "IP address is required"},
        ) from exc
    except MissingCountriesError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "missing_countries", "message": "At least one allowed country is required"},
        ) from exc
    except (InvalidIpError, ResolutionFailureError) as exc:
        logger.error(
            "Country check failed "
            f"path={request.url.path} method={request.method} ip={body.ip_address} error={exc}"
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "lookup_failed", "message": "Failed to check country for IP address"},
        ) from exc

    return CheckCountryResponse(allowed=result.allowed, country=result.country)
