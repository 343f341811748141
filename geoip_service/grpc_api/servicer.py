import grpc

from geoip_service.config import SERVICE_NAME
from geoip_service.errors import InvalidIpError, MissingCountriesError, MissingIpError, ResolutionFailureError
from geoip_service.grpc_api.messages import (
    RPC_SERVICE_NAME,
    CheckCountryRequest,
    CheckCountryResponse,
    HealthRequest,
    HealthResponse,
)
from geoip_service.logger import logger
from geoip_service.models.common import CheckRequest
from geoip_service.service import LookupService


class GeoIPServicer:
    """gRPC front-end for the lookup service.

    Mirrors the HTTP API: request validation lives in the lookup service and
    this class only translates its errors into gRPC status codes.
    """

    def __init__(self, service: LookupService) -> None:
        self._service = service

    async def CheckCountry(self, request, context: grpc.aio.ServicerContext):
        check_request = CheckRequest(
            ip_address=request.ip_address,
            allowed_countries=tuple(request.allowed_countries),
        )
        try:
            result = self._service.check_country(check_request)
        except MissingIpError:
            logger.warning("Rejected gRPC CheckCountry call: missing IP address")
            await context.abort(grpc.StatusCode.INVALID_ARGUMENT, "IP address is required")
        except MissingCountriesError:
            logger.warning(f"Rejected gRPC CheckCountry call: no allowed countries ip={request.ip_address}")
            await context.abort(grpc.StatusCode.INVALID_ARGUMENT, "at least one allowed country is required")
        except (InvalidIpError, ResolutionFailureError) as exc:
            logger.error(f"Country check failed ip={request.ip_address} error={exc}")
            await context.abort(grpc.StatusCode.INTERNAL, "failed to check country for IP address")

        return CheckCountryResponse(allowed=result.allowed, country=result.country)

    async def Health(self, request, context: grpc.aio.ServicerContext):
        return HealthResponse(status="healthy", service=SERVICE_NAME)


def add_geoip_servicer_to_server(servicer: GeoIPServicer, server: grpc.aio.Server) -> None:
    """Register `servicer` under `geoip.GeoIPService` (same shape as protoc-generated code)."""
    rpc_method_handlers = {
        "CheckCountry": grpc.unary_unary_rpc_method_handler(
            servicer.CheckCountry,
            request_deserializer=CheckCountryRequest.FromString,
            response_serializer=CheckCountryResponse.SerializeToString,
        ),
        "Health": grpc.unary_unary_rpc_method_handler(
            servicer.Health,
            request_deserializer=HealthRequest.FromString,
            response_serializer=HealthResponse.SerializeToString,
        ),
    }
    generic_handler = grpc.method_handlers_generic_handler(RPC_SERVICE_NAME, rpc_method_handlers)
    server.add_generic_rpc_handlers((generic_handler,))


class GeoIPServiceStub:
    """Client stub for `geoip.GeoIPService`, usable with sync or asyncio channels."""

    def __init__(self, channel) -> None:
        self.CheckCountry = channel.unary_unary(
            f"/{RPC_SERVICE_NAME}/CheckCountry",
            request_serializer=CheckCountryRequest.SerializeToString,
            response_deserializer=CheckCountryResponse.FromString,
        )
        self.Health = channel.unary_unary(
            f"/{RPC_SERVICE_NAME}/Health",
            request_serializer=HealthRequest.SerializeToString,
            response_deserializer=HealthResponse.FromString,
        )
