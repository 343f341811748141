import grpc

from geoip_service.errors import TransportBindError
from geoip_service.grpc_api.servicer import GeoIPServicer, add_geoip_servicer_to_server
from geoip_service.service import LookupService


def create_grpc_server(service: LookupService, host: str, port: int) -> tuple[grpc.aio.Server, int]:
    """Build an asyncio gRPC server for `service` and bind it to `host:port`.

    Returns the (not yet started) server and the port actually bound, which
    differs from `port` when 0 is requested.

    Raises TransportBindError if the address cannot be bound.
    """
    server = grpc.aio.server()
    add_geoip_servicer_to_server(GeoIPServicer(service), server)

    address = f"{host}:{port}"
    try:
        bound_port = server.add_insecure_port(address)
    except RuntimeError as exc:
        raise TransportBindError(f"failed to listen on gRPC address {address}: {exc}") from exc

    # Older grpcio releases signal a failed bind by returning 0 instead of raising.
    if bound_port == 0:
        raise TransportBindError(f"failed to listen on gRPC address {address}")

    return server, bound_port
