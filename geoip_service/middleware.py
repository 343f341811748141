import asyncio
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response, status

from geoip_service.config import REQUEST_TIMEOUT_SECONDS
from geoip_service.exception_handlers import error_response, unhandled_exception_handler
from geoip_service.logger import logger

REQUEST_ID_HEADER = "X-Request-ID"

CallNext = Callable[[Request], Awaitable[Response]]

_CLIENT_IP_HEADERS = ("true-client-ip", "x-real-ip")


def get_client_ip(request: Request) -> str | None:
    """Resolve the caller's IP, preferring proxy headers over the socket peer."""
    for header in _CLIENT_IP_HEADERS:
        value = request.headers.get(header)
        if value:
            return value.strip()

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    return request.client.host if request.client else None


async def request_id_middleware(request: Request, call_next: CallNext) -> Response:
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


async def real_ip_middleware(request: Request, call_next: CallNext) -> Response:
    request.state.client_ip = get_client_ip(request)
    return await call_next(request)


async def access_log_middleware(request: Request, call_next: CallNext) -> Response:
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = int((time.perf_counter() - started) * 1000)

    logger.info(
        "HTTP request "
        f"request_id={getattr(request.state, 'request_id', None)} "
        f"method={request.method} path={request.url.path} status={response.status_code} "
        f"duration_ms={duration_ms} remote_addr={getattr(request.state, 'client_ip', None)} "
        f"user_agent={request.headers.get('user-agent', '')}"
    )
    return response


async def recover_middleware(request: Request, call_next: CallNext) -> Response:
    """Turn any exception escaping a handler into a 500 so the server keeps running."""
    try:
        return await call_next(request)
    except Exception as exc:
        return await unhandled_exception_handler(request, exc)


async def timeout_middleware(request: Request, call_next: CallNext) -> Response:
    try:
        return await asyncio.wait_for(call_next(request), timeout=REQUEST_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.error(
            "Request timed out "
            f"path={request.url.path} method={request.method} timeout_seconds={REQUEST_TIMEOUT_SECONDS}"
        )
        return error_response(status.HTTP_504_GATEWAY_TIMEOUT, "timeout", "Request timed out")


def register_middleware(app: FastAPI) -> None:
    # Starlette wraps in reverse registration order, so request_id runs outermost.
    for middleware in (
        timeout_middleware,
        recover_middleware,
        access_log_middleware,
        real_ip_middleware,
        request_id_middleware,
    ):
        app.middleware("http")(middleware)
