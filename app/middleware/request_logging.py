import time
import uuid
import logging
from fastapi import Request

logger = logging.getLogger("access")

REQUEST_ID_HEADER = "X-Request-Id"


async def request_logging_middleware(request: Request, call_next):
    start_time = time.perf_counter()

    # caller-supplied id wins
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id

    elapsed_ms = round((time.perf_counter() - start_time) * 1000, 2)

    logger.log(
        logging.WARNING if response.status_code >= 500 else logging.INFO,
        "",
        extra={
            "request_id": request_id,
            "client_addr": request.client.host if request.client else "unknown",
            "user_id": getattr(request.state, "user_id", "-"),
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": elapsed_ms,
        },
    )

    return response
