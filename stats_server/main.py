import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from stats_server.core.logging_config import setup_logging
from stats_server.routes.stats import router as stats_router
from stats_server.routes.submit import router as submit_router
from stats_server.services.records import InvalidSourceError
from stats_server.services.report import VALID_SOURCES

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="CMS Statistics Server")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "%s %s -> %s (%.2fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response


app.add_middleware(RequestLoggingMiddleware)

app.include_router(stats_router)
app.include_router(submit_router)


@app.exception_handler(InvalidSourceError)
async def invalid_source_handler(request: Request, exc: InvalidSourceError):
    logger.warning("Rejected unknown data source '%s'", exc.source)
    return JSONResponse(
        status_code=404,
        content={
            "detail": f"The '{exc.source}' source is not supported",
            "valid_sources": list(VALID_SOURCES),
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "type": type(exc).__name__,
        },
    )


@app.get("/health")
def health():
    return {"status": "ok"}
