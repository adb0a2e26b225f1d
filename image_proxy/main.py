from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from image_proxy.errors import ProxyError
from image_proxy.handlers import proxy_handler
from image_proxy.services.fetcher import ImageFetcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.fetcher = ImageFetcher()
    try:
        yield
    finally:
        await app.state.fetcher.close()


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


def create_app() -> FastAPI:
    app = FastAPI(title="Signed Image Proxy", lifespan=lifespan)
    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.include_router(proxy_handler.router)

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run("image_proxy.main:app", host="0.0.0.0", port=8000)
