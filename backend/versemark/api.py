"""
FastAPI application factory.

Builds the annotation API with its services attached to ``app.state`` so
tests can construct isolated apps against temporary databases.
"""

import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import config
from .routers import definitions, highlights
from .services import AnnotationsService, DefinitionService

logger = logging.getLogger(__name__)


def _error_summary(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


def create_app(
    db_path: str | None = None,
    definition_service: DefinitionService | None = None,
) -> FastAPI:
    app = FastAPI(title="Versemark API", version="1.0.0")
    app.state.annotations_service = AnnotationsService(db_path or config.DB_PATH)
    app.state.definition_service = definition_service or DefinitionService()

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = datetime.now()
        logger.info(f">>> Incoming request: {request.method} {request.url.path}")

        try:
            response = await call_next(request)
            duration = (datetime.now() - start_time).total_seconds()
            logger.info(
                f"<<< Response: {request.method} {request.url.path} - Status: {response.status_code} - Duration: {duration:.3f}s"
            )
            return response
        except Exception as e:
            duration = (datetime.now() - start_time).total_seconds()
            logger.error(
                f"!!! Request failed: {request.method} {request.url.path} - Duration: {duration:.3f}s - Error: {str(e)}",
                exc_info=True,
            )
            return JSONResponse(
                status_code=500, content={"detail": f"Internal server error: {str(e)}"}
            )

    # Missing query parameters and malformed bodies are client errors
    @app.exception_handler(RequestValidationError)
    async def bad_request(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected {request.method} {request.url.path}")
        return JSONResponse(status_code=400, content={"detail": _error_summary(exc)})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def read_root():
        return {"message": "Versemark API", "status": "running"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    app.include_router(highlights.router)
    app.include_router(definitions.router)
    return app
