import logging
from textwrap import dedent
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from cv_store.config.settings import Settings
from cv_store.server.errors import (
    handle_broad_exceptions,
    handle_request_validation_errors,
)
from cv_store.server.routers.health import router as health_router
from cv_store.server.routers.presign import router as presign_router
from cv_store.server.s3.client import get_s3_client

# Set up logging
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the signing backend FastAPI application."""
    settings = settings or Settings()

    if not settings.s3_bucket or not settings.aws_region:
        logger.warning("Missing S3 config; set AWS_REGION and S3_BUCKET")

    app = FastAPI(
        title="CV Store signing API",
        summary="Short-lived signed URLs for CV uploads and downloads",
        version="v1",
        description=dedent(
            """\
        Issues signed S3 URLs so browsers and CLI clients can move CV files
        without holding AWS credentials. Every signed URL covers one object and
        one operation and expires after a few minutes.
        """
        ),
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.allow_origin.split(",")],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.s3_client = get_s3_client(settings)

    app.include_router(presign_router, prefix="/api", tags=["cvs"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=RequestValidationError,
        handler=handle_request_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app_settings = Settings()
    uvicorn.run(create_app(app_settings), host="0.0.0.0", port=app_settings.port)
