"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
error handlers and router registration.
"""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pdfchat.api.chat import router as chat_router
from pdfchat.api.upload import router as upload_router
from pdfchat.assistant.errors import ChatServiceError
from pdfchat.assistant.service import ChatService, build_chat_service
from pdfchat.models.schemas import ErrorResponse

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Build the chat service on startup unless one was injected.

    Missing credentials raise here, so the server never starts serving
    without them.
    """
    logger.info("Starting PDF Chat API...")
    if getattr(app.state, "chat_service", None) is None:
        app.state.chat_service = build_chat_service()
    yield
    logger.info("Shutting down PDF Chat API...")


def _describe_validation_error(exc: RequestValidationError) -> str:
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    if fields:
        return f"Invalid request: missing or malformed field(s): {', '.join(fields)}"
    return "Invalid request body"


async def chat_service_error_handler(request: Request, exc: ChatServiceError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(f"{request.method} {request.url.path} failed ({exc.status_code}): {exc.message}")
    body = ErrorResponse(error=exc.message, message=exc.summary)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe_validation_error(exc)
    logger.info(f"{request.method} {request.url.path} rejected: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error in {request.method} {request.url.path}")
    status_code = getattr(exc, "status_code", None) or status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=status_code, content={"error": str(exc) or "Internal Server Error"})


def _api_not_found_router() -> APIRouter:
    router = APIRouter(include_in_schema=False)

    @router.api_route(
        "/{path:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
    )
    async def api_not_found(request: Request, path: str) -> JSONResponse:
        logger.info(f"Unknown API route: {request.method} {request.url.path}")
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "API Not Found"})

    return router


def create_app(service: ChatService | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        service: Chat service to serve requests with. Built from environment
            configuration at startup when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="PDF Chat API",
        description=(
            "Upload PDF documents and converse with a hosted assistant about them. "
            "Threads, runs and file search are delegated to the OpenAI Assistants API."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.chat_service = service

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    @application.middleware("http")
    async def log_api_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path.startswith(API_PREFIX):
            logger.info(f"API request: {request.method} {request.url.path}")
        return await call_next(request)

    application.add_exception_handler(ChatServiceError, chat_service_error_handler)
    application.add_exception_handler(RequestValidationError, validation_error_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)

    application.include_router(chat_router, prefix=API_PREFIX)
    application.include_router(upload_router, prefix=API_PREFIX)
    # Must stay last so it only sees paths no API route matched
    application.include_router(_api_not_found_router(), prefix=API_PREFIX)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "pdf-chat"}

    return application


app = create_app()
