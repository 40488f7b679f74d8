from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .core.errors import FintrackError, InternalError, Unauthorized, ValidationError
from .core.logs import configure_logging, get_logger
from .database import init_db
from .routers import auth as auth_router
from .routers import categories as categories_router
from .routers import dashboard as dashboard_router
from .routers import reports as reports_router
from .routers import transactions as transactions_router


logger = get_logger(__name__)


def _error_response(error: FintrackError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(error, Unauthorized) else None
    return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(FintrackError)
    async def handle_fintrack_error(request: Request, exc: FintrackError):
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        # loc is (source, field, ...); union members append their type name after the field
        names = [part for part in first.get("loc", ()) if isinstance(part, str) and part not in {"body", "query", "path"}]
        field = names[0] if names else None
        return _error_response(ValidationError(field, first.get("msg")))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail, "field": None},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.error("unhandled_error", path=request.url.path, method=request.method, exc_info=exc)
        return _error_response(InternalError())


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="fintrack", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    @app.on_event("startup")
    def on_startup():
        init_db()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(auth_router.router)
    app.include_router(categories_router.router)
    app.include_router(transactions_router.router)
    app.include_router(reports_router.router)
    app.include_router(dashboard_router.router)

    return app


app = create_app()
