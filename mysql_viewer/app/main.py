import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mysql_viewer.app.api import datasource, query, relationships, tables
from mysql_viewer.app.core.config import Settings, settings as default_settings
from mysql_viewer.app.core.errors import ViewerError
from mysql_viewer.app.services.config_store import ConfigStore
from mysql_viewer.app.services.executor import QueryExecutor
from mysql_viewer.app.services.registry import ConnectionRegistry, EngineFactory

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ViewerError)
    async def viewer_error_handler(request: Request, exc: ViewerError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} failed")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Optional[Settings] = None, engine_factory: Optional[EngineFactory] = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = ConfigStore(settings.CONFIG_DIR)
        registry = ConnectionRegistry(store, settings, engine_factory=engine_factory)
        registry.startup()
        app.state.store = store
        app.state.registry = registry
        app.state.executor = QueryExecutor(settings.SQL_LOG_FORMAT)
        try:
            yield
        finally:
            registry.close_all()

    app = FastAPI(lifespan=lifespan, title=f"{settings.PROJECT_NAME} API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(tables.router, prefix=settings.API_PREFIX)
    app.include_router(relationships.router, prefix=settings.API_PREFIX)
    app.include_router(query.router, prefix=settings.API_PREFIX)
    app.include_router(datasource.router, prefix=settings.API_PREFIX)

    @app.get("/")
    def read_root():
        return {"message": f"Welcome to {settings.PROJECT_NAME} API"}

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=default_settings.PORT)


if __name__ == "__main__":
    run()
