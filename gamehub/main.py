# gamehub/main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from gamehub.auth.token import get_current_user
from gamehub.core.config import settings
from gamehub.core.logging_config import setup_logging
from gamehub.database import engine, Base
from gamehub.models import user, user_wallet, verification  # noqa: F401  (register tables on Base)
from gamehub.routers import auth, user_routes, wallet_routes

logger = logging.getLogger(__name__)


def _requires_login(dependant) -> bool:
    return any(
        dep.call is get_current_user or _requires_login(dep) for dep in dependant.dependencies
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create DB tables
    Base.metadata.create_all(bind=engine)
    logger.info("Tables initialized")
    yield
    engine.dispose()


def create_app() -> FastAPI:
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    # CORS with credentials (for cookie sessions)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOW_ORIGINS,
        allow_credentials=settings.ALLOW_CREDENTIALS,
        allow_methods=settings.ALLOW_METHODS,
        allow_headers=settings.ALLOW_HEADERS,
    )

    # Malformed bodies are client errors like any other bad input
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.get("/api/health")
    def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    # Routers
    app.include_router(auth.router)
    app.include_router(user_routes.router)
    app.include_router(wallet_routes.router)

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title=settings.APP_NAME,
            version="1.0.0",
            description="Paste your access_token into the Authorize button to test secured routes.",
            routes=app.routes,
        )
        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
        }
        # Only routes behind get_current_user need the Authorize button
        for route in app.routes:
            if not isinstance(route, APIRoute) or not _requires_login(route.dependant):
                continue
            path = openapi_schema["paths"].get(route.path_format, {})
            for method in route.methods:
                operation = path.get(method.lower())
                if operation is not None:
                    operation["security"] = [{"BearerAuth": []}]
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi
    return app


app = create_app()
