# supplier_api/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from fastapi.responses import Response

from supplier_api.api.error_handlers import register_exception_handlers
from supplier_api.api.routers import auth, suppliers
from supplier_api.core.config import settings
from supplier_api.core.logging import setup_logging
from supplier_api.core.metrics import export_metrics
from supplier_api.db.session_async import init_models
from supplier_api.initial_data import create_initial_admin_user
from supplier_api.middleware import ObservabilityMiddleware

TAGS_METADATA = [
    {"name": "users", "description": "Registration and login; both return a signed access token."},
    {"name": "suppliers", "description": "Supplier records: list, read, create, update, delete."},
]


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    if settings.CREATE_TABLES_ON_STARTUP:
        await init_models()
    await create_initial_admin_user()
    yield


def create_app() -> FastAPI:
    docs_enabled = settings.is_development
    application = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        description=(
            "Supplier CRUD API with JWT authentication.\n\n"
            "Use the **Authorize** button with the token returned by `/login`."
        ),
        openapi_tags=TAGS_METADATA,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    application.add_middleware(ObservabilityMiddleware)
    register_exception_handlers(application)

    application.include_router(auth.router)
    application.include_router(suppliers.router)

    def custom_openapi():
        if application.openapi_schema:
            return application.openapi_schema

        openapi_schema = get_openapi(
            title=application.title,
            version=application.version,
            description=application.description,
            routes=application.routes,
            tags=TAGS_METADATA,
        )
        comps = openapi_schema.setdefault("components", {}).setdefault("securitySchemes", {})
        comps["BearerAuth"] = {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Paste the access token here. Format: `Bearer <token>`",
        }
        application.openapi_schema = openapi_schema
        return application.openapi_schema

    application.openapi = custom_openapi

    @application.get("/", include_in_schema=False)
    def root():
        return {"status": "ok", "docs_url": application.docs_url}

    @application.get("/metrics", include_in_schema=False)
    def metrics():
        body, content_type = export_metrics()
        return Response(content=body, media_type=content_type)

    return application


app = create_app()
