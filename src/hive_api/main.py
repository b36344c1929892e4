from textwrap import dedent

import pydantic
from fastapi import FastAPI
from fastapi.routing import APIRoute
from loguru import logger

from hive_api.db.pool import HiveDBPool
from hive_api.db.store import HiveStore
from hive_api.errors import HiveError
from hive_api.errors import StoreError
from hive_api.errors import handle_broad_exceptions
from hive_api.errors import handle_hive_errors
from hive_api.errors import handle_pydantic_validation_errors
from hive_api.errors import handle_store_errors
from hive_api.monitoring.logger import configure_logger
from hive_api.monitoring.request_context import RequestContextMiddleware
from hive_api.notifications.notifier import build_notifier
from hive_api.routes.routes_health import ROUTER_HEALTH
from hive_api.routes.routes_hive import ROUTER_HIVE
from hive_api.settings import Settings


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create a FastAPI application.

    Configuration is loaded from environment variables (or a .env file) via pydantic-settings.
    """
    settings = settings or Settings()

    configure_logger(level=settings.log_level)

    logger.info(
        "Configuration loaded successfully",
        site_url=settings.site_url,
        database_configured=bool(settings.database_connection_string),
        smtp_configured=bool(settings.smtp_host),
    )

    app = FastAPI(
        title="Hive API",
        version="v1",
        description=dedent(
            """
        Collect messages ("honey") for a recipient, reveal them at the right moment,
        and send a thank-you to every contributor who asked for one.

        | Role | How it is granted |
        | --- | --- |
        | Contributor | Anyone holding the hive link |
        | Moderator | `ModeratorToken` returned at creation |
        | Recipient | `RecipientToken` returned at creation |
        """
        ),
        generate_unique_id_function=custom_generate_unique_id,
        swagger_ui_parameters={
            "defaultModelsExpandDepth": -1,  # Hide schemas section
            "defaultModelExpandDepth": 1,
        },
    )
    app.state.settings = settings

    if settings.database_connection_string:
        db_pool = HiveDBPool(
            settings.database_connection_string,
            min_size=settings.database_min_pool_size,
            max_size=settings.database_max_pool_size,
        )
    else:
        db_pool = None
        logger.warning("database_connection_string not set - hive operations will return 503")

    app.state.db_pool = db_pool
    app.state.hive_store = HiveStore(db_pool)
    app.state.notifier = build_notifier(settings)

    @app.on_event("startup")
    async def startup_database():
        """Open the hive store pool and apply the schema."""
        if app.state.db_pool is not None:
            await app.state.db_pool.initialize()

    @app.on_event("shutdown")
    async def shutdown_database():
        """Close hive store connections."""
        if app.state.db_pool is not None:
            await app.state.db_pool.close()
            logger.info("Hive store closed")

    app.add_middleware(RequestContextMiddleware)
    app.include_router(ROUTER_HEALTH, prefix="/api")
    app.include_router(ROUTER_HIVE, prefix="/api")

    app.add_exception_handler(
        exc_class_or_status_code=HiveError,
        handler=handle_hive_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=StoreError,
        handler=handle_store_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )

    app.middleware("http")(handle_broad_exceptions)

    logger.info("Hive API application created")
    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
