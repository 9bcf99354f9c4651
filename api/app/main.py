from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from loguru import logger

from api.app.composition import create_app_dependencies
from api.app.config.settings import Settings
from api.app.core import SERVICE_NAME
from api.app.routers.health import health_router
from api.app.routers.status import status_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.bind(service_name=SERVICE_NAME, event="api_starting").info("")
    dependencies = create_app_dependencies()
    try:
        await dependencies.connect()
    except Exception as e:
        logger.exception("asset store connect failed: {}", e)
        raise

    app.state.settings = dependencies.settings
    app.state.asset_store = dependencies.asset_store
    app.state.status_resolver = dependencies.status_resolver
    try:
        yield
    finally:
        logger.bind(service_name=SERVICE_NAME, event="api_stopping").info("")
        await dependencies.close()


app = FastAPI(
    title="Moderation Status API",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(status_router)


def main() -> None:
    settings = Settings()
    uvicorn.run("api.app.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
