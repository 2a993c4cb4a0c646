# storefront/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from storefront import __version__
from storefront.api import include_routers
from storefront.data.database import Base, engine
from storefront.utils.logging import get_logger
from storefront.utils.retry import db_retry

# modele musza byc zarejestrowane w Base.metadata przed create_all
import storefront.data.models  # noqa: F401

logger = get_logger(__name__)


@db_retry()
def create_tables(bind=engine) -> None:
    logger.info(f"Creating tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=bind)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    logger.info("Storefront started")
    yield
    engine.dispose()
    logger.info("Storefront stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront",
        version=__version__,
        lifespan=lifespan,
    )
    return include_routers(app)


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
