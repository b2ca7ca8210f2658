import logging
import os
from contextlib import asynccontextmanager

from elasticsearch import AsyncElasticsearch
from fastapi import Depends, FastAPI

from .dependencies import elasticsearch_stores, get_store_backend, memory_stores
from .lib.config import load_config
from .routers import health, interactions, recommendations
from .security import verify_api_key

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_config()
    backend = get_store_backend()
    app.state.config = config
    app.state.store_backend = backend

    if backend == "memory":
        logger.info("Using in-memory stores")
        app.state.stores = memory_stores()
        yield
        return

    es = AsyncElasticsearch(
        os.environ.get("ELASTICSEARCH_URL", "http://localhost:9200"),
        api_key=os.environ.get("ELASTICSEARCH_API_KEY") or None,
    )
    app.state.es = es
    app.state.stores = elasticsearch_stores(es, config)
    try:
        yield
    finally:
        await es.close()


app = FastAPI(
    title="Friend Recommendation API",
    description="Recommends new friends from the friendship graph and interaction scores",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(recommendations.router)
app.include_router(interactions.router)


@app.get("/", dependencies=[Depends(verify_api_key)])
async def root():
    return {"message": "Friend Recommendation API"}
