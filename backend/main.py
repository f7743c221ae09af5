from contextlib import asynccontextmanager
from dataclasses import replace

from fastapi import FastAPI

from api import build_registry, customers, search
from schemarules import SchemaGenerationOptions, install_schema_rules
from schemarules.config import settings
from schemarules.logging import configure_logging, get_logger

# Initialize logging before anything else
configure_logging(
    level=settings.LOG_LEVEL,
    json_logs=settings.LOG_JSON,
)

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("startup", message="Schema rules sample API starting up")
    yield
    log.info("shutdown", message="Schema rules sample API shutting down")


app = FastAPI(
    title="Schema Rules Sample API",
    description="Request schemas documented from their validation rules",
    version="0.1.0",
    lifespan=lifespan,
)

# FastAPI emits OpenAPI 3.1, where exclusive bounds are numbers
options = replace(SchemaGenerationOptions.from_settings(), exclusive_bounds="numeric")
registry = build_registry(options)

app.include_router(customers.router, prefix="/api/customers", tags=["customers"])
app.include_router(search.router, prefix="/api/search", tags=["search"])

install_schema_rules(app, registry, options)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": "0.1.0", "validators": len(registry)}


if __name__ == "__main__":
    import uvicorn

    log.info("server_config", host=settings.BACKEND_HOST, port=settings.BACKEND_PORT, debug=settings.APP_DEBUG)
    uvicorn.run(
        "main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.APP_DEBUG,
        log_config=None,  # Disable uvicorn's default logging, we handle it
    )
