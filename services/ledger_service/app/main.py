from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared import RequestIDMiddleware, register_error_handlers

from .errors import LedgerError
from .routes import register_routes
from .startup import init_service_startup, setup_instrumentation, setup_logging, shutdown_instrumentation


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_service_startup(app)
    yield
    await shutdown_instrumentation(app)


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="Ledger Service", version="0.1.0", lifespan=lifespan)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app, LedgerError)
    setup_instrumentation(app)
    register_routes(app)
    return app
