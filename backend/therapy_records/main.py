"""
Therapy Records API
Patients, diseases, medical history, therapies and therapy tools, plus
medical report attachments, for a local desktop UI.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import patients, diseases, therapies, medical_reports, operations
from .core.config import settings
from .core.database import RecordStore
from .core.errors import RecordsError
from .core.request_logging import RequestLogMiddleware
from .seed_demo import seed_demo_data
from .services.attachment_store import AttachmentStore
from .services.operations import OperationDispatcher
from .services.record_gateway import RecordGateway

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(store: Optional[RecordStore] = None, attachments: Optional[AttachmentStore] = None) -> FastAPI:
    store = store or RecordStore()
    attachments = attachments or AttachmentStore(store)
    gateway = RecordGateway(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.open()
        if settings.SEED_DEMO_DATA:
            seed_demo_data(store)
        yield
        store.close()

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description=(
            "Local record store for patients, diseases, medical history, therapies "
            "and therapy tools, with medical report attachments."
        ),
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.gateway = gateway
    app.state.attachments = attachments
    app.state.dispatcher = OperationDispatcher(gateway, attachments)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # UI is served from a local origin
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLogMiddleware)

    @app.exception_handler(RecordsError)
    async def records_error_handler(request: Request, exc: RecordsError):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error": type(exc).__name__},
        )

    app.include_router(patients.router, prefix="/api/v1")
    app.include_router(diseases.router, prefix="/api/v1")
    app.include_router(diseases.history_router, prefix="/api/v1")
    app.include_router(therapies.router, prefix="/api/v1")
    app.include_router(therapies.tools_router, prefix="/api/v1")
    app.include_router(therapies.satellites_router, prefix="/api/v1")
    app.include_router(medical_reports.router, prefix="/api/v1")
    app.include_router(operations.router, prefix="/api/v1")

    @app.get("/health")
    def health_check():
        return {"status": "healthy", "service": settings.APP_NAME, "version": settings.VERSION}

    return app


configure_logging()
app = create_app()
