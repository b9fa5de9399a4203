import logging
import os
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.requests import Request

from eduauth.api.v1.router import api_router
from eduauth.core.config import settings
from eduauth.core.errors import EduAuthError, InvalidFormat, MissingRequiredField, RateLimited, ValidationError
from eduauth.core.idempotency import IdempotencyMiddleware
from eduauth.core.logging import setup_logging
from eduauth.core.ratelimit import limiter
from eduauth.db.bootstrap import run_migrations_and_seed
from eduauth.db.session import SessionLocal
from eduauth.services.activity import EmailNotifier, Notifier
from eduauth.services.artifacts import ArtifactRenderer, PdfArtifactRenderer
from eduauth.services.sequence import SequenceStore, SqlSequenceStore

logger = logging.getLogger("eduauth")

def create_app(
    *,
    session_factory: Callable[[], Session] = SessionLocal,
    sequence_store: Optional[SequenceStore] = None,
    renderer: Optional[ArtifactRenderer] = None,
    notifier: Optional[Notifier] = None,
    bootstrap: bool = False,
    metrics: bool = True,
) -> FastAPI:
    api = FastAPI(
        title="EduAuth - Certificate Issuance & Verification",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        swagger_ui_parameters={"displayRequestDuration": True, "persistAuthorization": True},
    )

    # colaboradores injetáveis (testes trocam por fakes)
    api.state.session_factory = session_factory
    api.state.sequence_store = sequence_store or SqlSequenceStore(session_factory)
    api.state.renderer = renderer or PdfArtifactRenderer()
    api.state.notifier = notifier or EmailNotifier()
    api.state.limiter = limiter

    api.add_middleware(IdempotencyMiddleware)
    api.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # ajuste para domínios específicos em produção
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # métricas /metrics (Prometheus); o registry é global, um app instrumentado por processo
    if metrics:
        Instrumentator().instrument(api).expose(api, include_in_schema=False, should_gzip=True)

    api.include_router(api_router, prefix="/api/v1")

    # PDFs renderizados: /static/certificates/<slug>/<serial>.pdf
    os.makedirs(settings.ARTIFACT_DIR, exist_ok=True)
    api.mount("/static", StaticFiles(directory=settings.ARTIFACT_DIR), name="static")

    @api.get("/healthz", tags=["health"])
    def healthz():
        return {"status": "ok"}

    if bootstrap:
        @api.on_event("startup")
        def startup():
            run_migrations_and_seed()

    @api.exception_handler(EduAuthError)
    def handle_domain_error(request: Request, exc: EduAuthError):
        if exc.status_code >= 500:
            logger.warning("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @api.exception_handler(RequestValidationError)
    def handle_request_validation(request: Request, exc: RequestValidationError):
        # corpo malformado segue o mesmo contrato {"code","message","details"} com 400
        errors = exc.errors()
        if request.url.path.endswith("/verify/certificate"):
            err = InvalidFormat()
        else:
            missing = next((e for e in errors if e.get("type") == "missing"), None)
            if missing:
                err = MissingRequiredField(str(missing["loc"][-1]))
            else:
                err = ValidationError(details={"errors": [
                    {"field": ".".join(str(p) for p in e.get("loc", ())), "message": e.get("msg")} for e in errors
                ]})
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @api.exception_handler(RateLimitExceeded)
    def handle_rate_limit(request: Request, exc: RateLimitExceeded):
        logger.warning("rate limit hit on %s from %s", request.url.path, request.client.host if request.client else "-")
        err = RateLimited(details={"limit": str(exc.detail)})
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @api.exception_handler(IntegrityError)
    def handle_integrity_error(request: Request, exc: IntegrityError):
        return JSONResponse(
            status_code=409,
            content={"code": "UNIQUE_VIOLATION", "message": "Registro duplicado.", "details": str(getattr(exc, "orig", exc))}
        )

    @api.exception_handler(Exception)
    def handle_unexpected(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"code": "INTERNAL_ERROR", "message": "Erro interno.", "details": str(exc)}
        )

    return api

setup_logging()

api = create_app(bootstrap=True)
