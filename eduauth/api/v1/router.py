# eduauth/api/v1/router.py
from fastapi import APIRouter
from eduauth.api.v1 import (
    health,
    verification,
    certificates,
    enrollments,
)

api_router = APIRouter()

# -------- rotas públicas --------
api_router.include_router(health.router, tags=["health"])
api_router.include_router(verification.router, prefix="/verify", tags=["verification"])

# -------- rotas da instituição (Bearer) --------
api_router.include_router(certificates.router, prefix="/institution/certificates", tags=["certificates"])
api_router.include_router(enrollments.router,  prefix="/institution/enrollments",  tags=["enrollments"])
