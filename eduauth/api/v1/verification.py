# eduauth/api/v1/verification.py
from fastapi import APIRouter, Depends, Request

from eduauth.api.deps import get_verification_gate
from eduauth.core.config import settings
from eduauth.core.ratelimit import limiter
from eduauth.schemas.certificate import CertificatePublicView, VerificationStats, VerifyIn
from eduauth.services.verification import VerificationGate

router = APIRouter()  # público, sem token

@router.post("/certificate", response_model=CertificatePublicView)
@limiter.limit(settings.VERIFY_RATE_LIMIT)
def verify_certificate(
    request: Request,
    body: VerifyIn,
    gate: VerificationGate = Depends(get_verification_gate),
):
    # 400 formato inválido / 404 inexistente / 403 não compartilhável / 429 excesso de consultas
    return gate.verify(body.serial, body.roll_number)

@router.get("/stats", response_model=VerificationStats)
def verification_stats(gate: VerificationGate = Depends(get_verification_gate)):
    return gate.stats()
