# eduauth/api/v1/certificates.py
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query, Request, status
from sqlalchemy.orm import Session

from eduauth.api.deps import build_coordinator, get_current_institution, get_db, get_issuance_coordinator
from eduauth.core.config import settings
from eduauth.core.errors import CertificateNotFound, EduAuthError
from eduauth.crud import certificate as certificate_crud
from eduauth.models.institution import Institution
from eduauth.schemas.certificate import Certificate as CertificateOut, CertificateIssueIn, SharingUpdate
from eduauth.services.issuance import IssuanceCoordinator

logger = logging.getLogger(__name__)

router = APIRouter()

def _render_in_background(state, certificate_id: int) -> None:
    # roda depois da resposta, numa sessão própria
    with state.session_factory() as db:
        try:
            build_coordinator(state, db).generate_artifact(certificate_id)
        except EduAuthError:
            logger.exception("deferred artifact for certificate %s failed", certificate_id)

# -------------------------- emissão --------------------------

@router.post("/issue", response_model=CertificateOut, status_code=status.HTTP_201_CREATED)
def issue_certificate(
    body: CertificateIssueIn,
    request: Request,
    background_tasks: BackgroundTasks,
    institution: Institution = Depends(get_current_institution),
    coordinator: IssuanceCoordinator = Depends(get_issuance_coordinator),
):
    defer = None
    if not settings.RENDER_ARTIFACTS_INLINE:
        state = request.app.state
        defer = lambda cid: background_tasks.add_task(_render_in_background, state, cid)  # noqa: E731

    cert = coordinator.issue(
        institution.id,
        body.student_id,
        body.certificate_type,
        body.academic_fields(),
        body.roll_number,
        actor_ip=request.client.host if request.client else None,
        defer_artifact=defer,
    )
    return CertificateOut.model_validate(cert)

# -------------------------- leitura --------------------------

@router.get("", response_model=List[CertificateOut])
@router.get("/", response_model=List[CertificateOut], include_in_schema=False)
def list_certificates(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    institution: Institution = Depends(get_current_institution),
):
    rows = certificate_crud.list_for_institution(db, institution.id, skip=skip, limit=limit)
    return [CertificateOut.model_validate(c) for c in rows]

@router.get("/{certificate_id}", response_model=CertificateOut)
def get_certificate(
    certificate_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    institution: Institution = Depends(get_current_institution),
):
    c = certificate_crud.get_for_institution(db, certificate_id=certificate_id, institution_id=institution.id)
    if not c:
        raise CertificateNotFound()
    return CertificateOut.model_validate(c)

# -------------------------- artefato / privacidade --------------------------

@router.post("/{certificate_id}/artifact", response_model=CertificateOut)
def retry_artifact(
    certificate_id: int = Path(..., ge=1),
    institution: Institution = Depends(get_current_institution),
    coordinator: IssuanceCoordinator = Depends(get_issuance_coordinator),
):
    cert = coordinator.generate_artifact(certificate_id, institution_id=institution.id)
    return CertificateOut.model_validate(cert)

@router.patch("/{certificate_id}/sharing", response_model=CertificateOut)
def update_sharing(
    body: SharingUpdate,
    certificate_id: int = Path(..., ge=1),
    institution: Institution = Depends(get_current_institution),
    coordinator: IssuanceCoordinator = Depends(get_issuance_coordinator),
):
    cert = coordinator.set_shareable(certificate_id, institution.id, body.is_publicly_shareable)
    return CertificateOut.model_validate(cert)
