from typing import Generator

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from eduauth.core.tokens import decode_access
from eduauth.crud.institution import institution_crud
from eduauth.models.institution import Institution
from eduauth.services.activity import DbActivityRecorder
from eduauth.services.issuance import IssuanceCoordinator
from eduauth.services.verification import VerificationGate

# ----------------------------------------------------------------------
# Sessão por request, a partir da factory registrada em app.state
# ----------------------------------------------------------------------
def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()

# ----------------------------------------------------------------------
# Lê o Bearer do header Authorization (sem usar OAuth2PasswordBearer)
# ----------------------------------------------------------------------
def get_bearer_token(authorization: str = Header(None, alias="Authorization")) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid Authorization header")
    return parts[1]

# ----------------------------------------------------------------------
# Instituição emissora identificada pelo token
# ----------------------------------------------------------------------
def get_current_institution(
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
) -> Institution:
    payload = decode_access(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid token")
    institution = institution_crud.get_by_slug(db, payload["sub"])
    if not institution:
        raise HTTPException(status_code=401, detail="Institution not found")
    return institution

# ----------------------------------------------------------------------
# Serviços
# ----------------------------------------------------------------------
def build_coordinator(state, db: Session) -> IssuanceCoordinator:
    return IssuanceCoordinator(
        db,
        sequences=state.sequence_store,
        renderer=state.renderer,
        activity=DbActivityRecorder(state.session_factory),
        notifier=state.notifier,
    )

def get_issuance_coordinator(request: Request, db: Session = Depends(get_db)) -> IssuanceCoordinator:
    return build_coordinator(request.app.state, db)

def get_verification_gate(db: Session = Depends(get_db)) -> VerificationGate:
    return VerificationGate(db)
