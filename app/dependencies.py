from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.security import subject_of
from app.core.exceptions import UnauthorizedException
from app.database import get_db
from app.repositories.user_repository import UserRepository
from app.models.user import User
from app.services.collaborators import (
    DocumentRenderer,
    LoggingNotifier,
    Notifier,
    RiskScorer,
)

security = HTTPBearer()

_default_notifier = LoggingNotifier()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security), db: Session = Depends(get_db)
) -> User:
    """
    FastAPI dependency resolving the owning user of the request.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate signature and expiry with the shared SECRET_KEY
    3. Read the 'sub' claim
    4. Get or auto-create the User mirror row
    5. Return the User; every service call is scoped to its id

    Raises:
        HTTPException 401: If token invalid or expired
    """
    try:
        auth_user_id = subject_of(credentials.credentials)
    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    return UserRepository(db).get_or_create(auth_user_id)


def get_notifier() -> Notifier:
    """Notification sender; override in deployments wired to a mail service"""
    return _default_notifier


def get_risk_scorer() -> RiskScorer | None:
    """Risk scorer used when a policy request omits score and decision"""
    return None


def get_document_renderer() -> DocumentRenderer | None:
    """Renderer for policy documents"""
    return None
