from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.errors import not_found, unauthorized
from app.core.security import Identity, verify_id_token
from app.db.session import get_db
from app.modules.user_management.models.user import User
from app.modules.user_management.services.user import get_user_by_external_id

# Bearer token issued by the identity provider (Firebase ID token)
bearer_scheme = HTTPBearer(auto_error=False)

def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Identity]:
    """
    Dependency for the caller identity on public endpoints; None when anonymous or invalid
    """
    if credentials is None:
        return None
    return verify_id_token(credentials.credentials)

def get_current_identity(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Identity:
    """
    Dependency for endpoints that require a signed-in caller
    """
    if identity is None:
        raise unauthorized()
    return identity

def get_current_user(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> User:
    """
    Dependency resolving the caller to the internal user record
    """
    user = get_user_by_external_id(db, identity.uid)
    if not user:
        raise not_found("user_not_found")
    return user

def get_optional_viewer(
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Optional[User]:
    """
    Dependency resolving the caller, if any, for viewer-relative flags (is_liked, is_following)
    """
    if identity is None:
        return None
    return get_user_by_external_id(db, identity.uid)
