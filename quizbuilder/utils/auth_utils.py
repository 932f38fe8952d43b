from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, Field
from quizbuilder.config import settings
from quizbuilder.database import get_db
from typing import Optional
import logging

security = HTTPBearer()

class CurrentUser(BaseModel):
    """The authenticated caller, passed explicitly to whatever needs it"""
    id: str
    email: Optional[str] = None
    role: str = "student"
    metadata: dict = Field(default_factory=dict)

    @property
    def is_author(self) -> bool:
        return self.role in settings.author_roles

def get_user_role(user: dict) -> str:
    metadata = user.get("metadata") or {}
    role = metadata.get("role") or metadata.get("user_type")
    if isinstance(role, str) and role:
        return role
    return "student"

def verify_token(token: str, db) -> Optional[CurrentUser]:
    """Resolve a bearer token through the entity store's auth"""
    user = db.get_user(token)
    if not user:
        return None
    return CurrentUser(
        id=str(user["id"]),
        email=user.get("email"),
        role=get_user_role(user),
        metadata=user.get("metadata") or {}
    )

async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security), db=Depends(get_db)):
    """Get current user from the bearer token"""
    user = verify_token(credentials.credentials, db)
    if user:
        return user

    logging.info("Rejected request with an unknown token")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials"
    )

async def require_author(current_user: CurrentUser = Depends(get_current_user)):
    """Require quiz authoring privileges"""
    if not current_user.is_author:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Quiz authoring privileges required"
        )
    return current_user
