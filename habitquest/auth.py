from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from habitquest.constants import API_KEY
from habitquest.database import get_db
from habitquest.exceptions import UnauthorizedError
from habitquest.repositories.user_repository import UserRepository

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Identity is resolved upstream; the gateway forwards the user id
user_id_header = APIKeyHeader(name="X-User-Id", auto_error=False)


async def verify_api_key(api_key: str = Security(api_key_header)):
    """Verify API key for authentication"""
    if not api_key or api_key != API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key"
        )
    return api_key


def get_current_user_id(
    user_id: str = Security(user_id_header),
    db: Session = Depends(get_db)
) -> int:
    """Resolve the acting user from the forwarded identity header"""
    if not user_id or not user_id.isdigit():
        raise UnauthorizedError("Missing or malformed X-User-Id header")
    if not UserRepository(db).get_by_id(int(user_id)):
        raise UnauthorizedError(f"Unknown user {user_id}")
    return int(user_id)
