from fastapi import Depends, Header, HTTPException, Security, status
from fastapi.security import APIKeyHeader
import os

from backend.constants import DEFAULT_API_KEY

# API key protecting all /api endpoints
# Set BALANCE_API_KEY in production
API_KEY = os.getenv("BALANCE_API_KEY", DEFAULT_API_KEY)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

async def verify_api_key(api_key: str = Security(api_key_header)):
    """Verify API key for authentication"""
    if not api_key or api_key != API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key"
        )
    return api_key

async def get_current_user_id(
    x_user_id: int = Header(..., alias="X-User-Id"),
    _: str = Depends(verify_api_key)
) -> int:
    """Identify the calling user (identity is issued by the upstream gateway)"""
    return x_user_id
