
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from storefront.core.config import settings

security = HTTPBearer(auto_error=False)

def get_optional_identity(creds: HTTPAuthorizationCredentials | None = Depends(security)) -> dict | None:
    # anonymous shoppers are allowed; a bad token is not
    if not creds:
        return None
    try:
        payload = jwt.decode(creds.credentials, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if payload.get("type") != "access" or not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid access token")
    return payload  # contains sub (email), role

def get_current_identity(identity: dict | None = Depends(get_optional_identity)) -> dict:
    if not identity:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return identity
