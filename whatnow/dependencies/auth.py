from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from whatnow.core.jwt import owner_from_token

# tokens are issued by the external auth service; tokenUrl only feeds the OpenAPI docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def _extract_jwt(request: Request, token: str | None) -> str | None:
    return token or request.cookies.get("access_token")


def get_current_user(request: Request, token: str | None = Depends(oauth2_scheme)) -> str:
    """Strict auth dependency; returns the token's sub or raises 401."""
    jwt_token = _extract_jwt(request, token)
    if not jwt_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    owner_id = owner_from_token(jwt_token)
    if owner_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return owner_id
