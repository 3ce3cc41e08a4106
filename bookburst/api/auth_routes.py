"""Reader account endpoints: join, sign in, who-am-I, sign out.

Tokens are bearer JWTs.  Signing out revokes the presented token, so it
stops working at once even though it has not expired.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from bookburst.api.schemas import LoginRequest, SignupRequest, TokenResponse, UserResponse
from bookburst.core.dependencies import get_auth_service, get_current_user, oauth2_scheme
from bookburst.domain.entities import User
from bookburst.services.auth_service import AuthService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def join(body: SignupRequest, accounts: AuthService = Depends(get_auth_service)):
    """Create a reader account; the email must not be taken."""
    try:
        reader = await accounts.signup(body.email, body.name, body.password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return UserResponse.model_validate(reader)


@router.post("/login", response_model=TokenResponse)
async def sign_in(body: LoginRequest, accounts: AuthService = Depends(get_auth_service)):
    try:
        token = await accounts.login(body.email, body.password)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(access_token=token)


@router.get("/me", response_model=UserResponse)
async def whoami(reader: User = Depends(get_current_user)):
    return UserResponse.model_validate(reader)


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    reader: User = Depends(get_current_user),
    token: str = Depends(oauth2_scheme),
    accounts: AuthService = Depends(get_auth_service),
) -> Response:
    """Revoke the bearer token this request was made with."""
    if not await accounts.signout(token):
        logger.warning("Sign-out for reader %s revoked nothing", reader.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
