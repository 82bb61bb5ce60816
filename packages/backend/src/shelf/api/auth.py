"""Auth API — signup and signin.

Learn: Routes for the credential lifecycle:
- POST /auth/signup → create identity → access token (201)
- POST /auth/signin → email/password → access token (200)

Both failures are 403. Signin uses one message for unknown email and
wrong password so the endpoint can't be used to enumerate accounts.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from shelf.auth.dependencies import get_password_hasher, get_token_issuer
from shelf.auth.jwt import TokenIssuer
from shelf.auth.password import PasswordHasher
from shelf.db.engine import get_db
from shelf.db.identity_store import IdentityStore
from shelf.errors import EmailTakenError, InvalidCredentialsError
from shelf.schemas.auth import AuthRequest, TokenResponse
from shelf.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


def _svc(
    db: AsyncSession = Depends(get_db),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(
        identities=IdentityStore(db),
        password_hasher=password_hasher,
        token_issuer=token_issuer,
    )


@router.post("/signup", response_model=TokenResponse, status_code=201)
async def signup(body: AuthRequest, svc: AuthService = Depends(_svc)):
    """Register a new identity and sign it in."""
    try:
        token = await svc.signup(email=body.email, password=body.password)
    except EmailTakenError:
        raise HTTPException(status_code=403, detail="Email is already taken")
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
    )


@router.post("/signin", response_model=TokenResponse)
async def signin(body: AuthRequest, svc: AuthService = Depends(_svc)):
    """Exchange email/password for an access token."""
    try:
        token = await svc.signin(email=body.email, password=body.password)
    except InvalidCredentialsError:
        raise HTTPException(status_code=403, detail="Invalid credentials")
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
    )
