from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gamehub.auth.token import CredentialIssuer, get_credential_issuer
from gamehub.core.config import settings
from gamehub.core.errors import (
    AuthError,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from gamehub.database import get_db
from gamehub.schemas.auth_schema import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    VerifyTokenRequest,
    VerifyTokenResponse,
)
from gamehub.schemas.user_schema import UserResponse
from gamehub.services.account_store import AccountStore
from gamehub.services.identity import IdentityHints, IdentityResolver

router = APIRouter(tags=["Auth"])


def get_identity_resolver(
    db: Session = Depends(get_db),
    issuer: CredentialIssuer = Depends(get_credential_issuer),
) -> IdentityResolver:
    ttl_minutes = settings.VERIFICATION_TOKEN_TTL_MINUTES
    return IdentityResolver(
        AccountStore(db),
        issuer,
        verification_ttl=timedelta(minutes=ttl_minutes) if ttl_minutes > 0 else None,
    )


# ---------- Login / registration ----------

@router.post("/api/auth/login", response_model=LoginResponse)
@router.post("/api/users/login-or-create", response_model=LoginResponse, include_in_schema=False)
def login_or_create(payload: LoginRequest, resolver: IdentityResolver = Depends(get_identity_resolver)):
    hints = IdentityHints(
        email=payload.email,
        wallet_address=payload.wallet_address,
        mobile_number=payload.mobile_number,
        name=payload.name,
    )
    try:
        user, is_new = resolver.resolve(hints, payload.verification_token)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return LoginResponse(
        user=UserResponse.model_validate(user),
        credentials=resolver.issue_credentials(user),
        is_new=is_new,
    )


# ---------- Launcher redirect login ----------

@router.post("/api/auth/verify-launcher", response_model=VerifyTokenResponse)
@router.post("/api/auth/verify-device-token", response_model=VerifyTokenResponse, include_in_schema=False)
@router.post("/api/users/verify-launcher", response_model=VerifyTokenResponse, include_in_schema=False)
def verify_launcher_token(
    payload: VerifyTokenRequest, resolver: IdentityResolver = Depends(get_identity_resolver)
):
    try:
        user, credentials = resolver.consume_verification_token(payload.verification_token)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NotFoundError as e:
        code = status.HTTP_404_NOT_FOUND if e.resource == "user" else status.HTTP_401_UNAUTHORIZED
        raise HTTPException(status_code=code, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return VerifyTokenResponse(user=UserResponse.model_validate(user), credentials=credentials)


# ---------- Refresh ----------

@router.post("/api/token/refresh", response_model=RefreshResponse)
@router.post("/api/auth/refresh-credentials", response_model=RefreshResponse, include_in_schema=False)
def refresh_credentials(
    payload: RefreshRequest, issuer: CredentialIssuer = Depends(get_credential_issuer)
):
    if not payload.refresh_token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Refresh token required")
    try:
        credentials = issuer.refresh(payload.refresh_token)
    except AuthError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired refresh token"
        )
    return RefreshResponse(credentials=credentials)
