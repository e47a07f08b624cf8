from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from gamehub.auth.token import get_current_user
from gamehub.core.errors import ConflictError, NotFoundError, StoreError, ValidationError
from gamehub.database import get_db
from gamehub.models.user import User
from gamehub.schemas.wallet_schema import (
    WalletActionResponse,
    WalletConnectRequest,
    WalletLabelRequest,
    WalletListResponse,
    WalletResponse,
)
from gamehub.services.account_store import AccountStore
from gamehub.services.wallets import WalletService

router = APIRouter(prefix="/api/wallets", tags=["Wallets"])


def get_wallet_service(db: Session = Depends(get_db)) -> WalletService:
    return WalletService(AccountStore(db))


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/connect", response_model=WalletActionResponse)
def connect_wallet(
    payload: WalletConnectRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    wallets: WalletService = Depends(get_wallet_service),
):
    try:
        wallet, created = wallets.connect(
            current_user,
            payload.wallet_address,
            wallet_type=payload.wallet_type,
            chain_id=payload.chain_id,
            label=payload.label,
        )
    except (ValidationError, ConflictError, StoreError) as e:
        raise _http_error(e)

    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return WalletActionResponse(
        message="Wallet connected" if created else "Wallet already connected",
        wallet=WalletResponse.model_validate(wallet),
    )


@router.get("/my-wallets", response_model=WalletListResponse)
def my_wallets(
    current_user: User = Depends(get_current_user),
    wallets: WalletService = Depends(get_wallet_service),
):
    return WalletListResponse(
        wallets=[WalletResponse.model_validate(w) for w in wallets.list_wallets(current_user)]
    )


@router.delete("/{wallet_id}", response_model=WalletActionResponse)
def disconnect_wallet(
    wallet_id: int,
    current_user: User = Depends(get_current_user),
    wallets: WalletService = Depends(get_wallet_service),
):
    try:
        wallets.disconnect(current_user, wallet_id)
    except (NotFoundError, StoreError) as e:
        raise _http_error(e)
    return WalletActionResponse(message="Wallet disconnected")


@router.patch("/{wallet_id}/primary", response_model=WalletActionResponse)
def set_primary_wallet(
    wallet_id: int,
    current_user: User = Depends(get_current_user),
    wallets: WalletService = Depends(get_wallet_service),
):
    try:
        wallet = wallets.set_primary(current_user, wallet_id)
    except (NotFoundError, StoreError) as e:
        raise _http_error(e)
    return WalletActionResponse(
        message="Primary wallet updated", wallet=WalletResponse.model_validate(wallet)
    )


@router.patch("/{wallet_id}/label", response_model=WalletActionResponse)
def update_wallet_label(
    wallet_id: int,
    payload: WalletLabelRequest,
    current_user: User = Depends(get_current_user),
    wallets: WalletService = Depends(get_wallet_service),
):
    try:
        wallet = wallets.update_label(current_user, wallet_id, payload.label)
    except (ValidationError, NotFoundError, StoreError) as e:
        raise _http_error(e)
    return WalletActionResponse(
        message="Wallet label updated", wallet=WalletResponse.model_validate(wallet)
    )
