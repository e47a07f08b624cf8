# schemas/wallet_schema.py
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class WalletConnectRequest(BaseModel):
    wallet_address: Optional[str] = Field(
        None, validation_alias=AliasChoices("walletAddress", "wallet_address")
    )
    wallet_type: Optional[str] = Field(
        None, validation_alias=AliasChoices("walletType", "wallet_type")
    )
    chain_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("chainId", "chain_id")
    )
    label: Optional[str] = None


class WalletLabelRequest(BaseModel):
    label: Optional[str] = None


class WalletResponse(BaseModel):
    id: int
    wallet_address: str
    wallet_type: str
    chain_id: Optional[int] = None
    label: Optional[str] = None
    is_primary: bool
    connected_at: datetime

    model_config = {"from_attributes": True}


class WalletActionResponse(BaseModel):
    success: bool = True
    message: str
    wallet: Optional[WalletResponse] = None


class WalletListResponse(BaseModel):
    success: bool = True
    wallets: list[WalletResponse]
