# schemas/auth_schema.py
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from gamehub.schemas.user_schema import UserResponse


class LoginRequest(BaseModel):
    email: Optional[str] = None
    wallet_address: Optional[str] = Field(
        None, validation_alias=AliasChoices("walletAddress", "wallet_address")
    )
    mobile_number: Optional[str] = Field(
        None, validation_alias=AliasChoices("phoneNumber", "mobile_number")
    )
    name: Optional[str] = Field(
        None, validation_alias=AliasChoices("displayName", "name")
    )
    verification_token: Optional[str] = Field(
        None, validation_alias=AliasChoices("verificationToken", "verification_token")
    )


class VerifyTokenRequest(BaseModel):
    verification_token: Optional[str] = Field(
        None, validation_alias=AliasChoices("verificationToken", "verification_token")
    )


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("refreshToken", "refreshCredential", "refresh_token"),
    )


class CredentialPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    user: UserResponse
    credentials: CredentialPair
    is_new: bool


class VerifyTokenResponse(BaseModel):
    user: UserResponse
    credentials: CredentialPair


class RefreshResponse(BaseModel):
    credentials: CredentialPair
