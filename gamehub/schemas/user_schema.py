# schemas/user_schema.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    wallet_address: Optional[str] = None
    mobile_number: Optional[str] = None
    coins: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
