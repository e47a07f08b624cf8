from fastapi import APIRouter, Depends

from gamehub.auth.token import get_current_user
from gamehub.models.user import User
from gamehub.schemas.user_schema import UserResponse

router = APIRouter(prefix="/api/users", tags=["User"])


@router.get("/me", response_model=UserResponse)
def get_my_user_info(current_user: User = Depends(get_current_user)):
    return current_user
