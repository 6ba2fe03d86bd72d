import logging
from fastapi import APIRouter, HTTPException, Depends
from typing import Dict, Any
from evently.database.dynamodb import get_db_connection
from evently.exceptions import AuthenticationError, EventlyError, NotFoundError
from evently.schemas.user import (
    AuthUserOut,
    PasswordChange,
    ProfileUpdate,
    UserLogin,
    UserRegister,
)
from evently.security import get_current_user
from evently.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def get_user_service():
    """Dependency to get UserService instance"""
    db = get_db_connection()
    return UserService(db)


@router.post("/register", status_code=201)
async def register(
    user_data: UserRegister, user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    try:
        user, token = user_service.register_user(user_data)
        return {
            "success": True,
            "message": "User registered successfully",
            "user": AuthUserOut(**user.model_dump(), token=token).model_dump(),
        }
    except EventlyError:
        raise
    except Exception:
        logger.exception("User registration error")
        raise HTTPException(
            status_code=500, detail="Registration failed. Please try again later."
        )


@router.post("/login")
async def login(
    credentials: UserLogin, user_service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    try:
        user, token = user_service.authenticate(credentials.email, credentials.password)
        return {
            "success": True,
            "message": "Login successful",
            "user": AuthUserOut(**user.model_dump(), token=token).model_dump(),
        }
    except EventlyError:
        raise
    except Exception:
        logger.exception("Login error")
        raise HTTPException(
            status_code=500, detail="Login failed. Please try again later."
        )


@router.get("/verify")
async def verify(
    current_user: Dict[str, Any] = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    """Resolve a bearer token to its user"""
    try:
        user = user_service.get_user(current_user["userId"])
        return {"success": True, "user": user.model_dump()}
    except NotFoundError:
        # token outlived its user
        raise AuthenticationError("Invalid token")
    except EventlyError:
        raise
    except Exception:
        logger.exception("Token verification error")
        raise HTTPException(status_code=500, detail="Failed to verify token")


@router.put("/profile")
async def update_profile(
    profile: ProfileUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    try:
        user = user_service.update_profile(current_user["userId"], profile)
        return {
            "success": True,
            "message": "Profile updated successfully",
            "user": user.model_dump(),
        }
    except EventlyError:
        raise
    except Exception:
        logger.exception("Profile update error")
        raise HTTPException(status_code=500, detail="Failed to update profile")


@router.put("/change-password")
async def change_password(
    passwords: PasswordChange,
    current_user: Dict[str, Any] = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    try:
        user_service.change_password(
            current_user["userId"], passwords.currentPassword, passwords.newPassword
        )
        return {"success": True, "message": "Password changed successfully"}
    except EventlyError:
        raise
    except Exception:
        logger.exception("Password change error")
        raise HTTPException(status_code=500, detail="Failed to change password")
