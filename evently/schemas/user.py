from pydantic import BaseModel
from typing import Literal, Optional


class UserRegister(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    avatar: Optional[str] = None


class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    dateOfBirth: Optional[str] = None
    location: Optional[str] = None
    avatar: Optional[str] = None


class PasswordChange(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: Literal["admin", "user"] = "user"
    avatar: Optional[str] = None
    phone: Optional[str] = None
    dateOfBirth: Optional[str] = None
    location: Optional[str] = None


class AuthUserOut(UserOut):
    token: str
