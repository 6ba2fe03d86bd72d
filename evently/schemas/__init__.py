from .event import EventBase, EventCreate, EventUpdate, EventOut
from .registration import (
    RegistrationStatus,
    RegistrationCreate,
    RegistrationStatusUpdate,
    RegistrationOut,
)
from .user import (
    UserRegister,
    UserLogin,
    ProfileUpdate,
    PasswordChange,
    UserOut,
    AuthUserOut,
)
from .analytics import MonthlyStat, CategoryStat, AnalyticsTotals, Analytics

__all__ = [
    "EventBase",
    "EventCreate",
    "EventUpdate",
    "EventOut",
    "RegistrationStatus",
    "RegistrationCreate",
    "RegistrationStatusUpdate",
    "RegistrationOut",
    "UserRegister",
    "UserLogin",
    "ProfileUpdate",
    "PasswordChange",
    "UserOut",
    "AuthUserOut",
    "MonthlyStat",
    "CategoryStat",
    "AnalyticsTotals",
    "Analytics",
]
