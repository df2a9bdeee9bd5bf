from datetime import date
import math
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, field_validator

from ..models.enums import UserRole


def float_or_zero(value: Union[str, int, float, None]) -> float:
    """Lenient number parsing for free-text form inputs; blank or junk becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def int_or_zero(value: Union[str, int, float, None]) -> int:
    return int(float_or_zero(value))


class SignInRequest(BaseModel):
    email: str
    password: str


class SignUpRequest(BaseModel):
    email: str
    password: str
    confirm_password: str
    first_name: str = ""
    last_name: str = ""
    role: UserRole = UserRole.PATIENT
    phone: str = ""
    date_of_birth: Optional[date] = None

    # Doctor specific fields
    license_number: str = ""
    specialization: str = ""
    years_of_experience: Union[int, str] = ""
    consultation_fee: Union[float, str] = ""
    bio: str = ""
    education: str = ""

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def blank_date_is_none(cls, value):
        return value or None

    @field_validator("role")
    @classmethod
    def role_is_selectable(cls, value: UserRole) -> UserRole:
        if value not in (UserRole.PATIENT, UserRole.DOCTOR):
            raise ValueError("Sign-up is only open to patients and doctors")
        return value

    @property
    def passwords_match(self) -> bool:
        return self.password == self.confirm_password

    def to_user_metadata(self) -> Dict[str, Any]:
        """Profile fields sent along with the sign-up; the backend creates the profile rows from them."""
        data: Dict[str, Any] = {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role.value,
            "phone": self.phone,
        }
        if self.date_of_birth:
            data["date_of_birth"] = self.date_of_birth.isoformat()

        if self.role == UserRole.DOCTOR:
            data.update({
                "license_number": self.license_number,
                "specialization": self.specialization,
                "years_of_experience": int_or_zero(self.years_of_experience),
                "consultation_fee": float_or_zero(self.consultation_fee),
                "bio": self.bio,
                "education": self.education,
            })
        return data


class RefreshTokenRequest(BaseModel):
    refresh_token: Optional[str] = None


# Shapes returned by the backend's auth service
class BackendUser(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}


class BackendSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: BackendUser


# Responses
class UserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    role: UserRole = UserRole.PATIENT
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @classmethod
    def from_backend_user(cls, user: BackendUser) -> "UserResponse":
        metadata = user.user_metadata or {}
        try:
            role = UserRole(metadata.get("role", UserRole.PATIENT.value))
        except ValueError:
            role = UserRole.PATIENT
        return cls(
            id=user.id,
            email=user.email,
            role=role,
            first_name=metadata.get("first_name"),
            last_name=metadata.get("last_name"),
        )


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: UserResponse
    redirect_to: str = "/"


class SignUpResponse(BaseModel):
    user: UserResponse
    session_created: bool
    message: str
    session: Optional[TokenResponse] = None
    redirect_to: Optional[str] = None
