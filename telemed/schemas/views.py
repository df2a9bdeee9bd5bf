from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel

from .auth import UserResponse
from .tables import DoctorProfileRow, PatientProfileRow, ProfileRow


class Link(BaseModel):
    label: str
    href: str
    variant: str = "default"


# Landing
class FeatureCard(BaseModel):
    title: str
    description: str
    bullets: List[str] = []


class LandingView(BaseModel):
    user: Optional[UserResponse] = None
    nav: List[Link]
    hero_actions: List[Link]
    features: List[FeatureCard]
    cta_action: Optional[Link] = None
    footer: str = (
        "Your trusted partner in digital healthcare. "
        "Providing quality medical care accessible to everyone."
    )


# Auth form
class FieldOption(BaseModel):
    value: str
    label: str


class FormField(BaseModel):
    name: str
    label: str
    type: str = "text"
    required: bool = False
    placeholder: Optional[str] = None
    options: List[FieldOption] = []


class AuthFormView(BaseModel):
    mode: str
    title: str
    description: str
    role_tabs: List[FieldOption] = []
    selected_role: Optional[str] = None
    fields: List[FormField]
    submit_label: str
    submit_url: str
    toggle: Link

    @property
    def field_names(self) -> List[str]:
        return [field.name for field in self.fields]


# Dashboard
class ProfileDetails(ProfileRow):
    """A profile row with its embedded role-specific sub-profiles."""
    doctor_profiles: List[DoctorProfileRow] = []
    patient_profiles: List[PatientProfileRow] = []

    @property
    def doctor_profile(self) -> Optional[DoctorProfileRow]:
        return self.doctor_profiles[0] if self.doctor_profiles else None


class DashboardStats(BaseModel):
    upcoming_appointments: int = 0
    unread_messages: int = 0
    total_patients: int = 0
    medical_records: int = 0
    last_visit: Optional[datetime] = None


class StatCard(BaseModel):
    title: str
    value: Union[int, str]
    caption: str
    badge: Optional[str] = None


class DashboardView(BaseModel):
    user: UserResponse
    profile: Optional[ProfileDetails] = None
    display_name: str
    initials: str
    role: str
    subtitle: str
    welcome: str
    description: str
    stats: DashboardStats
    stat_cards: List[StatCard]
    quick_actions: List[str]
    recent_activity: List[Dict[str, Any]] = []
    errors: List[str] = []
