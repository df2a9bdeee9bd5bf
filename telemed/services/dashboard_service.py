"""Data behind the dashboard page.

All fetches are independent and run concurrently. A failed fetch is logged
and its value falls back to zero (or a placeholder); the name of the failed
section is reported in ``DashboardView.errors`` so the page can say so.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import asyncio
import logging

from pydantic import TypeAdapter

from ..core.backend import BackendClient, BackendError
from ..core.config import settings
from ..core.security import CurrentUser
from ..models.enums import UserRole
from ..schemas.auth import UserResponse
from ..schemas.views import DashboardStats, DashboardView, ProfileDetails, StatCard

logger = logging.getLogger(__name__)

DOCTOR_ACTIONS = ["View Today's Schedule", "Patient Management", "Medical Records", "Messages"]
PATIENT_ACTIONS = ["Book Appointment", "Find Doctors", "My Medical Records", "Messages"]

_datetime = TypeAdapter(datetime)


class DashboardService:
    def __init__(self, backend: BackendClient, user: CurrentUser):
        self.backend = backend
        self.user = user

    # Queries
    async def fetch_profile(self) -> ProfileDetails:
        """The user's profile joined with its doctor/patient sub-profile."""
        result = await (
            self.backend.table("profiles")
            .select("*", "doctor_profiles(*)", "patient_profiles(*)")
            .eq("user_id", self.user.id)
            .single()
            .execute()
        )
        return ProfileDetails.model_validate(result.data)

    async def count_upcoming_appointments(self, now: datetime) -> int:
        participant = "doctor_id" if self.user.is_doctor else "patient_id"
        result = await (
            self.backend.table("appointments")
            .select("*", count="exact", head=True)
            .eq(participant, self.user.id)
            .gte("appointment_date", now)
            .execute()
        )
        return result.count or 0

    async def count_unread_messages(self) -> int:
        result = await (
            self.backend.table("messages")
            .select("*", count="exact", head=True)
            .eq("recipient_id", self.user.id)
            .eq("is_read", False)
            .execute()
        )
        return result.count or 0

    async def count_patients(self) -> int:
        """Distinct patients across the doctor's appointments.

        Read in pages no larger than the backend's row cap so a long history
        is not silently cut short.
        """
        page_size = settings.BACKEND_MAX_ROWS
        patients, offset = set(), 0
        while True:
            result = await (
                self.backend.table("appointments")
                .select("patient_id")
                .eq("doctor_id", self.user.id)
                .order("id")
                .limit(page_size)
                .offset(offset)
                .execute()
            )
            rows = result.data or []
            patients.update(row["patient_id"] for row in rows)
            if len(rows) < page_size:
                return len(patients)
            offset += page_size

    async def count_medical_records(self) -> int:
        result = await (
            self.backend.table("medical_records")
            .select("*", count="exact", head=True)
            .eq("patient_id", self.user.id)
            .execute()
        )
        return result.count or 0

    async def fetch_last_visit(self, now: datetime) -> Optional[datetime]:
        result = await (
            self.backend.table("appointments")
            .select("appointment_date")
            .eq("patient_id", self.user.id)
            .lt("appointment_date", now)
            .order("appointment_date", desc=True)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return _datetime.validate_python(result.data[0]["appointment_date"])

    # Page
    async def build(self) -> DashboardView:
        now = datetime.now(timezone.utc)

        fetches: Dict[str, Any] = {
            "profile": self.fetch_profile(),
            "upcoming_appointments": self.count_upcoming_appointments(now),
            "unread_messages": self.count_unread_messages(),
        }
        if self.user.role == UserRole.DOCTOR:
            fetches["total_patients"] = self.count_patients()
        elif self.user.role == UserRole.PATIENT:
            fetches["medical_records"] = self.count_medical_records()
            fetches["last_visit"] = self.fetch_last_visit(now)

        results = await asyncio.gather(*fetches.values(), return_exceptions=True)

        values: Dict[str, Any] = {}
        errors: List[str] = []
        for name, result in zip(fetches, results):
            # ValueError covers unparseable bodies and rows that fail validation
            if isinstance(result, (BackendError, ValueError)):
                logger.error(f"Error fetching {name}: {str(result)}")
                errors.append(name)
            elif isinstance(result, BaseException):
                raise result
            else:
                values[name] = result

        profile = values.pop("profile", None)
        return self.render(profile, DashboardStats(**values), errors)

    def render(self, profile: Optional[ProfileDetails], stats: DashboardStats, errors: List[str]) -> DashboardView:
        role = UserRole(profile.role) if profile else self.user.role
        is_doctor = role == UserRole.DOCTOR

        first_name = profile.first_name if profile else self.user.metadata.get("first_name", "")
        last_name = profile.last_name if profile else self.user.metadata.get("last_name", "")
        full_name = f"{first_name} {last_name}".strip() or (self.user.email or "")

        subtitle = role.value
        doctor_profile = profile.doctor_profile if profile else None
        if is_doctor and doctor_profile and doctor_profile.specialization:
            subtitle += f" • {str(doctor_profile.specialization).replace('_', ' ')}"

        cards = [
            StatCard(
                title="Upcoming Appointments",
                value=stats.upcoming_appointments,
                caption="Patients to see" if is_doctor else "Scheduled consultations",
            ),
            StatCard(title="Messages", value=stats.unread_messages, caption="Unread messages"),
        ]
        if is_doctor:
            verified = bool(doctor_profile and doctor_profile.is_verified)
            cards += [
                StatCard(title="Patients", value=stats.total_patients, caption="Total patients"),
                StatCard(
                    title="Status",
                    value="Verified" if verified else "Pending",
                    caption="Account status",
                    badge="default" if verified else "secondary",
                ),
            ]
        elif role == UserRole.PATIENT:
            cards += [
                StatCard(title="Medical Records", value=stats.medical_records, caption="Records available"),
                StatCard(
                    title="Last Visit",
                    value=stats.last_visit.strftime("%b %d, %Y") if stats.last_visit else "--",
                    caption="Most recent consultation" if stats.last_visit else "No recent visits",
                ),
            ]

        return DashboardView(
            user=UserResponse(
                id=self.user.id,
                email=self.user.email,
                role=role,
                first_name=first_name or None,
                last_name=last_name or None,
            ),
            profile=profile,
            display_name=f"Dr. {full_name}" if is_doctor else full_name,
            initials=f"{first_name[:1]}{last_name[:1]}".upper(),
            role=role.value,
            subtitle=subtitle,
            welcome=f"Welcome back, {first_name or full_name}!",
            description=(
                "Manage your patients and appointments from your dashboard" if is_doctor
                else "Access your medical records and schedule appointments"
            ),
            stats=stats,
            stat_cards=cards,
            quick_actions=DOCTOR_ACTIONS if is_doctor else PATIENT_ACTIONS,
            errors=errors,
        )
