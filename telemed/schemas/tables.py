"""Row, Insert and Update shapes of every backend table.

``Row`` is what a ``select *`` returns. ``Insert`` makes optional whatever the
backend fills in by default. ``Update`` makes every column optional so only
the columns that were set get sent. Insert and Update reject keys that are
not columns of the table.
"""
from datetime import date, datetime
from typing import Any, Dict, List, NamedTuple, Optional, Type

from pydantic import BaseModel, ConfigDict

from ..core.database import Base
from ..models.appointment import Appointment
from ..models.doctor_profile import DoctorProfile
from ..models.enums import (
    AppointmentStatus, MedicalSpecialization, PrescriptionStatus, UserRole
)
from ..models.medical_record import MedicalRecord
from ..models.message import Message
from ..models.patient_profile import PatientProfile
from ..models.prescription import Prescription
from ..models.profile import Profile

Json = Any


class TableModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class WriteModel(TableModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True, extra="forbid")


# profiles
class ProfileRow(TableModel):
    id: str
    user_id: str
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    avatar_url: Optional[str] = None
    role: UserRole
    created_at: datetime
    updated_at: datetime


class ProfileInsert(WriteModel):
    user_id: str
    email: str
    first_name: str
    last_name: str
    id: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    avatar_url: Optional[str] = None
    role: Optional[UserRole] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileUpdate(WriteModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    avatar_url: Optional[str] = None
    role: Optional[UserRole] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# doctor_profiles
class DoctorProfileRow(TableModel):
    id: str
    user_id: str
    license_number: str
    specialization: MedicalSpecialization
    years_of_experience: Optional[int] = None
    consultation_fee: Optional[float] = None
    bio: Optional[str] = None
    education: Optional[str] = None
    certifications: Optional[List[str]] = None
    available_hours: Optional[Json] = None
    is_verified: Optional[bool] = None
    is_active: Optional[bool] = None
    created_at: datetime
    updated_at: datetime


class DoctorProfileInsert(WriteModel):
    user_id: str
    license_number: str
    specialization: MedicalSpecialization
    id: Optional[str] = None
    years_of_experience: Optional[int] = None
    consultation_fee: Optional[float] = None
    bio: Optional[str] = None
    education: Optional[str] = None
    certifications: Optional[List[str]] = None
    available_hours: Optional[Json] = None
    is_verified: Optional[bool] = None
    is_active: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DoctorProfileUpdate(WriteModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    license_number: Optional[str] = None
    specialization: Optional[MedicalSpecialization] = None
    years_of_experience: Optional[int] = None
    consultation_fee: Optional[float] = None
    bio: Optional[str] = None
    education: Optional[str] = None
    certifications: Optional[List[str]] = None
    available_hours: Optional[Json] = None
    is_verified: Optional[bool] = None
    is_active: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# patient_profiles
class PatientProfileRow(TableModel):
    id: str
    user_id: str
    medical_history: Optional[str] = None
    allergies: Optional[List[str]] = None
    current_medications: Optional[List[str]] = None
    blood_type: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_policy_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PatientProfileInsert(WriteModel):
    user_id: str
    id: Optional[str] = None
    medical_history: Optional[str] = None
    allergies: Optional[List[str]] = None
    current_medications: Optional[List[str]] = None
    blood_type: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_policy_number: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PatientProfileUpdate(WriteModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    medical_history: Optional[str] = None
    allergies: Optional[List[str]] = None
    current_medications: Optional[List[str]] = None
    blood_type: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_policy_number: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# appointments
class AppointmentRow(TableModel):
    id: str
    doctor_id: str
    patient_id: str
    appointment_date: datetime
    duration_minutes: Optional[int] = None
    reason: str
    notes: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    consultation_fee: Optional[float] = None
    meeting_url: Optional[str] = None
    prescription_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AppointmentInsert(WriteModel):
    doctor_id: str
    patient_id: str
    appointment_date: datetime
    reason: str
    id: Optional[str] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    consultation_fee: Optional[float] = None
    meeting_url: Optional[str] = None
    prescription_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AppointmentUpdate(WriteModel):
    id: Optional[str] = None
    doctor_id: Optional[str] = None
    patient_id: Optional[str] = None
    appointment_date: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    consultation_fee: Optional[float] = None
    meeting_url: Optional[str] = None
    prescription_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# medical_records
class MedicalRecordRow(TableModel):
    id: str
    patient_id: str
    doctor_id: str
    appointment_id: Optional[str] = None
    symptoms: Optional[str] = None
    diagnosis: Optional[str] = None
    treatment_plan: Optional[str] = None
    notes: Optional[str] = None
    vital_signs: Optional[Json] = None
    attachments: Optional[List[str]] = None
    created_at: datetime
    updated_at: datetime


class MedicalRecordInsert(WriteModel):
    patient_id: str
    doctor_id: str
    id: Optional[str] = None
    appointment_id: Optional[str] = None
    symptoms: Optional[str] = None
    diagnosis: Optional[str] = None
    treatment_plan: Optional[str] = None
    notes: Optional[str] = None
    vital_signs: Optional[Json] = None
    attachments: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MedicalRecordUpdate(WriteModel):
    id: Optional[str] = None
    patient_id: Optional[str] = None
    doctor_id: Optional[str] = None
    appointment_id: Optional[str] = None
    symptoms: Optional[str] = None
    diagnosis: Optional[str] = None
    treatment_plan: Optional[str] = None
    notes: Optional[str] = None
    vital_signs: Optional[Json] = None
    attachments: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# messages
class MessageRow(TableModel):
    id: str
    sender_id: str
    recipient_id: str
    appointment_id: Optional[str] = None
    message: str
    attachments: Optional[List[str]] = None
    is_read: Optional[bool] = None
    created_at: datetime


class MessageInsert(WriteModel):
    sender_id: str
    recipient_id: str
    message: str
    id: Optional[str] = None
    appointment_id: Optional[str] = None
    attachments: Optional[List[str]] = None
    is_read: Optional[bool] = None
    created_at: Optional[datetime] = None


class MessageUpdate(WriteModel):
    id: Optional[str] = None
    sender_id: Optional[str] = None
    recipient_id: Optional[str] = None
    appointment_id: Optional[str] = None
    message: Optional[str] = None
    attachments: Optional[List[str]] = None
    is_read: Optional[bool] = None
    created_at: Optional[datetime] = None


# prescriptions
class PrescriptionRow(TableModel):
    id: str
    doctor_id: str
    patient_id: str
    appointment_id: Optional[str] = None
    medication_name: str
    dosage: str
    frequency: str
    duration: str
    instructions: Optional[str] = None
    prescribed_date: date
    start_date: date
    end_date: Optional[date] = None
    status: Optional[PrescriptionStatus] = None
    created_at: datetime
    updated_at: datetime


class PrescriptionInsert(WriteModel):
    doctor_id: str
    patient_id: str
    medication_name: str
    dosage: str
    frequency: str
    duration: str
    id: Optional[str] = None
    appointment_id: Optional[str] = None
    instructions: Optional[str] = None
    prescribed_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[PrescriptionStatus] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PrescriptionUpdate(WriteModel):
    id: Optional[str] = None
    doctor_id: Optional[str] = None
    patient_id: Optional[str] = None
    appointment_id: Optional[str] = None
    medication_name: Optional[str] = None
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    duration: Optional[str] = None
    instructions: Optional[str] = None
    prescribed_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[PrescriptionStatus] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TableSchema(NamedTuple):
    model: Type[Base]
    row: Type[TableModel]
    insert: Type[WriteModel]
    update: Type[WriteModel]


TABLES: Dict[str, TableSchema] = {
    schema.model.__tablename__: schema
    for schema in (
        TableSchema(Profile, ProfileRow, ProfileInsert, ProfileUpdate),
        TableSchema(DoctorProfile, DoctorProfileRow, DoctorProfileInsert, DoctorProfileUpdate),
        TableSchema(PatientProfile, PatientProfileRow, PatientProfileInsert, PatientProfileUpdate),
        TableSchema(Appointment, AppointmentRow, AppointmentInsert, AppointmentUpdate),
        TableSchema(MedicalRecord, MedicalRecordRow, MedicalRecordInsert, MedicalRecordUpdate),
        TableSchema(Message, MessageRow, MessageInsert, MessageUpdate),
        TableSchema(Prescription, PrescriptionRow, PrescriptionInsert, PrescriptionUpdate),
    )
}


class UnknownTableError(KeyError):
    pass


class UnknownColumnError(KeyError):
    pass


def get_table(name: str) -> TableSchema:
    try:
        return TABLES[name]
    except KeyError:
        raise UnknownTableError(f"Unknown table: {name}") from None


def check_column(table: str, column: str) -> str:
    """Return ``column`` if ``table`` has it, else raise ``UnknownColumnError``."""
    if column not in get_table(table).model.__table__.columns:
        raise UnknownColumnError(f"Unknown column {table}.{column}")
    return column
