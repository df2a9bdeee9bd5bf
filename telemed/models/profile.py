from sqlalchemy import Column, String, Date, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base, new_uuid
from .enums import UserRole, pg_enum


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=new_uuid)
    # auth user id; sub-profiles hang off this column
    user_id = Column(String(36), unique=True, nullable=False, index=True)

    # Personal information
    email = Column(Text, nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    avatar_url = Column(Text, nullable=True)
    role = Column(pg_enum(UserRole, "user_role"), nullable=False, default=UserRole.PATIENT)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    doctor_profiles = relationship("DoctorProfile", back_populates="profile")
    patient_profiles = relationship("PatientProfile", back_populates="profile")

    def __repr__(self):
        return f"<Profile(user_id={self.user_id}, name='{self.first_name} {self.last_name}', role='{self.role}')>"
