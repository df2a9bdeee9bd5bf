from sqlalchemy import Column, String, Integer, Numeric, ForeignKey, DateTime, Boolean, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base, JsonValue, TextArray, new_uuid
from .enums import MedicalSpecialization, pg_enum


class DoctorProfile(Base):
    __tablename__ = "doctor_profiles"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), ForeignKey("profiles.user_id"), nullable=False, index=True)

    # Professional information
    license_number = Column(Text, nullable=False)
    specialization = Column(pg_enum(MedicalSpecialization, "medical_specialization"), nullable=False)
    years_of_experience = Column(Integer, nullable=True)
    consultation_fee = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    bio = Column(Text, nullable=True)
    education = Column(Text, nullable=True)
    certifications = Column(TextArray, nullable=True)
    available_hours = Column(JsonValue, nullable=True)

    # Account status
    is_verified = Column(Boolean, nullable=True, default=False)
    is_active = Column(Boolean, nullable=True, default=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    profile = relationship("Profile", back_populates="doctor_profiles")

    def __repr__(self):
        return f"<DoctorProfile(user_id={self.user_id}, specialization='{self.specialization}')>"
