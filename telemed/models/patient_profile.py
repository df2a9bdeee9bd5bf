from sqlalchemy import Column, String, ForeignKey, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base, TextArray, new_uuid


class PatientProfile(Base):
    __tablename__ = "patient_profiles"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), ForeignKey("profiles.user_id"), nullable=False, index=True)

    # Medical information
    medical_history = Column(Text, nullable=True)
    allergies = Column(TextArray, nullable=True)
    current_medications = Column(TextArray, nullable=True)
    blood_type = Column(Text, nullable=True)

    # Emergency contact
    emergency_contact_name = Column(Text, nullable=True)
    emergency_contact_phone = Column(Text, nullable=True)

    # Insurance
    insurance_provider = Column(Text, nullable=True)
    insurance_policy_number = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    profile = relationship("Profile", back_populates="patient_profiles")

    def __repr__(self):
        return f"<PatientProfile(user_id={self.user_id})>"
