from sqlalchemy import Column, String, Integer, Numeric, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base, new_uuid
from .enums import AppointmentStatus, pg_enum


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=new_uuid)

    # Participants (auth user ids)
    doctor_id = Column(String(36), nullable=False, index=True)
    patient_id = Column(String(36), nullable=False, index=True)

    # Appointment details
    appointment_date = Column(DateTime(timezone=True), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=True, default=30)
    reason = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(pg_enum(AppointmentStatus, "appointment_status"), nullable=True, default=AppointmentStatus.SCHEDULED)
    consultation_fee = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    meeting_url = Column(Text, nullable=True)
    prescription_id = Column(String(36), nullable=True)

    # Tracking
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    medical_records = relationship("MedicalRecord", back_populates="appointment")
    messages = relationship("Message", back_populates="appointment")
    prescriptions = relationship("Prescription", back_populates="appointment")

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, date='{self.appointment_date}')>"
