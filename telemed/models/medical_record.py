from sqlalchemy import Column, String, ForeignKey, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base, JsonValue, TextArray, new_uuid


class MedicalRecord(Base):
    __tablename__ = "medical_records"

    id = Column(String(36), primary_key=True, default=new_uuid)
    patient_id = Column(String(36), nullable=False, index=True)
    doctor_id = Column(String(36), nullable=False, index=True)
    appointment_id = Column(
        String(36),
        ForeignKey("appointments.id", name="medical_records_appointment_id_fkey"),
        nullable=True,
    )

    # Clinical notes
    symptoms = Column(Text, nullable=True)
    diagnosis = Column(Text, nullable=True)
    treatment_plan = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    vital_signs = Column(JsonValue, nullable=True)
    attachments = Column(TextArray, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    appointment = relationship("Appointment", back_populates="medical_records")

    def __repr__(self):
        return f"<MedicalRecord(id={self.id}, patient_id={self.patient_id})>"
