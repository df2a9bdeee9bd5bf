from sqlalchemy import Column, String, Date, ForeignKey, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base, new_uuid
from .enums import PrescriptionStatus, pg_enum


class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(String(36), primary_key=True, default=new_uuid)
    doctor_id = Column(String(36), nullable=False, index=True)
    patient_id = Column(String(36), nullable=False, index=True)
    appointment_id = Column(
        String(36),
        ForeignKey("appointments.id", name="prescriptions_appointment_id_fkey"),
        nullable=True,
    )

    # Medication
    medication_name = Column(Text, nullable=False)
    dosage = Column(Text, nullable=False)
    frequency = Column(Text, nullable=False)
    duration = Column(Text, nullable=False)
    instructions = Column(Text, nullable=True)

    # Validity
    prescribed_date = Column(Date, nullable=False, server_default=func.current_date())
    start_date = Column(Date, nullable=False, server_default=func.current_date())
    end_date = Column(Date, nullable=True)
    status = Column(pg_enum(PrescriptionStatus, "prescription_status"), nullable=True, default=PrescriptionStatus.ACTIVE)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    appointment = relationship("Appointment", back_populates="prescriptions")

    def __repr__(self):
        return f"<Prescription(id={self.id}, medication='{self.medication_name}', status='{self.status}')>"
