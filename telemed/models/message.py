from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base, TextArray, new_uuid


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=new_uuid)
    sender_id = Column(String(36), nullable=False, index=True)
    recipient_id = Column(String(36), nullable=False, index=True)
    appointment_id = Column(
        String(36),
        ForeignKey("appointments.id", name="messages_appointment_id_fkey"),
        nullable=True,
    )

    message = Column(Text, nullable=False)
    attachments = Column(TextArray, nullable=True)
    is_read = Column(Boolean, nullable=True, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    appointment = relationship("Appointment", back_populates="messages")

    def __repr__(self):
        return f"<Message(id={self.id}, sender_id={self.sender_id}, recipient_id={self.recipient_id})>"
