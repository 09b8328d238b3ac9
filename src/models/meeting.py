"""
Modelo de Reunión (Meeting)
Una visita concreta del representante al médico, con su ciclo de vida
"""
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Index,
    UniqueConstraint, CheckConstraint, text
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base

MEETING_STATUSES = ("scheduled", "in_progress", "completed", "postponed", "cancelled")

# Estados que bloquean iniciar otra reunión para el mismo (assignment, doctor)
BLOCKING_STATUSES = ("in_progress", "completed")

TERMINAL_STATUSES = ("completed", "cancelled")

_BLOCKING_WHERE = text("status IN ('in_progress', 'completed')")


class Meeting(Base):
    """
    Modelo de Reunión
    Como máximo una reunión in_progress/completed por (assignment_id, doctor_id):
    el índice único parcial respalda la verificación del servicio
    """

    __tablename__ = "meetings"
    __table_args__ = (
        CheckConstraint(
            "status IN ('scheduled', 'in_progress', 'completed', 'postponed', 'cancelled')",
            name="check_meeting_status"
        ),
        Index(
            "uq_meeting_assignment_doctor_active",
            "assignment_id", "doctor_id",
            unique=True,
            postgresql_where=_BLOCKING_WHERE,
            sqlite_where=_BLOCKING_WHERE,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False, index=True)
    representative_id = Column(Integer, ForeignKey("representatives.id", ondelete="CASCADE"), nullable=False, index=True)

    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(20), default="in_progress", nullable=False, index=True)

    # Notas de cierre o motivo del aplazamiento
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    assignment = relationship("Assignment")
    doctor = relationship("Doctor")
    representative = relationship("Representative")
    products = relationship(
        "MeetingProduct",
        back_populates="meeting",
        cascade="all, delete-orphan",
        order_by="MeetingProduct.id",
    )
    discussed_products = relationship(
        "DiscussedProduct",
        back_populates="visit",
        cascade="all, delete-orphan",
        order_by="DiscussedProduct.id",
    )

    def __repr__(self):
        return f"<Meeting(id={self.id}, assignment={self.assignment_id}, doctor={self.doctor_id}, status={self.status})>"


class MeetingProduct(Base):
    """Producto tratado (o no) durante una reunión, con notas libres"""

    __tablename__ = "meeting_products"
    __table_args__ = (
        UniqueConstraint("meeting_id", "product_id", name="uq_meeting_product"),
    )

    id = Column(Integer, primary_key=True, index=True)
    meeting_id = Column(Integer, ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    discussed = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    meeting = relationship("Meeting", back_populates="products")
    product = relationship("Product")


class DiscussedProduct(Base):
    """
    Libro de productos discutidos en una visita
    visit_id apunta a la reunión (meetings.id)
    """

    __tablename__ = "discussed_products"
    __table_args__ = (
        UniqueConstraint("visit_id", "product_id", name="uq_discussed_product"),
    )

    id = Column(Integer, primary_key=True, index=True)
    visit_id = Column(Integer, ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    visit = relationship("Meeting", back_populates="discussed_products")
    product = relationship("Product")
