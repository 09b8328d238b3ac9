"""
Modelo de Asignación (Assignment)
Relaciona un representante con un médico: días de visita, franja horaria,
productos a presentar y la ventana de recurrencia (VisitGoal)
"""
from sqlalchemy import (
    Column, Integer, String, Date, Time, DateTime, ForeignKey, Text, JSON,
    UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


class Assignment(Base):
    """
    Modelo de Asignación - "El representante R visita al médico D los días
    {D1..Dn} entre start_time y end_time"
    Existe como máximo UNA asignación por par (representative_id, doctor_id)
    """

    __tablename__ = "assignments"
    __table_args__ = (
        UniqueConstraint("representative_id", "doctor_id", name="uq_assignment_representative_doctor"),
        CheckConstraint("recurring_type IN ('none', 'weekly')", name="check_assignment_recurring_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    representative_id = Column(Integer, ForeignKey("representatives.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False, index=True)

    # Lista de nombres de día en inglés: ["Monday", "Wednesday"]
    visit_days = Column(JSON, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    notes = Column(Text, nullable=True)

    # Serie semanal: todos los miembros apuntan a la cabeza de la serie
    recurring_type = Column(String(20), default="none", nullable=False)
    recurring_parent_id = Column(Integer, ForeignKey("assignments.id", ondelete="SET NULL"), nullable=True, index=True)

    # Auditoría - usuario de MS-AUTH que hizo el cambio
    assigned_by = Column(Integer, nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    representative = relationship("Representative")
    doctor = relationship("Doctor")
    products = relationship(
        "AssignmentProduct",
        back_populates="assignment",
        cascade="all, delete-orphan",
        order_by="AssignmentProduct.id",
    )
    visit_goal = relationship(
        "VisitGoal",
        back_populates="assignment",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def product_ids(self) -> list:
        return [link.product_id for link in self.products]

    def __repr__(self):
        return f"<Assignment(id={self.id}, rep={self.representative_id}, doctor={self.doctor_id}, days={self.visit_days})>"


class VisitGoal(Base):
    """
    Ventana de recurrencia de una asignación
    recurring_weeks = 0 / NULL significa ventana sin límite
    """

    __tablename__ = "visit_goals"
    __table_args__ = (
        CheckConstraint("visits_per_week > 0", name="check_visit_goal_positive"),
        CheckConstraint("recurring_weeks IS NULL OR recurring_weeks >= 0", name="check_visit_goal_weeks"),
    )

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(
        Integer,
        ForeignKey("assignments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True
    )
    visits_per_week = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=True)
    recurring_weeks = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    assignment = relationship("Assignment", back_populates="visit_goal")

    def __repr__(self):
        return f"<VisitGoal(assignment={self.assignment_id}, per_week={self.visits_per_week}, weeks={self.recurring_weeks})>"


class AssignmentProduct(Base):
    """Productos que el representante presentará al médico en la asignación"""

    __tablename__ = "assignment_products"
    __table_args__ = (
        UniqueConstraint("assignment_id", "product_id", name="uq_assignment_product"),
    )

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    assignment = relationship("Assignment", back_populates="products")
    product = relationship("Product")
