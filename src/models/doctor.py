"""
Modelos de Médico (Doctor) y Especialización
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


class Specialization(Base):
    """Especialización médica (Cardiology, Neurology, ...)"""

    __tablename__ = "specializations"

    id = Column(Integer, primary_key=True, index=True)
    # Nombre interno usado en las listas de prioridad de los productos
    name = Column(String(120), unique=True, nullable=False, index=True)
    display_name = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<Specialization(id={self.id}, name={self.name})>"


class Doctor(Base):
    """
    Modelo de Médico
    NOTA: La relación con representantes se maneja a través de la tabla 'assignments'
    """

    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)
    specialization_id = Column(Integer, ForeignKey("specializations.id", ondelete="SET NULL"), nullable=True, index=True)
    category = Column(String(20), nullable=True)
    address = Column(String, nullable=True)
    phone = Column(String(20), nullable=True)

    # Coordenadas (opcionales) para el mapa del representante
    latitude = Column(Numeric(10, 8), nullable=True)
    longitude = Column(Numeric(11, 8), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    specialization = relationship("Specialization")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def specialization_name(self):
        return self.specialization.name if self.specialization else None

    def __repr__(self):
        return f"<Doctor(id={self.id}, name={self.full_name})>"
