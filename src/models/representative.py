"""
Modelos de Representante (Representative) y Gerente (Manager)
Catálogo de solo lectura para este servicio: el CRUD vive en otro módulo
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


class Manager(Base):
    """Modelo de Gerente - Supervisa a un grupo de representantes"""

    __tablename__ = "managers"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=True, index=True)
    # Referencia al usuario de MS-AUTH sin FK por ser externa
    user_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    representatives = relationship("Representative", back_populates="manager")

    def __repr__(self):
        return f"<Manager(id={self.id}, name={self.full_name})>"


class Representative(Base):
    """Modelo de Representante - Visita médicos en nombre de las marcas"""

    __tablename__ = "representatives"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=True, index=True)
    phone = Column(String(20), nullable=True)
    user_id = Column(Integer, nullable=True, index=True)
    manager_id = Column(Integer, ForeignKey("managers.id", ondelete="SET NULL"), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    manager = relationship("Manager", back_populates="representatives")
    brand_links = relationship("RepresentativeBrand", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def brand_ids(self) -> list:
        return [link.brand_id for link in self.brand_links]

    def __repr__(self):
        return f"<Representative(id={self.id}, name={self.full_name})>"


class RepresentativeBrand(Base):
    """Marcas asignadas a un representante (define su catálogo permitido)"""

    __tablename__ = "representative_brands"
    __table_args__ = (
        UniqueConstraint("representative_id", "brand_id", name="uq_representative_brand"),
    )

    id = Column(Integer, primary_key=True, index=True)
    representative_id = Column(Integer, ForeignKey("representatives.id", ondelete="CASCADE"), nullable=False, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
