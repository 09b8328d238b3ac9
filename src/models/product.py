"""
Modelos de Marca (Brand) y Producto
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base


class Brand(Base):
    """Marca farmacéutica"""

    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Brand(id={self.id}, name={self.name})>"


class Product(Base):
    """
    Producto de una marca
    priority_specializations: nombres de especialización para los que el
    producto es prioritario en la visita
    """

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    priority_specializations = Column(JSON, nullable=False, default=list)
    pdf_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    brand = relationship("Brand")

    @property
    def brand_name(self):
        return self.brand.name if self.brand else None

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name}, brand={self.brand_id})>"
