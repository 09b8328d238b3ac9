"""
Schemas compartidos: resúmenes de entidades del catálogo
"""
from pydantic import BaseModel, Field
from typing import Optional, List


class RepresentativeSummary(BaseModel):
    """Resumen de representante para respuestas anidadas"""
    id: int = Field(..., description="ID del representante")
    full_name: str = Field(..., description="Nombre completo")
    manager_id: Optional[int] = Field(None, description="ID del gerente")

    class Config:
        from_attributes = True


class DoctorSummary(BaseModel):
    """Resumen de médico para respuestas anidadas"""
    id: int = Field(..., description="ID del médico")
    full_name: str = Field(..., description="Nombre completo")
    specialization_name: Optional[str] = Field(None, description="Especialización")
    category: Optional[str] = Field(None, description="Categoría del médico")
    address: Optional[str] = Field(None, description="Dirección")

    class Config:
        from_attributes = True


class ProductSummary(BaseModel):
    """Resumen de producto con su marca"""
    id: int = Field(..., description="ID del producto")
    name: str = Field(..., description="Nombre del producto")
    description: Optional[str] = Field(None, description="Descripción")
    brand_id: int = Field(..., description="ID de la marca")
    brand_name: Optional[str] = Field(None, description="Nombre de la marca")
    priority_specializations: List[str] = Field(default_factory=list, description="Especializaciones prioritarias")

    class Config:
        from_attributes = True


class HealthResponse(BaseModel):
    """Schema para health check"""
    status: str = Field(..., description="Estado del servicio")
    service: str = Field(..., description="Nombre del servicio")
    version: str = Field(..., description="Versión del servicio")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "service": "MS-VISITS-PY",
                "version": "1.0.0"
            }
        }
