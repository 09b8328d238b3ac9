"""
Schemas de productos discutidos en una visita
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime


class DiscussedProductsUpdate(BaseModel):
    """Reemplaza toda la selección; una lista vacía limpia la selección"""
    product_ids: List[int] = Field(default_factory=list, description="Productos discutidos")

    class Config:
        json_schema_extra = {
            "example": {
                "product_ids": [1, 4]
            }
        }


class DiscussedProductIdsResponse(BaseModel):
    """Selección actual de una visita"""
    visit_id: int
    product_ids: List[int]


class ProductForSelection(BaseModel):
    """Producto del catálogo permitido del representante"""
    id: int
    name: str
    brand_id: int
    brand_name: str
    description: Optional[str] = None


class DiscussedProductDetailed(BaseModel):
    """Producto discutido con los datos de la visita"""
    id: int
    visit_id: int
    product_id: int
    created_at: Optional[datetime] = None
    product_name: str
    product_description: Optional[str] = None
    brand_name: str
    visit_start_time: Optional[datetime] = None
    visit_status: str
    representative_name: str
    doctor_name: str


class DiscussedSummaryRequest(BaseModel):
    """Visitas para las que se quiere el resumen"""
    visit_ids: List[int] = Field(default_factory=list)


class DiscussedSummaryResponse(BaseModel):
    """visit_id -> etiquetas de productos"""
    summary: Dict[int, List[str]]
