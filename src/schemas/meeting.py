"""
Schemas de Reunión (Meeting) y productos tratados en la reunión
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime, time

from .common import RepresentativeSummary, DoctorSummary, ProductSummary

MeetingStatus = Literal["scheduled", "in_progress", "completed", "postponed", "cancelled"]


class MeetingStartRequest(BaseModel):
    """Schema para iniciar una reunión"""
    assignment_id: int = Field(..., gt=0, description="ID de la asignación")
    doctor_id: int = Field(..., gt=0, description="ID del médico")
    representative_id: Optional[int] = Field(
        None, gt=0,
        description="ID del representante (por defecto, el del usuario autenticado)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "assignment_id": 1,
                "doctor_id": 3
            }
        }


class MeetingPostponeRequest(BaseModel):
    """Schema para aplazar una reunión (el motivo es obligatorio)"""
    reason: str = Field(..., min_length=1, description="Motivo del aplazamiento")

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, v):
        """El motivo no puede estar vacío"""
        if not v or not v.strip():
            raise ValueError('El motivo del aplazamiento es obligatorio')
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "reason": "El médico está en cirugía"
            }
        }


class MeetingEndRequest(BaseModel):
    """Schema para finalizar una reunión"""
    notes: Optional[str] = Field(None, description="Notas de cierre")

    class Config:
        json_schema_extra = {
            "example": {
                "notes": "Buena recepción del producto"
            }
        }


class MeetingProductCreate(BaseModel):
    """Schema para registrar un producto en la reunión"""
    product_id: int = Field(..., gt=0, description="ID del producto")
    discussed: bool = Field(True, description="Si el producto fue tratado")
    notes: Optional[str] = Field(None, description="Notas sobre el producto")


class MeetingProductUpdate(BaseModel):
    """Campo ausente = no se modifica"""
    discussed: Optional[bool] = None
    notes: Optional[str] = None


class MeetingProductResponse(BaseModel):
    """Schema de producto registrado en la reunión"""
    id: int
    meeting_id: int
    product_id: int
    discussed: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    product: Optional[ProductSummary] = None

    class Config:
        from_attributes = True


class MeetingAssignmentSummary(BaseModel):
    """Resumen de la asignación de la reunión"""
    id: int
    visit_days: List[str]
    start_time: time
    end_time: time
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class MeetingResponse(BaseModel):
    """Schema para respuesta de reunión"""
    id: int = Field(..., description="ID de la reunión")
    assignment_id: int = Field(..., description="ID de la asignación")
    doctor_id: int = Field(..., description="ID del médico")
    representative_id: int = Field(..., description="ID del representante")
    start_time: Optional[datetime] = Field(None, description="Inicio real")
    end_time: Optional[datetime] = Field(None, description="Fin real")
    status: MeetingStatus = Field(..., description="Estado de la reunión")
    notes: Optional[str] = Field(None, description="Notas o motivo del aplazamiento")
    created_at: Optional[datetime] = Field(None, description="Fecha de creación")
    updated_at: Optional[datetime] = Field(None, description="Última actualización")

    class Config:
        from_attributes = True


class MeetingDetailResponse(MeetingResponse):
    """Reunión + asignación + médico + representante + productos"""
    assignment: Optional[MeetingAssignmentSummary] = None
    doctor: Optional[DoctorSummary] = None
    representative: Optional[RepresentativeSummary] = None
    products: List[MeetingProductResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 10,
                "assignment_id": 1,
                "doctor_id": 3,
                "representative_id": 1,
                "start_time": "2025-01-08T09:05:00Z",
                "end_time": None,
                "status": "in_progress",
                "notes": None,
                "doctor": {"id": 3, "full_name": "Rashad Aliyev", "specialization_name": "Cardiology"},
                "representative": {"id": 1, "full_name": "Aylin Mammadova"},
                "products": []
            }
        }


class MeetingListResponse(BaseModel):
    """Lista de reuniones con conteos por estado"""
    meetings: List[MeetingDetailResponse]
    total: int
    in_progress: int
    completed: int
    postponed: int
    cancelled: int


class MeetingStatsResponse(BaseModel):
    """Conteos de reuniones por estado"""
    total: int
    scheduled: int
    in_progress: int
    completed: int
    postponed: int
    cancelled: int


class MeetingProductsPartition(BaseModel):
    """Productos disponibles para la reunión, separados por prioridad"""
    meeting_id: int
    doctor_specialization: Optional[str] = None
    priority_products: List[ProductSummary]
    other_products: List[ProductSummary]
