"""
Schemas de Asignación (Assignment) y de series semanales
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime, time

from .common import RepresentativeSummary, DoctorSummary, ProductSummary


def _check_time_window(start_time: Optional[time], end_time: Optional[time]):
    if start_time is not None and end_time is not None and end_time <= start_time:
        raise ValueError("end_time debe ser posterior a start_time")


class AssignmentCreate(BaseModel):
    """Schema para crear (o actualizar por par representante-médico) una asignación"""
    representative_id: int = Field(..., gt=0, description="ID del representante")
    doctor_id: int = Field(..., gt=0, description="ID del médico")
    visit_days: List[str] = Field(..., min_length=1, description="Días de visita (Monday..Sunday)")
    start_time: time = Field(..., description="Hora de inicio de la franja")
    end_time: time = Field(..., description="Hora de fin de la franja")
    product_ids: List[int] = Field(default_factory=list, description="Productos a presentar")
    visits_per_week: Optional[int] = Field(None, ge=0, description="Meta de visitas por semana (0 elimina la meta)")
    start_date: Optional[date] = Field(None, description="Inicio de la ventana de recurrencia")
    recurring_weeks: Optional[int] = Field(None, ge=0, description="Semanas de la ventana (0 = sin límite)")
    notes: Optional[str] = Field(None, description="Notas sobre la asignación")

    @model_validator(mode='after')
    def validate_time_window(self):
        """Validar que la franja horaria sea coherente"""
        _check_time_window(self.start_time, self.end_time)
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "representative_id": 1,
                "doctor_id": 3,
                "visit_days": ["Monday", "Wednesday"],
                "start_time": "09:00:00",
                "end_time": "11:00:00",
                "product_ids": [1, 2],
                "visits_per_week": 2,
                "start_date": "2025-01-06",
                "recurring_weeks": 8
            }
        }


class AssignmentUpdate(BaseModel):
    """
    Schema para actualizar una asignación por ID
    Campo ausente = no se modifica; null explícito = se limpia (si el campo lo admite)
    """
    visit_days: Optional[List[str]] = Field(None, min_length=1, description="Nuevos días de visita")
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    product_ids: Optional[List[int]] = Field(None, description="Reemplaza todos los productos")
    visits_per_week: Optional[int] = Field(None, ge=0, description="0 o null elimina la meta")
    start_date: Optional[date] = None
    recurring_weeks: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None

    @model_validator(mode='after')
    def validate_time_window(self):
        _check_time_window(self.start_time, self.end_time)
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "visit_days": ["Tuesday"],
                "product_ids": [2],
                "visits_per_week": 0
            }
        }


class VisitGoalResponse(BaseModel):
    """Schema de la ventana de recurrencia"""
    id: int
    visits_per_week: int = Field(..., description="Meta de visitas por semana")
    start_date: Optional[date] = Field(None, description="Inicio de la ventana")
    recurring_weeks: Optional[int] = Field(None, description="Semanas de la ventana")
    window_end: Optional[date] = Field(None, description="Último día de la ventana")

    class Config:
        from_attributes = True


class AssignmentResponse(BaseModel):
    """Schema para respuesta de asignación"""
    id: int = Field(..., description="ID de la asignación")
    representative_id: int = Field(..., description="ID del representante")
    doctor_id: int = Field(..., description="ID del médico")
    visit_days: List[str] = Field(..., description="Días de visita")
    start_time: time = Field(..., description="Hora de inicio")
    end_time: time = Field(..., description="Hora de fin")
    notes: Optional[str] = Field(None, description="Notas")
    recurring_type: str = Field("none", description="Tipo de recurrencia (none, weekly)")
    recurring_parent_id: Optional[int] = Field(None, description="Cabeza de la serie semanal")
    created_at: Optional[datetime] = Field(None, description="Fecha de creación")
    updated_at: Optional[datetime] = Field(None, description="Última actualización")

    class Config:
        from_attributes = True


class AssignmentDetailResponse(AssignmentResponse):
    """Schema detallado: asignación + representante + médico + productos + meta"""
    representative: Optional[RepresentativeSummary] = None
    doctor: Optional[DoctorSummary] = None
    products: List[ProductSummary] = Field(default_factory=list)
    visit_goal: Optional[VisitGoalResponse] = None

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 1,
                "representative_id": 1,
                "doctor_id": 3,
                "visit_days": ["Monday", "Wednesday"],
                "start_time": "09:00:00",
                "end_time": "11:00:00",
                "notes": None,
                "recurring_type": "none",
                "recurring_parent_id": None,
                "representative": {"id": 1, "full_name": "Aylin Mammadova", "manager_id": 1},
                "doctor": {"id": 3, "full_name": "Rashad Aliyev", "specialization_name": "Cardiology"},
                "products": [{"id": 1, "name": "Cardiomax", "brand_id": 1, "brand_name": "Pharma A"}],
                "visit_goal": {"id": 1, "visits_per_week": 2, "start_date": "2025-01-06", "recurring_weeks": 8}
            }
        }


class AssignmentStatsResponse(BaseModel):
    """Contadores de asignaciones para el dashboard"""
    total_assignments: int
    assignments_with_goals: int
    active_representatives: int
    assigned_doctors: int


class CalendarEntry(BaseModel):
    """Una visita prevista en el calendario semanal"""
    assignment_id: int
    representative_id: int
    representative_name: Optional[str] = None
    doctor_id: int
    doctor_name: Optional[str] = None
    start_time: time
    end_time: time


class CalendarDay(BaseModel):
    """Un día del calendario semanal"""
    day: date
    weekday: str
    entries: List[CalendarEntry] = Field(default_factory=list)


class WeeklyCalendarResponse(BaseModel):
    """Calendario semanal de visitas previstas"""
    week_start: date
    week_end: date
    days: List[CalendarDay]
    total_entries: int


# ============================================================================
# SERIES SEMANALES
# ============================================================================

class WeeklySeriesCreate(BaseModel):
    """Schema para crear una serie semanal para varios médicos"""
    representative_id: int = Field(..., gt=0, description="ID del representante")
    doctor_ids: List[int] = Field(..., min_length=1, description="Médicos de la serie")
    product_ids: List[int] = Field(default_factory=list, description="Productos a presentar")
    start_time: time = Field(..., description="Hora de inicio")
    end_time: time = Field(..., description="Hora de fin")
    weekday: int = Field(..., ge=0, le=6, description="Día de la semana (0 = lunes, 6 = domingo)")
    recurring_weeks: int = Field(..., description="Número de semanas (0 = sin límite)")
    start_date: date = Field(..., description="Fecha desde la que se busca el primer día")
    notes: Optional[str] = Field(None, description="Notas")

    @model_validator(mode='after')
    def validate_time_window(self):
        _check_time_window(self.start_time, self.end_time)
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "representative_id": 1,
                "doctor_ids": [3, 4],
                "product_ids": [1],
                "start_time": "09:00:00",
                "end_time": "10:00:00",
                "weekday": 2,
                "recurring_weeks": 4,
                "start_date": "2025-01-06"
            }
        }


class WeeklySeriesUpdate(BaseModel):
    """Actualización uniforme de todos los miembros de una serie"""
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    notes: Optional[str] = None
    product_ids: Optional[List[int]] = None
    recurring_weeks: Optional[int] = Field(None, ge=0)

    @model_validator(mode='after')
    def validate_time_window(self):
        _check_time_window(self.start_time, self.end_time)
        return self


class SeriesItemResult(BaseModel):
    """Resultado por médico de la creación de una serie"""
    doctor_id: int
    success: bool
    assignment_id: Optional[int] = None
    dates: List[date] = Field(default_factory=list)
    error: Optional[str] = None


class WeeklySeriesResult(BaseModel):
    """Resultado de la creación de una serie (tolerante a fallos parciales)"""
    parent_id: Optional[int] = None
    items: List[SeriesItemResult]
    created: int
    failed: int


class SeriesHeadResponse(AssignmentDetailResponse):
    """Cabeza de serie con el número de miembros"""
    member_count: int = Field(..., description="Asignaciones en la serie (incluida la cabeza)")
