"""
Router de Series Semanales
Una asignación por médico con una ventana de N semanas, vinculadas por parent_id
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ..models import get_db
from ..schemas import (
    WeeklySeriesCreate, WeeklySeriesUpdate, WeeklySeriesResult,
    AssignmentDetailResponse, SeriesHeadResponse
)
from ..services import AssignmentManager
from ..utils import Actor, require_manager
from .assignments import build_assignment_response

router = APIRouter()


@router.post("/weekly-assignments", response_model=WeeklySeriesResult, status_code=status.HTTP_201_CREATED)
async def create_weekly_series(
    series_data: WeeklySeriesCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_manager)
):
    """
    Crear serie semanal para varios médicos
    Si un médico falla se informa en su resultado y se continúa con los demás
    """
    return AssignmentManager(db).create_weekly_series(actor, series_data)


@router.get("/weekly-assignments", response_model=List[SeriesHeadResponse])
async def list_weekly_series(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_manager)
):
    """Listar cabezas de serie con su número de miembros"""
    result = []
    for head, member_count in AssignmentManager(db).get_recurring_series():
        data = build_assignment_response(head).model_dump()
        result.append(SeriesHeadResponse(**data, member_count=member_count))
    return result


@router.put("/weekly-assignments/{parent_id}", response_model=List[AssignmentDetailResponse])
async def update_weekly_series(
    parent_id: int,
    series_data: WeeklySeriesUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_manager)
):
    """Actualizar todos los miembros de la serie"""
    members = AssignmentManager(db).update_weekly_series(actor, parent_id, series_data)
    return [build_assignment_response(member) for member in members]


@router.delete("/weekly-assignments/{parent_id}")
async def delete_weekly_series(
    parent_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_manager)
):
    """Eliminar la serie completa (cabeza y miembros)"""
    deleted = AssignmentManager(db).delete_weekly_series(actor, parent_id)
    return {
        "message": "Serie eliminada exitosamente",
        "parent_id": parent_id,
        "deleted": deleted
    }
