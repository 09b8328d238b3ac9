"""
Router de Asignaciones (Assignments)
Relación representante → médico con franja, productos y meta de visitas
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date, timedelta

from ..models import get_db, Assignment
from ..schemas import (
    AssignmentCreate, AssignmentUpdate, AssignmentDetailResponse,
    AssignmentStatsResponse, WeeklyCalendarResponse, DoctorSummary
)
from ..services import AssignmentManager
from ..services.access import ensure_can_read, scope_representative
from ..services.recurrence import window_end
from ..clients import notification_client
from ..utils import Actor, get_actor, require_manager

router = APIRouter()


def build_assignment_response(assignment: Assignment) -> AssignmentDetailResponse:
    """Asignación + representante + médico + productos + meta"""
    goal = assignment.visit_goal
    goal_data = None
    if goal is not None:
        goal_data = {
            "id": goal.id,
            "visits_per_week": goal.visits_per_week,
            "start_date": goal.start_date,
            "recurring_weeks": goal.recurring_weeks,
            "window_end": window_end(goal.start_date, goal.recurring_weeks) if goal.start_date else None,
        }

    return AssignmentDetailResponse(
        id=assignment.id,
        representative_id=assignment.representative_id,
        doctor_id=assignment.doctor_id,
        visit_days=assignment.visit_days,
        start_time=assignment.start_time,
        end_time=assignment.end_time,
        notes=assignment.notes,
        recurring_type=assignment.recurring_type,
        recurring_parent_id=assignment.recurring_parent_id,
        created_at=assignment.created_at,
        updated_at=assignment.updated_at,
        representative=assignment.representative,
        doctor=assignment.doctor,
        products=[link.product for link in assignment.products],
        visit_goal=goal_data,
    )


# ============================================================================
# ENDPOINTS DE ASIGNACIONES
# ============================================================================

@router.post("/assignments", response_model=AssignmentDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_assignment(
    assignment_data: AssignmentCreate,
    response: Response,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_manager)
):
    """
    Crear asignación representante → médico
    Si el par ya existe se actualiza (200) en lugar de fallar
    """
    assignment, created = AssignmentManager(db).create_or_update_assignment(actor, assignment_data)

    if created:
        background_tasks.add_task(
            notification_client.notify_assignment_created,
            assignment.id,
            assignment.representative.user_id,
            assignment.doctor.full_name
        )
    else:
        response.status_code = status.HTTP_200_OK

    return build_assignment_response(assignment)


@router.get("/assignments", response_model=List[AssignmentDetailResponse])
async def list_assignments(
    representative_id: Optional[int] = Query(None, description="Filtrar por representante (solo gerentes)"),
    doctor_id: Optional[int] = Query(None, description="Filtrar por médico"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """
    Listar asignaciones
    Un representante solo ve las suyas
    """
    representative_id = scope_representative(actor, representative_id)
    assignments = AssignmentManager(db).list_assignments(representative_id, doctor_id, skip, limit)
    return [build_assignment_response(assignment) for assignment in assignments]


@router.get("/assignments/stats", response_model=AssignmentStatsResponse)
async def get_assignment_stats(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_manager)
):
    """Contadores para el dashboard"""
    return AssignmentStatsResponse(**AssignmentManager(db).get_stats())


@router.get("/assignments/calendar", response_model=WeeklyCalendarResponse)
async def get_weekly_calendar(
    week_start: Optional[date] = Query(None, description="Primer día de la semana (por defecto, el lunes actual)"),
    representative_id: Optional[int] = Query(None, description="Filtrar por representante (solo gerentes)"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Visitas previstas en los 7 días desde week_start"""
    if week_start is None:
        today = date.today()
        week_start = today - timedelta(days=today.weekday())

    representative_id = scope_representative(actor, representative_id)
    return AssignmentManager(db).get_weekly_calendar(week_start, representative_id)


@router.get("/assignments/{assignment_id}", response_model=AssignmentDetailResponse)
async def get_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Obtener asignación por ID"""
    assignment = AssignmentManager(db).get_assignment(assignment_id)
    ensure_can_read(actor, assignment.representative_id)
    return build_assignment_response(assignment)


@router.put("/assignments/{assignment_id}", response_model=AssignmentDetailResponse)
async def update_assignment(
    assignment_id: int,
    assignment_data: AssignmentUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_manager)
):
    """
    Actualizar asignación
    Solo se modifican los campos enviados; product_ids reemplaza todos los productos
    """
    assignment = AssignmentManager(db).update_assignment(actor, assignment_id, assignment_data)
    return build_assignment_response(assignment)


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_manager)
):
    """Eliminar asignación (la meta y los productos se eliminan en cascada)"""
    AssignmentManager(db).delete_assignment(actor, assignment_id)
    return None


@router.get("/doctors/available", response_model=List[DoctorSummary])
async def get_available_doctors(
    representative_id: Optional[int] = Query(None, description="Excluir médicos ya asignados a este representante"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_manager)
):
    """Médicos disponibles para asignar"""
    return AssignmentManager(db).get_available_doctors(representative_id)
