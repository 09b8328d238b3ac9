"""
Router de Reuniones (Meetings)
Inicio, aplazamiento y cierre de visitas del representante
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ..models import get_db, Meeting
from ..schemas import (
    MeetingStartRequest, MeetingPostponeRequest, MeetingEndRequest,
    MeetingProductCreate, MeetingProductUpdate, MeetingProductResponse,
    MeetingDetailResponse, MeetingListResponse, MeetingStatsResponse,
    MeetingProductsPartition
)
from ..services import MeetingLifecycle
from ..clients import notification_client
from ..utils import Actor, get_actor

router = APIRouter()


def build_meeting_response(meeting: Meeting) -> MeetingDetailResponse:
    """Reunión + asignación + médico + representante + productos"""
    return MeetingDetailResponse.model_validate(meeting)


# ============================================================================
# CICLO DE VIDA
# ============================================================================

@router.post("/meetings/start", response_model=MeetingDetailResponse, status_code=status.HTTP_201_CREATED)
async def start_meeting(
    meeting_data: MeetingStartRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """
    Iniciar reunión con un médico asignado
    Falla con 409 si ya hay una reunión en curso o completada para esa asignación
    """
    meeting = MeetingLifecycle(db).start(
        actor,
        meeting_data.assignment_id,
        meeting_data.doctor_id,
        meeting_data.representative_id
    )
    return build_meeting_response(meeting)


@router.patch("/meetings/{meeting_id}/postpone", response_model=MeetingDetailResponse)
async def postpone_meeting(
    meeting_id: int,
    postpone_data: MeetingPostponeRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """
    Aplazar reunión en curso
    Se avisa al gerente del representante (best-effort)
    """
    lifecycle = MeetingLifecycle(db)
    meeting = lifecycle.postpone(actor, meeting_id, postpone_data.reason)

    notice = lifecycle.postpone_notice(meeting, meeting.notes)
    if notice:
        background_tasks.add_task(notification_client.notify_meeting_postponed, **notice)

    return build_meeting_response(meeting)


@router.patch("/meetings/{meeting_id}/end", response_model=MeetingDetailResponse)
async def end_meeting(
    meeting_id: int,
    end_data: MeetingEndRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Finalizar reunión en curso"""
    meeting = MeetingLifecycle(db).end(actor, meeting_id, end_data.notes)
    return build_meeting_response(meeting)


# ============================================================================
# LECTURAS
# ============================================================================

@router.get("/meetings", response_model=MeetingListResponse)
async def list_meetings(
    status_filter: Optional[str] = Query(None, description="Filtrar por estado"),
    representative_id: Optional[int] = Query(None, description="Filtrar por representante (solo gerentes)"),
    doctor_id: Optional[int] = Query(None, description="Filtrar por médico"),
    assignment_id: Optional[int] = Query(None, description="Filtrar por asignación"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """
    Listar reuniones
    Un representante solo ve las suyas; gerentes ven todas
    """
    meetings, counts = MeetingLifecycle(db).list_meetings(
        actor,
        representative_id=representative_id,
        doctor_id=doctor_id,
        assignment_id=assignment_id,
        status=status_filter,
        skip=skip,
        limit=limit
    )

    return MeetingListResponse(
        meetings=[build_meeting_response(meeting) for meeting in meetings],
        total=counts["total"],
        in_progress=counts["in_progress"],
        completed=counts["completed"],
        postponed=counts["postponed"],
        cancelled=counts["cancelled"]
    )


@router.get("/meetings/active", response_model=List[MeetingDetailResponse])
async def list_active_meetings(
    representative_id: Optional[int] = Query(None, description="Filtrar por representante (solo gerentes)"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Reuniones en curso, de la más antigua a la más reciente"""
    meetings = MeetingLifecycle(db).get_active_meetings(actor, representative_id)
    return [build_meeting_response(meeting) for meeting in meetings]


@router.get("/meetings/stats", response_model=MeetingStatsResponse)
async def get_meeting_stats(
    representative_id: Optional[int] = Query(None, description="Filtrar por representante (solo gerentes)"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Conteo de reuniones por estado"""
    return MeetingStatsResponse(**MeetingLifecycle(db).get_stats(actor, representative_id))


@router.get("/meetings/{meeting_id}", response_model=MeetingDetailResponse)
async def get_meeting(
    meeting_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Obtener reunión por ID"""
    return build_meeting_response(MeetingLifecycle(db).get_meeting_for(actor, meeting_id))


# ============================================================================
# PRODUCTOS DE LA REUNIÓN
# ============================================================================

@router.get("/meetings/{meeting_id}/available-products", response_model=MeetingProductsPartition)
async def get_meeting_available_products(
    meeting_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """
    Productos del representante para la reunión
    Separados en prioritarios (según la especialización del médico) y otros
    """
    return MeetingLifecycle(db).products_for_meeting(actor, meeting_id)


@router.post("/meetings/{meeting_id}/products", response_model=MeetingProductResponse, status_code=status.HTTP_201_CREATED)
async def add_meeting_product(
    meeting_id: int,
    product_data: MeetingProductCreate,
    response: Response,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Registrar producto en la reunión (si ya estaba, se devuelve el existente con 200)"""
    row, created = MeetingLifecycle(db).add_product(
        actor,
        meeting_id,
        product_data.product_id,
        product_data.discussed,
        product_data.notes
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return MeetingProductResponse.model_validate(row)


@router.patch("/meetings/{meeting_id}/products/{meeting_product_id}", response_model=MeetingProductResponse)
async def update_meeting_product(
    meeting_id: int,
    meeting_product_id: int,
    product_data: MeetingProductUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Actualizar producto de la reunión (solo los campos enviados)"""
    row = MeetingLifecycle(db).update_product(
        actor,
        meeting_id,
        meeting_product_id,
        product_data.model_dump(exclude_unset=True)
    )
    return MeetingProductResponse.model_validate(row)


@router.delete("/meetings/{meeting_id}/products/{meeting_product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_meeting_product(
    meeting_id: int,
    meeting_product_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Quitar producto de la reunión"""
    MeetingLifecycle(db).remove_product(actor, meeting_id, meeting_product_id)
    return None
