"""
Ciclo de vida de las reuniones

in_progress → completed | postponed
Una reunión postponed puede reiniciarse con un nuevo start;
completed y cancelled son terminales.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import Assignment, Meeting, MeetingProduct, Product
from ..models.meeting import BLOCKING_STATUSES, MEETING_STATUSES
from ..utils.auth import Actor
from ..utils.errors import ConflictError, InvalidInputError, NotFoundError, PermissionDeniedError
from ..utils.transactions import atomic
from .access import ensure_can_read, ensure_owner, ensure_representative, scope_representative
from .discussion_ledger import DiscussionLedger

logger = logging.getLogger(__name__)


class MeetingLifecycle:
    """Servicio de reuniones y de los productos tratados en ellas"""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Transiciones
    # ------------------------------------------------------------------

    def start(
        self,
        actor: Actor,
        assignment_id: int,
        doctor_id: int,
        representative_id: Optional[int] = None
    ) -> Meeting:
        """
        Inicia una reunión para (asignación, médico)

        Raises:
            ConflictError: si ya existe una reunión in_progress o completed
        """
        own_id = ensure_representative(actor)
        if representative_id is None:
            representative_id = own_id
        elif representative_id != own_id:
            raise PermissionDeniedError("No puedes iniciar reuniones de otro representante")

        assignment = self.db.get(Assignment, assignment_id)
        if not assignment:
            raise NotFoundError("Asignación no encontrada")
        if assignment.representative_id != representative_id:
            raise PermissionDeniedError("La asignación pertenece a otro representante")
        if assignment.doctor_id != doctor_id:
            raise InvalidInputError("El médico no corresponde a la asignación")

        blocking = self.db.query(Meeting).filter(
            Meeting.assignment_id == assignment_id,
            Meeting.doctor_id == doctor_id,
            Meeting.status.in_(BLOCKING_STATUSES)
        ).first()
        if blocking:
            raise ConflictError("La visita con este médico ya está activa o completada")

        try:
            with atomic(self.db, "iniciar reunión"):
                meeting = Meeting(
                    assignment_id=assignment_id,
                    doctor_id=doctor_id,
                    representative_id=representative_id,
                    start_time=datetime.now(timezone.utc),
                    status="in_progress"
                )
                self.db.add(meeting)
        except IntegrityError:
            raise ConflictError("La visita con este médico ya está activa o completada")

        logger.info(
            f"Reunión {meeting.id} iniciada: asignación {assignment_id}, médico {doctor_id}, "
            f"representante {representative_id}"
        )
        return meeting

    def postpone(self, actor: Actor, meeting_id: int, reason: str) -> Meeting:
        """Aplaza una reunión en curso; el motivo es obligatorio"""
        if not reason or not reason.strip():
            raise InvalidInputError("El motivo del aplazamiento es obligatorio")

        meeting = self.get_meeting(meeting_id)
        ensure_owner(actor, meeting.representative_id)
        self._ensure_in_progress(meeting)

        with atomic(self.db, "aplazar reunión"):
            meeting.status = "postponed"
            meeting.notes = reason.strip()

        logger.info(f"Reunión {meeting_id} aplazada: {meeting.notes}")
        return meeting

    def end(self, actor: Actor, meeting_id: int, notes: Optional[str] = None) -> Meeting:
        """Finaliza una reunión en curso"""
        meeting = self.get_meeting(meeting_id)
        ensure_owner(actor, meeting.representative_id)
        self._ensure_in_progress(meeting)

        with atomic(self.db, "finalizar reunión"):
            meeting.status = "completed"
            meeting.end_time = datetime.now(timezone.utc)
            meeting.notes = notes

        logger.info(f"Reunión {meeting_id} finalizada")
        return meeting

    def postpone_notice(self, meeting: Meeting, reason: str) -> Optional[Dict]:
        """
        Datos para avisar al gerente del representante

        Returns:
            None si el representante no tiene gerente o el gerente no tiene usuario
        """
        representative = meeting.representative
        manager = representative.manager if representative else None
        if manager is None:
            logger.info(f"Reunión {meeting.id}: el representante no tiene gerente; sin aviso")
            return None
        if manager.user_id is None:
            logger.warning(
                f"⚠️  Reunión {meeting.id}: el gerente {manager.id} no tiene usuario vinculado; sin aviso"
            )
            return None

        return {
            "manager_id": manager.user_id,
            "manager_name": manager.full_name,
            "meeting_id": meeting.id,
            "reason": reason,
            "representative_name": representative.full_name,
            "doctor_name": meeting.doctor.full_name if meeting.doctor else "",
        }

    # ------------------------------------------------------------------
    # Productos de la reunión
    # ------------------------------------------------------------------

    def add_product(
        self,
        actor: Actor,
        meeting_id: int,
        product_id: int,
        discussed: bool = True,
        notes: Optional[str] = None
    ) -> Tuple[MeetingProduct, bool]:
        """
        Registra un producto en la reunión

        Returns:
            (fila, True si se creó); un duplicado devuelve la fila existente
        """
        meeting = self.get_meeting(meeting_id)
        ensure_owner(actor, meeting.representative_id)

        if not self.db.get(Product, product_id):
            raise NotFoundError("Producto no encontrado")

        existing = self._find_meeting_product(meeting_id, product_id)
        if existing:
            return existing, False

        try:
            with atomic(self.db, "agregar producto a la reunión"):
                row = MeetingProduct(
                    meeting_id=meeting_id,
                    product_id=product_id,
                    discussed=discussed,
                    notes=notes
                )
                self.db.add(row)
        except IntegrityError:
            existing = self._find_meeting_product(meeting_id, product_id)
            if existing is None:
                raise ConflictError("No se pudo registrar el producto en la reunión")
            return existing, False

        logger.info(f"Producto {product_id} registrado en la reunión {meeting_id}")
        return row, True

    def update_product(self, actor: Actor, meeting_id: int, meeting_product_id: int, changes: Dict) -> MeetingProduct:
        """changes solo trae los campos enviados; notes=None limpia las notas"""
        meeting = self.get_meeting(meeting_id)
        ensure_owner(actor, meeting.representative_id)
        row = self._get_meeting_product(meeting_id, meeting_product_id)

        if "discussed" in changes and changes["discussed"] is None:
            raise InvalidInputError("discussed no puede ser nulo")

        with atomic(self.db, "actualizar producto de la reunión"):
            for key in ("discussed", "notes"):
                if key in changes:
                    setattr(row, key, changes[key])

        return row

    def remove_product(self, actor: Actor, meeting_id: int, meeting_product_id: int) -> None:
        meeting = self.get_meeting(meeting_id)
        ensure_owner(actor, meeting.representative_id)
        row = self._get_meeting_product(meeting_id, meeting_product_id)
        product_id = row.product_id

        with atomic(self.db, "quitar producto de la reunión"):
            self.db.delete(row)

        logger.info(f"Producto {product_id} quitado de la reunión {meeting_id}")

    def products_for_meeting(self, actor: Actor, meeting_id: int) -> Dict:
        """
        Catálogo del representante separado en prioritarios y otros

        Prioritario = la especialización del médico está en la lista de
        prioridad del producto. Sin especialización todos van a "otros".
        """
        meeting = self.get_meeting(meeting_id)
        ensure_can_read(actor, meeting.representative_id)

        specialization = meeting.doctor.specialization_name if meeting.doctor else None
        products = DiscussionLedger(self.db).get_available_products(meeting.representative_id)

        priority, other = [], []
        for product in products:
            if specialization and specialization in (product.priority_specializations or []):
                priority.append(product)
            else:
                other.append(product)

        return {
            "meeting_id": meeting.id,
            "doctor_specialization": specialization,
            "priority_products": priority,
            "other_products": other,
        }

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    def get_meeting(self, meeting_id: int) -> Meeting:
        meeting = self.db.get(Meeting, meeting_id)
        if not meeting:
            raise NotFoundError("Reunión no encontrada")
        return meeting

    def get_meeting_for(self, actor: Actor, meeting_id: int) -> Meeting:
        meeting = self.get_meeting(meeting_id)
        ensure_can_read(actor, meeting.representative_id)
        return meeting

    def list_meetings(
        self,
        actor: Actor,
        representative_id: Optional[int] = None,
        doctor_id: Optional[int] = None,
        assignment_id: Optional[int] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[Meeting], Dict[str, int]]:
        """Reuniones filtradas y conteos por estado (sobre el mismo filtro, sin estado)"""
        if status is not None and status not in MEETING_STATUSES:
            raise InvalidInputError(f"Estado inválido: {status}")

        representative_id = scope_representative(actor, representative_id)
        query = self.db.query(Meeting)
        if representative_id:
            query = query.filter(Meeting.representative_id == representative_id)
        if doctor_id:
            query = query.filter(Meeting.doctor_id == doctor_id)
        if assignment_id:
            query = query.filter(Meeting.assignment_id == assignment_id)

        counts = self._count_by_status(query)
        if status:
            query = query.filter(Meeting.status == status)

        meetings = query.order_by(Meeting.created_at.desc(), Meeting.id.desc()).offset(skip).limit(limit).all()
        return meetings, counts

    def get_active_meetings(self, actor: Actor, representative_id: Optional[int] = None) -> List[Meeting]:
        representative_id = scope_representative(actor, representative_id)
        query = self.db.query(Meeting).filter(Meeting.status == "in_progress")
        if representative_id:
            query = query.filter(Meeting.representative_id == representative_id)
        return query.order_by(Meeting.start_time.asc(), Meeting.id.asc()).all()

    def get_stats(self, actor: Actor, representative_id: Optional[int] = None) -> Dict[str, int]:
        representative_id = scope_representative(actor, representative_id)
        query = self.db.query(Meeting)
        if representative_id:
            query = query.filter(Meeting.representative_id == representative_id)
        return self._count_by_status(query)

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    def _count_by_status(self, query) -> Dict[str, int]:
        rows = query.with_entities(Meeting.status, func.count(Meeting.id)).group_by(Meeting.status).all()
        counts = {status: 0 for status in MEETING_STATUSES}
        for status, count in rows:
            counts[status] = count
        counts["total"] = sum(counts[status] for status in MEETING_STATUSES)
        return counts

    @staticmethod
    def _ensure_in_progress(meeting: Meeting) -> None:
        if meeting.status != "in_progress":
            raise ConflictError(f"La reunión no está en curso (estado actual: {meeting.status})")

    def _find_meeting_product(self, meeting_id: int, product_id: int) -> Optional[MeetingProduct]:
        return self.db.query(MeetingProduct).filter(
            MeetingProduct.meeting_id == meeting_id,
            MeetingProduct.product_id == product_id
        ).first()

    def _get_meeting_product(self, meeting_id: int, meeting_product_id: int) -> MeetingProduct:
        row = self.db.query(MeetingProduct).filter(
            MeetingProduct.id == meeting_product_id,
            MeetingProduct.meeting_id == meeting_id
        ).first()
        if not row:
            raise NotFoundError("Producto de la reunión no encontrado")
        return row
