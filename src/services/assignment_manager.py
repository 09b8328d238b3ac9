"""
Gestor de asignaciones representante → médico

Una asignación por par (representative_id, doctor_id): crear sobre un par
existente se convierte en actualización. El índice único de la tabla es el
respaldo ante peticiones concurrentes.
"""
import logging
from datetime import date, time, timedelta
from typing import Dict, List, Optional, Tuple

from fastapi import HTTPException
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..models import Assignment, AssignmentProduct, VisitGoal, Representative, Doctor, Product
from ..schemas import AssignmentCreate, AssignmentUpdate, WeeklySeriesCreate, WeeklySeriesUpdate
from ..utils.auth import Actor
from ..utils.errors import InvalidInputError, NotFoundError, ConflictError
from ..utils.transactions import atomic
from .access import ensure_manager
from .recurrence import (
    WEEKDAY_NAMES, expand, first_occurrence, in_window, normalize_visit_days, weekday_name
)

logger = logging.getLogger(__name__)

GOAL_FIELDS = ("visits_per_week", "start_date", "recurring_weeks")


class AssignmentManager:
    """Servicio de asignaciones, productos vinculados y series semanales"""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------

    def get_assignment(self, assignment_id: int) -> Assignment:
        assignment = self.db.get(Assignment, assignment_id)
        if not assignment:
            raise NotFoundError("Asignación no encontrada")
        return assignment

    def find_by_natural_key(self, representative_id: int, doctor_id: int) -> Optional[Assignment]:
        return self.db.query(Assignment).filter(
            Assignment.representative_id == representative_id,
            Assignment.doctor_id == doctor_id
        ).first()

    def list_assignments(
        self,
        representative_id: Optional[int] = None,
        doctor_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Assignment]:
        query = self.db.query(Assignment)

        if representative_id:
            query = query.filter(Assignment.representative_id == representative_id)
        if doctor_id:
            query = query.filter(Assignment.doctor_id == doctor_id)

        return query.order_by(Assignment.created_at.desc(), Assignment.id.desc()).offset(skip).limit(limit).all()

    def get_available_doctors(self, representative_id: Optional[int] = None) -> List[Doctor]:
        """Médicos que aún no están asignados al representante"""
        query = self.db.query(Doctor)

        if representative_id:
            assigned = self.db.query(Assignment.doctor_id).filter(
                Assignment.representative_id == representative_id
            )
            query = query.filter(Doctor.id.notin_(assigned))

        return query.order_by(Doctor.last_name.asc(), Doctor.first_name.asc()).all()

    def get_stats(self) -> Dict[str, int]:
        total = self.db.query(func.count(Assignment.id)).scalar() or 0
        with_goals = self.db.query(func.count(VisitGoal.id)).scalar() or 0
        reps = self.db.query(func.count(func.distinct(Assignment.representative_id))).scalar() or 0
        doctors = self.db.query(func.count(func.distinct(Assignment.doctor_id))).scalar() or 0

        return {
            "total_assignments": total,
            "assignments_with_goals": with_goals,
            "active_representatives": reps,
            "assigned_doctors": doctors,
        }

    def get_weekly_calendar(self, week_start: date, representative_id: Optional[int] = None) -> Dict:
        """Visitas previstas en los 7 días desde week_start, según días y ventana"""
        query = self.db.query(Assignment)
        if representative_id:
            query = query.filter(Assignment.representative_id == representative_id)
        assignments = query.order_by(Assignment.start_time.asc(), Assignment.id.asc()).all()

        days = []
        total = 0
        for offset in range(7):
            day = week_start + timedelta(days=offset)
            entries = []
            for assignment in assignments:
                goal = assignment.visit_goal
                if not in_window(
                    day,
                    assignment.visit_days,
                    goal.start_date if goal else None,
                    goal.recurring_weeks if goal else None
                ):
                    continue
                entries.append({
                    "assignment_id": assignment.id,
                    "representative_id": assignment.representative_id,
                    "representative_name": assignment.representative.full_name if assignment.representative else None,
                    "doctor_id": assignment.doctor_id,
                    "doctor_name": assignment.doctor.full_name if assignment.doctor else None,
                    "start_time": assignment.start_time,
                    "end_time": assignment.end_time,
                })
            total += len(entries)
            days.append({"day": day, "weekday": WEEKDAY_NAMES[day.weekday()], "entries": entries})

        return {
            "week_start": week_start,
            "week_end": week_start + timedelta(days=6),
            "days": days,
            "total_entries": total,
        }

    # ------------------------------------------------------------------
    # Escrituras
    # ------------------------------------------------------------------

    def create_or_update_assignment(self, actor: Actor, data: AssignmentCreate) -> Tuple[Assignment, bool]:
        """
        Crea la asignación o, si el par ya existe, la actualiza

        Returns:
            (asignación, True si se creó)
        """
        ensure_manager(actor)

        if not data.representative_id or not data.doctor_id:
            raise InvalidInputError("representative_id y doctor_id son requeridos")

        visit_days = normalize_visit_days(data.visit_days)
        self._validate_window(data.recurring_weeks)
        self._get_representative(data.representative_id)
        self._get_doctor(data.doctor_id)
        product_ids = self._validate_products(data.product_ids)

        values = {
            "visit_days": visit_days,
            "start_time": data.start_time,
            "end_time": data.end_time,
            "assigned_by": actor.user_id,
        }
        if data.notes is not None:
            values["notes"] = data.notes

        goal_changes = None
        if data.visits_per_week is not None:
            goal_changes = {
                "visits_per_week": data.visits_per_week,
                "start_date": data.start_date,
                "recurring_weeks": data.recurring_weeks,
            }

        return self._upsert(data.representative_id, data.doctor_id, values, product_ids, goal_changes)

    def update_assignment(self, actor: Actor, assignment_id: int, data: AssignmentUpdate) -> Assignment:
        """
        Actualiza una asignación por ID
        Solo se tocan los campos presentes en el payload
        """
        ensure_manager(actor)
        assignment = self.get_assignment(assignment_id)
        changes = data.model_dump(exclude_unset=True)

        values = {}
        for key in ("visit_days", "start_time", "end_time"):
            if key in changes and changes[key] is None:
                raise InvalidInputError(f"{key} no puede ser nulo")
        if "visit_days" in changes:
            values["visit_days"] = normalize_visit_days(changes["visit_days"])
        if "start_time" in changes:
            values["start_time"] = changes["start_time"]
        if "end_time" in changes:
            values["end_time"] = changes["end_time"]
        if "notes" in changes:
            values["notes"] = changes["notes"]

        self._check_times(
            values.get("start_time", assignment.start_time),
            values.get("end_time", assignment.end_time)
        )

        product_ids = None
        if "product_ids" in changes:
            product_ids = self._validate_products(changes["product_ids"] or [])

        goal_changes = {key: changes[key] for key in GOAL_FIELDS if key in changes}
        self._validate_window(goal_changes.get("recurring_weeks"))
        if (
            assignment.visit_goal is None
            and not goal_changes.get("visits_per_week")
            and ("start_date" in goal_changes or "recurring_weeks" in goal_changes)
        ):
            raise InvalidInputError("La asignación no tiene meta de visitas; indique visits_per_week")

        try:
            with atomic(self.db, "actualizar asignación"):
                for key, value in values.items():
                    setattr(assignment, key, value)
                if product_ids is not None:
                    self._replace_products(assignment, product_ids)
                if goal_changes:
                    self._apply_goal(assignment, goal_changes)
        except IntegrityError:
            raise ConflictError("La actualización entra en conflicto con otra asignación")

        logger.info(f"Asignación {assignment_id} actualizada: campos={sorted(changes)}")
        return assignment

    def delete_assignment(self, actor: Actor, assignment_id: int) -> None:
        """Elimina la asignación; la meta y los productos se eliminan en cascada"""
        ensure_manager(actor)
        assignment = self.get_assignment(assignment_id)

        with atomic(self.db, "eliminar asignación"):
            self.db.delete(assignment)

        logger.info(f"Asignación {assignment_id} eliminada")

    # ------------------------------------------------------------------
    # Series semanales
    # ------------------------------------------------------------------

    def create_weekly_series(self, actor: Actor, data: WeeklySeriesCreate) -> Dict:
        """
        Crea (o actualiza) una asignación por médico con ventana semanal

        Tolerante a fallos parciales: si un médico falla se registra el error
        en su resultado y se continúa con los demás.
        """
        ensure_manager(actor)

        dates = expand(data.start_date, data.weekday, data.recurring_weeks)
        self._validate_window(data.recurring_weeks)
        self._get_representative(data.representative_id)
        product_ids = self._validate_products(data.product_ids)

        goal_start = first_occurrence(data.start_date, data.weekday)
        values = {
            "visit_days": [weekday_name(data.weekday)],
            "start_time": data.start_time,
            "end_time": data.end_time,
            "recurring_type": "weekly",
            "assigned_by": actor.user_id,
        }
        if data.notes is not None:
            values["notes"] = data.notes
        goal_changes = {
            "visits_per_week": 1,
            "start_date": goal_start,
            "recurring_weeks": data.recurring_weeks or None,
        }

        items = []
        created_ids = []
        for doctor_id in dict.fromkeys(data.doctor_ids):
            try:
                self._get_doctor(doctor_id)
                assignment, _ = self._upsert(data.representative_id, doctor_id, dict(values), product_ids, dict(goal_changes))
                created_ids.append(assignment.id)
                items.append({
                    "doctor_id": doctor_id,
                    "success": True,
                    "assignment_id": assignment.id,
                    "dates": dates,
                })
            except HTTPException as e:
                logger.warning(
                    f"⚠️  Serie semanal: falló el médico {doctor_id} "
                    f"(representante {data.representative_id}): {e.detail}"
                )
                items.append({
                    "doctor_id": doctor_id,
                    "success": False,
                    "error": str(e.detail),
                })

        parent_id = created_ids[0] if created_ids else None
        if parent_id is not None:
            with atomic(self.db, "vincular serie semanal"):
                self._detach_previous_series(created_ids)
                for assignment_id in created_ids:
                    member = self.db.get(Assignment, assignment_id)
                    member.recurring_type = "weekly"
                    member.recurring_parent_id = None if assignment_id == parent_id else parent_id

        failed = len([item for item in items if not item["success"]])
        logger.info(
            f"Serie semanal {parent_id}: {len(created_ids)} asignaciones, {failed} fallidas, "
            f"{len(dates)} fechas"
        )
        return {
            "parent_id": parent_id,
            "items": items,
            "created": len(created_ids),
            "failed": failed,
        }

    def get_series_members(self, parent_id: int) -> List[Assignment]:
        """Todas las filas con id = parent o recurring_parent_id = parent"""
        return self.db.query(Assignment).filter(
            or_(Assignment.id == parent_id, Assignment.recurring_parent_id == parent_id)
        ).order_by(Assignment.id.asc()).all()

    def get_recurring_series(self) -> List[Tuple[Assignment, int]]:
        """Cabezas de serie con su número de miembros"""
        heads = self.db.query(Assignment).filter(
            Assignment.recurring_type == "weekly",
            Assignment.recurring_parent_id.is_(None)
        ).order_by(Assignment.created_at.desc(), Assignment.id.desc()).all()

        result = []
        for head in heads:
            children = self.db.query(func.count(Assignment.id)).filter(
                Assignment.recurring_parent_id == head.id
            ).scalar() or 0
            result.append((head, children + 1))
        return result

    def update_weekly_series(self, actor: Actor, parent_id: int, data: WeeklySeriesUpdate) -> List[Assignment]:
        """Aplica la misma actualización a todos los miembros de la serie"""
        ensure_manager(actor)
        members = self.get_series_members(parent_id)
        if not members:
            raise NotFoundError("No se encontraron asignaciones en la serie")

        changes = data.model_dump(exclude_unset=True)
        for key in ("start_time", "end_time"):
            if key in changes and changes[key] is None:
                raise InvalidInputError(f"{key} no puede ser nulo")
        for member in members:
            self._check_times(
                changes.get("start_time", member.start_time),
                changes.get("end_time", member.end_time)
            )

        product_ids = None
        if "product_ids" in changes:
            product_ids = self._validate_products(changes["product_ids"] or [])
        self._validate_window(changes.get("recurring_weeks"))

        try:
            with atomic(self.db, "actualizar serie semanal"):
                for member in members:
                    for key in ("start_time", "end_time", "notes"):
                        if key in changes:
                            setattr(member, key, changes[key])
                    if product_ids is not None:
                        self._replace_products(member, product_ids)
                    if "recurring_weeks" in changes:
                        self._apply_series_window(member, changes["recurring_weeks"] or None)
        except IntegrityError:
            raise ConflictError("La actualización de la serie entra en conflicto con datos existentes")

        logger.info(f"Serie {parent_id} actualizada: {len(members)} asignaciones")
        return members

    def delete_weekly_series(self, actor: Actor, parent_id: int) -> int:
        """Elimina todos los miembros de la serie; devuelve cuántos se eliminaron"""
        ensure_manager(actor)
        members = self.get_series_members(parent_id)
        if not members:
            raise NotFoundError("No se encontraron asignaciones en la serie")

        with atomic(self.db, "eliminar serie semanal"):
            for member in members:
                self.db.delete(member)

        logger.info(f"Serie {parent_id} eliminada: {len(members)} asignaciones")
        return len(members)

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------

    def _upsert(
        self,
        representative_id: int,
        doctor_id: int,
        values: Dict,
        product_ids: List[int],
        goal_changes: Optional[Dict]
    ) -> Tuple[Assignment, bool]:
        existing = self.find_by_natural_key(representative_id, doctor_id)

        if existing is None:
            try:
                with atomic(self.db, "crear asignación"):
                    assignment = Assignment(
                        representative_id=representative_id,
                        doctor_id=doctor_id,
                        **values
                    )
                    self.db.add(assignment)
                    self.db.flush()
                    self._replace_products(assignment, product_ids)
                    if goal_changes and goal_changes.get("visits_per_week"):
                        self._apply_goal(assignment, goal_changes)
                logger.info(
                    f"Asignación {assignment.id} creada: representante {representative_id} → médico {doctor_id}"
                )
                return assignment, True
            except IntegrityError:
                # Otra petición insertó el mismo par entre la búsqueda y el insert
                logger.warning(
                    f"Asignación duplicada para representante {representative_id} y médico {doctor_id}; "
                    f"se actualiza la existente"
                )
                existing = self.find_by_natural_key(representative_id, doctor_id)
                if existing is None:
                    raise ConflictError("No se pudo crear la asignación por un conflicto de datos")

        try:
            with atomic(self.db, "actualizar asignación existente"):
                for key, value in values.items():
                    setattr(existing, key, value)
                self._replace_products(existing, product_ids)
                if goal_changes is not None:
                    self._apply_goal(existing, goal_changes)
        except IntegrityError:
            raise ConflictError("La asignación entra en conflicto con datos existentes")

        logger.info(
            f"Asignación {existing.id} actualizada por par: representante {representative_id} → médico {doctor_id}"
        )
        return existing, False

    def _detach_previous_series(self, member_ids: List[int]) -> None:
        """
        Separa de la nueva serie a los hijos de series anteriores

        Si una asignación reutilizada ya era cabeza de otra serie, sus hijos que
        no forman parte de la nueva serie pasan a tener como cabeza al primero
        de ellos.
        """
        orphans = self.db.query(Assignment).filter(
            Assignment.recurring_parent_id.in_(member_ids),
            Assignment.id.notin_(member_ids)
        ).order_by(Assignment.id.asc()).all()

        new_heads = {}
        for orphan in orphans:
            old_parent_id = orphan.recurring_parent_id
            if old_parent_id not in new_heads:
                new_heads[old_parent_id] = orphan.id
                orphan.recurring_parent_id = None
            else:
                orphan.recurring_parent_id = new_heads[old_parent_id]

        for old_parent_id, head_id in new_heads.items():
            logger.info(f"Serie {old_parent_id}: la asignación {head_id} pasa a ser cabeza de los miembros restantes")
        self.db.flush()

    def _apply_series_window(self, member: Assignment, recurring_weeks: Optional[int]) -> None:
        """Cambia la ventana de un miembro; sin meta se crea una de 1 visita por semana"""
        if member.visit_goal is not None:
            member.visit_goal.recurring_weeks = recurring_weeks
            return
        if recurring_weeks is None:
            return

        weekday = WEEKDAY_NAMES.index(member.visit_days[0]) if member.visit_days else date.today().weekday()
        member.visit_goal = VisitGoal(
            visits_per_week=1,
            start_date=first_occurrence(date.today(), weekday),
            recurring_weeks=recurring_weeks
        )
        logger.info(f"Asignación {member.id}: meta semanal creada con {recurring_weeks} semanas")

    def _replace_products(self, assignment: Assignment, product_ids: List[int]) -> None:
        """Reemplaza todos los productos (borrar y luego insertar, en la misma transacción)"""
        assignment.products.clear()
        self.db.flush()
        for product_id in product_ids:
            assignment.products.append(AssignmentProduct(product_id=product_id))
        self.db.flush()

    def _apply_goal(self, assignment: Assignment, changes: Dict) -> None:
        """
        Inserta, actualiza o elimina la meta de visitas

        visits_per_week 0/None elimina la meta
        """
        goal = assignment.visit_goal

        if "visits_per_week" in changes and not changes["visits_per_week"]:
            if goal is not None:
                assignment.visit_goal = None
                self.db.flush()
            return

        if goal is None:
            if not changes.get("visits_per_week"):
                return
            goal = VisitGoal(visits_per_week=changes["visits_per_week"])
            assignment.visit_goal = goal

        for key in GOAL_FIELDS:
            if key in changes:
                setattr(goal, key, changes[key])
        self.db.flush()

    def _validate_window(self, recurring_weeks: Optional[int]) -> None:
        if recurring_weeks is None:
            return
        if recurring_weeks < 0:
            raise InvalidInputError("El número de semanas no puede ser negativo")
        if recurring_weeks > settings.MAX_RECURRING_WEEKS:
            raise InvalidInputError(
                f"La recurrencia no puede superar {settings.MAX_RECURRING_WEEKS} semanas"
            )

    def _validate_products(self, product_ids: List[int]) -> List[int]:
        """Quita duplicados (conservando el orden) y verifica que existan"""
        unique_ids = list(dict.fromkeys(product_ids or []))
        if not unique_ids:
            return []

        found = {
            row.id for row in self.db.query(Product.id).filter(Product.id.in_(unique_ids)).all()
        }
        missing = [product_id for product_id in unique_ids if product_id not in found]
        if missing:
            raise NotFoundError(f"Productos no encontrados: {missing}")

        if len(unique_ids) > settings.MAX_PRODUCTS_PER_ASSIGNMENT:
            logger.warning(
                f"⚠️  WARNING: asignación con {len(unique_ids)} productos supera el recomendado "
                f"de {settings.MAX_PRODUCTS_PER_ASSIGNMENT}"
            )
        return unique_ids

    def _get_representative(self, representative_id: int) -> Representative:
        representative = self.db.get(Representative, representative_id)
        if not representative:
            raise NotFoundError("Representante no encontrado")
        return representative

    def _get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.db.get(Doctor, doctor_id)
        if not doctor:
            raise NotFoundError(f"Médico {doctor_id} no encontrado")
        return doctor

    @staticmethod
    def _check_times(start_time: time, end_time: time) -> None:
        if end_time <= start_time:
            raise InvalidInputError("end_time debe ser posterior a start_time")
