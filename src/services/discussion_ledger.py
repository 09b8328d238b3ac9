"""
Libro de productos discutidos por visita
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import Meeting, DiscussedProduct, Product, Representative, RepresentativeBrand
from ..utils.auth import Actor
from ..utils.errors import InvalidInputError, NotFoundError
from ..utils.transactions import atomic
from .access import ensure_can_read

logger = logging.getLogger(__name__)


def product_label(product: Product) -> str:
    """'Nombre (descripción)' o solo el nombre"""
    if product.description:
        return f"{product.name} ({product.description})"
    return product.name


class DiscussionLedger:
    """Selección de productos discutidos en cada visita (visit_id = meetings.id)"""

    def __init__(self, db: Session):
        self.db = db

    def get_available_products(self, representative_id: int) -> List[Product]:
        """Catálogo permitido: productos de las marcas asignadas al representante"""
        representative = self.db.get(Representative, representative_id)
        if not representative:
            raise NotFoundError("Representante no encontrado")

        brand_ids = self.db.query(RepresentativeBrand.brand_id).filter(
            RepresentativeBrand.representative_id == representative_id
        )
        return self.db.query(Product).filter(
            Product.brand_id.in_(brand_ids)
        ).order_by(Product.name.asc(), Product.id.asc()).all()

    def get_visit(self, visit_id: int) -> Meeting:
        visit = self.db.get(Meeting, visit_id)
        if not visit:
            raise NotFoundError("Visita no encontrada")
        return visit

    def get_discussed_product_ids(self, visit_id: int) -> List[int]:
        visit = self.get_visit(visit_id)
        return [row.product_id for row in visit.discussed_products]

    def replace_discussed_products(self, actor: Actor, visit_id: int, product_ids: List[int]) -> List[int]:
        """
        Reemplaza toda la selección de la visita

        Una lista vacía limpia la selección. Los productos fuera del catálogo
        permitido del representante se rechazan antes de escribir.
        """
        visit = self.get_visit(visit_id)
        ensure_can_read(actor, visit.representative_id)

        unique_ids = self._check_scope(visit, product_ids)

        with atomic(self.db, "guardar productos discutidos"):
            visit.discussed_products.clear()
            self.db.flush()
            for product_id in unique_ids:
                visit.discussed_products.append(DiscussedProduct(product_id=product_id))
            self.db.flush()

        logger.info(f"✅ Visita {visit_id}: {len(unique_ids)} productos discutidos guardados")
        return unique_ids

    def add_discussed_product(self, actor: Actor, visit_id: int, product_id: int) -> bool:
        """Agrega un producto a la selección; si ya estaba no hace nada"""
        visit = self.get_visit(visit_id)
        ensure_can_read(actor, visit.representative_id)
        self._check_scope(visit, [product_id])

        if product_id in [row.product_id for row in visit.discussed_products]:
            return False

        try:
            with atomic(self.db, "agregar producto discutido"):
                visit.discussed_products.append(DiscussedProduct(product_id=product_id))
        except IntegrityError:
            logger.info(f"Producto {product_id} ya registrado en la visita {visit_id}")
            return False

        logger.info(f"✅ Producto {product_id} agregado a la visita {visit_id}")
        return True

    def remove_discussed_product(self, actor: Actor, visit_id: int, product_id: int) -> bool:
        """Quita un producto de la selección; devuelve False si no estaba"""
        visit = self.get_visit(visit_id)
        ensure_can_read(actor, visit.representative_id)

        row = self.db.query(DiscussedProduct).filter(
            DiscussedProduct.visit_id == visit_id,
            DiscussedProduct.product_id == product_id
        ).first()
        if not row:
            return False

        with atomic(self.db, "quitar producto discutido"):
            self.db.delete(row)

        logger.info(f"Producto {product_id} quitado de la visita {visit_id}")
        return True

    def get_detailed(self, visit_id: int) -> List[Dict]:
        """Productos discutidos con datos de producto, marca y visita"""
        visit = self.get_visit(visit_id)

        return [
            {
                "id": row.id,
                "visit_id": visit.id,
                "product_id": row.product_id,
                "created_at": row.created_at,
                "product_name": row.product.name,
                "product_description": row.product.description,
                "brand_name": row.product.brand_name or "",
                "visit_start_time": visit.start_time,
                "visit_status": visit.status,
                "representative_name": visit.representative.full_name if visit.representative else "",
                "doctor_name": visit.doctor.full_name if visit.doctor else "",
            }
            for row in visit.discussed_products
        ]

    def get_summary(self, visit_ids: List[int], representative_id: Optional[int] = None) -> Dict[int, List[str]]:
        """
        visit_id -> etiquetas 'Nombre (descripción)' para varias visitas

        Con representative_id solo se incluyen las visitas de ese representante
        """
        unique_ids = list(dict.fromkeys(visit_ids or []))
        if not unique_ids:
            return {}

        query = self.db.query(DiscussedProduct).filter(DiscussedProduct.visit_id.in_(unique_ids))
        if representative_id:
            query = query.join(Meeting, Meeting.id == DiscussedProduct.visit_id).filter(
                Meeting.representative_id == representative_id
            )
        rows = query.order_by(DiscussedProduct.visit_id.asc(), DiscussedProduct.id.asc()).all()

        summary = {}
        for row in rows:
            summary.setdefault(row.visit_id, []).append(product_label(row.product))
        return summary

    def _check_scope(self, visit: Meeting, product_ids: List[int]) -> List[int]:
        unique_ids = list(dict.fromkeys(product_ids or []))
        if not unique_ids:
            return []

        allowed = {product.id for product in self.get_available_products(visit.representative_id)}
        out_of_scope = [product_id for product_id in unique_ids if product_id not in allowed]
        if out_of_scope:
            raise InvalidInputError(
                f"Productos fuera del catálogo del representante: {out_of_scope}"
            )
        return unique_ids
