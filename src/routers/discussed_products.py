"""
Router de Productos Discutidos
Selección de productos tratados en cada visita (visit_id = ID de la reunión)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ..models import get_db
from ..schemas import (
    DiscussedProductsUpdate, DiscussedProductIdsResponse, ProductForSelection,
    DiscussedProductDetailed, DiscussedSummaryRequest, DiscussedSummaryResponse
)
from ..services import DiscussionLedger
from ..services.access import ensure_can_read, scope_representative
from ..utils import Actor, get_actor

router = APIRouter()


@router.get("/representatives/{representative_id}/available-products", response_model=List[ProductForSelection])
async def get_available_products(
    representative_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """
    Catálogo permitido del representante
    Sin marcas asignadas la lista es vacía
    """
    ensure_can_read(actor, representative_id)
    products = DiscussionLedger(db).get_available_products(representative_id)
    return [
        ProductForSelection(
            id=product.id,
            name=product.name,
            brand_id=product.brand_id,
            brand_name=product.brand_name or "",
            description=product.description
        )
        for product in products
    ]


@router.get("/visits/{visit_id}/discussed-products", response_model=DiscussedProductIdsResponse)
async def get_discussed_products(
    visit_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """IDs de los productos discutidos en la visita"""
    ledger = DiscussionLedger(db)
    visit = ledger.get_visit(visit_id)
    ensure_can_read(actor, visit.representative_id)
    return DiscussedProductIdsResponse(visit_id=visit_id, product_ids=ledger.get_discussed_product_ids(visit_id))


@router.get("/visits/{visit_id}/discussed-products/detailed", response_model=List[DiscussedProductDetailed])
async def get_discussed_products_detailed(
    visit_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Productos discutidos con datos de marca, visita, representante y médico"""
    ledger = DiscussionLedger(db)
    visit = ledger.get_visit(visit_id)
    ensure_can_read(actor, visit.representative_id)
    return ledger.get_detailed(visit_id)


@router.put("/visits/{visit_id}/discussed-products", response_model=DiscussedProductIdsResponse)
async def replace_discussed_products(
    visit_id: int,
    update_data: DiscussedProductsUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """
    Reemplazar la selección completa
    Una lista vacía limpia la selección
    """
    product_ids = DiscussionLedger(db).replace_discussed_products(actor, visit_id, update_data.product_ids)
    return DiscussedProductIdsResponse(visit_id=visit_id, product_ids=product_ids)


@router.post("/visits/{visit_id}/discussed-products/{product_id}", response_model=DiscussedProductIdsResponse)
async def add_discussed_product(
    visit_id: int,
    product_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Agregar un producto a la selección (si ya estaba no cambia nada)"""
    ledger = DiscussionLedger(db)
    ledger.add_discussed_product(actor, visit_id, product_id)
    return DiscussedProductIdsResponse(visit_id=visit_id, product_ids=ledger.get_discussed_product_ids(visit_id))


@router.delete("/visits/{visit_id}/discussed-products/{product_id}", response_model=DiscussedProductIdsResponse)
async def remove_discussed_product(
    visit_id: int,
    product_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Quitar un producto de la selección"""
    ledger = DiscussionLedger(db)
    ledger.remove_discussed_product(actor, visit_id, product_id)
    return DiscussedProductIdsResponse(visit_id=visit_id, product_ids=ledger.get_discussed_product_ids(visit_id))


@router.post("/discussed-products/summary", response_model=DiscussedSummaryResponse)
async def get_discussed_products_summary(
    summary_data: DiscussedSummaryRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor)
):
    """Resumen 'Nombre (descripción)' de varias visitas, para listados e informes"""
    representative_id = scope_representative(actor)
    summary = DiscussionLedger(db).get_summary(summary_data.visit_ids, representative_id)
    return DiscussedSummaryResponse(summary=summary)
