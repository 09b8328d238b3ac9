"""
Reglas de acceso sobre el actor explícito
Se evalúan antes de cualquier consulta a la base de datos
"""
from typing import Optional

from ..utils.auth import Actor
from ..utils.errors import PermissionDeniedError


def ensure_manager(actor: Actor) -> None:
    """Solo gerentes y administradores gestionan asignaciones"""
    if actor is None or not actor.is_manager:
        raise PermissionDeniedError("Solo gerentes y administradores pueden gestionar asignaciones")


def ensure_representative(actor: Actor) -> int:
    """
    Solo representantes con perfil vinculado gestionan reuniones

    Returns:
        El ID del representante del actor
    """
    if actor is None or not actor.is_representative:
        raise PermissionDeniedError("Solo los representantes pueden gestionar reuniones")
    if not actor.representative_id:
        raise PermissionDeniedError("No se encontró un representante asociado a tu cuenta")
    return actor.representative_id


def ensure_owner(actor: Actor, representative_id: int) -> None:
    """El representante del actor debe ser el dueño del recurso"""
    owner_id = ensure_representative(actor)
    if owner_id != representative_id:
        raise PermissionDeniedError("El recurso pertenece a otro representante")


def ensure_can_read(actor: Actor, representative_id: int) -> None:
    """Gerentes leen todo; un representante solo lo suyo"""
    if actor is not None and actor.is_manager:
        return
    ensure_owner(actor, representative_id)


def scope_representative(actor: Actor, requested_id: Optional[int] = None) -> Optional[int]:
    """
    Filtro de representante para listados

    - Gerente/Admin: el solicitado (None = todos)
    - Representante: siempre el suyo
    """
    if actor is not None and actor.is_manager:
        return requested_id
    return ensure_representative(actor)
