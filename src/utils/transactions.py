"""
Unidad de trabajo sobre la sesión de SQLAlchemy
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import DependencyError

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session, action: str = "operación"):
    """
    Ejecuta el bloque como una sola transacción

    - Éxito: commit
    - IntegrityError: rollback y se relanza (el llamador decide si es conflicto)
    - Otro error de SQLAlchemy: rollback y DependencyError
    - Cualquier otra excepción: rollback y se relanza
    """
    try:
        yield db
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error de base de datos durante {action}: {str(e)}")
        raise DependencyError(f"Error de base de datos durante {action}")
    except Exception:
        db.rollback()
        raise
