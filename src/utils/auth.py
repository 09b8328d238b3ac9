"""
Utilidades de autenticación JWT
Valida tokens generados por MS-AUTH y construye el actor explícito
que reciben los servicios
"""
from typing import Optional

from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..config import settings
from ..models import get_db, Representative

# HTTP Bearer scheme para el header Authorization (más simple para Swagger)
http_bearer = HTTPBearer(auto_error=False)

# Alias de roles heredados del frontend
ROLE_ALIASES = {
    "SUPER_ADMIN": "ADMIN",
    "REP": "REPRESENTATIVE",
}


class Actor(BaseModel):
    """Quién ejecuta la operación: se pasa explícitamente a cada servicio"""
    user_id: Optional[int] = None
    email: Optional[str] = None
    role: str
    representative_id: Optional[int] = None

    @property
    def is_manager(self) -> bool:
        return self.role in settings.MANAGER_ROLES

    @property
    def is_representative(self) -> bool:
        return self.role == settings.REPRESENTATIVE_ROLE


def normalize_role(role: Optional[str]) -> str:
    """Normaliza el rol a mayúsculas y resuelve alias"""
    role = (role or "").upper()
    return ROLE_ALIASES.get(role, role)


def decode_token(token: str) -> dict:
    """
    Decodifica y valida un token JWT

    Args:
        token: Token JWT a decodificar

    Returns:
        dict: Datos extraídos del token

    Raises:
        HTTPException: Si el token es inválido
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudieron validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        email: str = payload.get("sub")
        role: str = normalize_role(payload.get("role"))
        user_id: int = payload.get("user_id")

        if email is None:
            raise credentials_exception

        return {
            "email": email,
            "role": role,
            "user_id": user_id
        }

    except JWTError:
        raise credentials_exception


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(http_bearer)) -> dict:
    """
    Obtiene el usuario actual desde el token JWT

    Raises:
        HTTPException: Si el token es inválido o no está presente
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token de autenticación requerido",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    user_data = decode_token(token)
    return user_data


def get_representative_by_user(db: Session, user_email: Optional[str], user_id: Optional[int] = None) -> Optional[Representative]:
    """
    Obtener el representante asociado al usuario autenticado
    Busca por user_id (más confiable) o por email (fallback)
    """
    if user_id:
        representative = db.query(Representative).filter(Representative.user_id == user_id).first()
        if representative:
            return representative

    if user_email:
        return db.query(Representative).filter(Representative.email == user_email).first()

    return None


async def get_actor(
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
) -> Actor:
    """Construye el Actor a partir del token (y del representante vinculado, si aplica)"""
    role = current_user.get("role")
    representative_id = None

    if role == settings.REPRESENTATIVE_ROLE:
        representative = get_representative_by_user(
            db,
            current_user.get("email"),
            current_user.get("user_id")
        )
        if representative:
            representative_id = representative.id

    return Actor(
        user_id=current_user.get("user_id"),
        email=current_user.get("email"),
        role=role,
        representative_id=representative_id
    )


async def require_manager(actor: Actor = Depends(get_actor)) -> Actor:
    """
    Verifica que el actor sea gerente o administrador

    Raises:
        HTTPException: Si el actor no tiene rol de gestión
    """
    if not actor.is_manager:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Solo gerentes y administradores pueden gestionar asignaciones"
        )
    return actor
