"""
Errores de dominio del servicio de visitas
Son HTTPException para que FastAPI los traduzca igual que el resto de errores HTTP
"""
from fastapi import HTTPException, status


class InvalidInputError(HTTPException):
    """Dato requerido ausente o inválido (se rechaza antes de escribir)"""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class PermissionDeniedError(HTTPException):
    """El actor no tiene el rol o la propiedad requerida"""

    def __init__(self, detail: str = "No tienes permisos para realizar esta acción"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    """Recurso inexistente"""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """Violación de unicidad o de una regla de estado"""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class DependencyError(HTTPException):
    """La base de datos u otro servicio no respondió correctamente"""

    def __init__(self, detail: str = "Error de comunicación con la base de datos"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
