"""
Cliente HTTP para comunicarse con el microservicio de Notificaciones
"""
import httpx
from typing import Optional, Dict, Any
import logging
from ..config import settings

logger = logging.getLogger(__name__)


class NotificationClient:
    """
    Cliente para enviar avisos al microservicio de Notificaciones
    Los avisos son best-effort: nunca lanzan excepción
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.MS_NOTIFICATIONS_URL).rstrip('/')
        self.timeout = timeout or settings.NOTIFICATIONS_TIMEOUT

    async def send(self, payload: Dict[str, Any]) -> bool:
        """
        Enviar una notificación

        Returns:
            True si el microservicio la aceptó, False en caso contrario
        """
        url = f"{self.base_url}/api/v1/notifications"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload)

                if response.status_code in (200, 201, 202):
                    logger.info(f"Notificación '{payload.get('type')}' enviada")
                    return True

                logger.warning(
                    f"Notificación '{payload.get('type')}' rechazada: {response.status_code} - {response.text}"
                )
                return False

        except httpx.TimeoutException:
            logger.warning(f"Timeout al enviar notificación a {url}")
            return False
        except httpx.RequestError as e:
            logger.warning(f"Error de conexión al enviar notificación a {url}: {str(e)}")
            return False

    async def notify_meeting_postponed(
        self,
        manager_id: int,
        manager_name: str,
        meeting_id: int,
        reason: str,
        representative_name: str,
        doctor_name: str
    ) -> bool:
        """Avisar al gerente que una reunión fue aplazada"""
        return await self.send({
            "type": "meeting_postponed",
            "recipient_id": manager_id,
            "title": "Reunión aplazada",
            "message": (
                f"Hola {manager_name}: {representative_name} aplazó la reunión #{meeting_id} "
                f"con {doctor_name}. Motivo: {reason}"
            ),
            "data": {
                "meeting_id": meeting_id,
                "reason": reason,
            },
        })

    async def notify_assignment_created(
        self,
        assignment_id: int,
        representative_user_id: Optional[int],
        doctor_name: str
    ) -> bool:
        """Avisar al representante de una nueva asignación"""
        if not representative_user_id:
            logger.info(f"Asignación {assignment_id}: el representante no tiene usuario; sin aviso")
            return False

        return await self.send({
            "type": "assignment_created",
            "recipient_id": representative_user_id,
            "title": "Nueva asignación",
            "message": f"Se te asignó el médico {doctor_name}",
            "data": {
                "assignment_id": assignment_id,
            },
        })


# Instancia global del cliente
notification_client = NotificationClient()
