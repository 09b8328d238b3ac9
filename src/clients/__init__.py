"""
Clientes para comunicación con otros microservicios
"""
from .notification_client import notification_client, NotificationClient

__all__ = [
    "notification_client",
    "NotificationClient"
]
