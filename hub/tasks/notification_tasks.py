"""
Tâches Celery pour l'envoi des notifications e-mail.

Utilisées lorsque `NOTIFICATIONS_ASYNC=true`: l'API met les messages en file
après commit et le worker les transmet à la fonction d'envoi.
"""

from __future__ import annotations

from hub.app.celery_app import celery_app
from hub.core.container import container
from hub.infra.notifications import EmailMessage


@celery_app.task(
    name="hub.tasks.send_notification",
    bind=True,
    max_retries=3,
    default_retry_delay=30,
)
def send_notification_task(self, to: str, subject: str, html: str) -> str:
    result = container.notification_client.send(EmailMessage(to=to, subject=subject, html=html))
    if result == "failed":
        raise self.retry()
    return result
