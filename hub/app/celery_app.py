"""
Module: celery_app.

But: Initialiser l'instance Celery utilisée pour l'envoi asynchrone des
notifications (`NOTIFICATIONS_ASYNC=true`).
"""

from celery import Celery

from hub.core.container import container

celery_app = Celery(
    "partnership_hub",
    broker=container.settings.CELERY_BROKER_URL,
    backend=container.settings.CELERY_RESULT_BACKEND,
    include=["hub.tasks.notification_tasks"],
)
celery_app.config_from_object("hub.app.celeryconfig")
celery_app.conf.task_routes = {"hub.tasks.*": {"queue": "notifications"}}

__all__ = ["celery_app"]
