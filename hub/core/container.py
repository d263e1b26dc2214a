"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, moteur SQL, factory de sessions,
client de notifications) et expose un singleton `container` utilisé par le reste
de l'application.
"""

from hub.core.settings import get_settings
from hub.infra.notifications import NotificationClient, Notifier
from hub.infra.repo.db import MEMORY_URL, create_schema, get_engine, get_session_factory


class Container:
    def __init__(self, settings=None):
        self.settings = settings or get_settings()
        db_url = self.settings.DATABASE_URL or MEMORY_URL
        self.engine = get_engine(db_url)
        if db_url.startswith("sqlite") and ":memory:" in db_url:
            # base éphémère: pas de migration Alembic possible
            create_schema(self.engine)
        self.session_factory = get_session_factory(self.engine)
        self.notification_client = NotificationClient(
            url=self.settings.NOTIFICATION_FUNCTION_URL,
            api_key=self.settings.NOTIFICATION_API_KEY,
            timeout=self.settings.NOTIFICATION_TIMEOUT_S,
        )
        self.notifier = Notifier(
            self.notification_client,
            app_url=self.settings.APP_URL,
            async_mode=self.settings.NOTIFICATIONS_ASYNC,
        )


container = Container()
