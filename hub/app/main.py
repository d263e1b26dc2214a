"""
Application principale FastAPI.

Ce module assemble tous les composants de l'application : middlewares,
gestion des erreurs, routes et métriques du hub de partenariat.

Responsabilités du module:
- Initialiser le logging structuré
- Construire l'application FastAPI avec son titre/debug
- Ajouter les middlewares (CORS, contexte de requête, Prometheus)
- Installer les gestionnaires d'erreurs (enveloppes `{code, message, trace_id}`)
- Monter les routers métier et `/metrics`
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hub.api.errors import install_error_handlers
from hub.api.routes_approvals import router as approvals_router
from hub.api.routes_assets import router as assets_router
from hub.api.routes_chains import router as chains_router
from hub.api.routes_comments import router as comments_router
from hub.api.routes_dashboard import router as dashboard_router
from hub.api.routes_health import router as health_router
from hub.api.routes_members import router as members_router
from hub.app.metrics import PrometheusMiddleware, metrics_router
from hub.core.container import container
from hub.core.logging import setup_logging
from hub.middlewares.request_context import RequestContextMiddleware


def create_app() -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog)
    - Lit les paramètres d'exécution
    - Ajoute les middlewares utiles au debug/traçabilité
    - Publie les routes métier, de santé et de métriques
    """
    settings = container.settings
    setup_logging(json_logs=settings.LOG_JSON)
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(o).rstrip("/") for o in settings.CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestContextMiddleware)
    install_error_handlers(app)
    app.include_router(health_router)
    app.include_router(assets_router)
    app.include_router(approvals_router)
    app.include_router(comments_router)
    app.include_router(members_router)
    app.include_router(chains_router)
    app.include_router(dashboard_router)
    app.include_router(metrics_router)
    return app


app = create_app()
