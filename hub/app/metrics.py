"""
Métriques Prometheus pour l'application.

Ce module définit les métriques HTTP et métier (soumissions, décisions,
transitions de statut, notifications) ainsi que l'endpoint `/metrics`.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter(tags=["metrics"])

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Workflow d'approbation
WORKFLOW_SUBMISSIONS = Counter(
    "workflow_submissions_total",
    "Submissions for review by outcome",
    ["result"],
)
APPROVAL_DECISIONS = Counter(
    "approval_decisions_total",
    "Approval decisions recorded",
    ["decision"],
)
ASSET_STATUS_TRANSITIONS = Counter(
    "asset_status_transitions_total",
    "Asset status changes (engine recomputation or admin command)",
    ["status", "source"],
)

# Effets de bord post-commit
POSTCOMMIT_ACTIONS_TOTAL = Counter(
    "postcommit_actions_total",
    "Post-commit action outcomes",
    ["result"],
)
NOTIFICATIONS_TOTAL = Counter(
    "notifications_total",
    "Notification e-mails by outcome",
    ["result"],
)


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Le label `route` utilise le gabarit de la route (ex: `/assets/{asset_id}`)
    pour borner la cardinalité.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = getattr(request.scope.get("route"), "path", None) or "unmatched"
        REQUEST_COUNT.labels(request.method, route, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route).observe(time.perf_counter() - start)
        return response
