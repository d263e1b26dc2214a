"""Configuration centralisée Celery pour l'envoi asynchrone des notifications.

Les notifications sont best-effort: pas de retry infini, délai court.
"""

# ============================================================
# Module : hub/app/celeryconfig.py
# Objet  : Configuration Celery (acks, timeouts, retries).
# ============================================================

from __future__ import annotations

task_acks_late = True
task_reject_on_worker_lost = True
worker_prefetch_multiplier = 1
task_time_limit = 60  # secondes
broker_pool_limit = 10
task_ignore_result = True
