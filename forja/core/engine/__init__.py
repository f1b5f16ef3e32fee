"""
Engine: validación, guardas, router de notificaciones, convergencia y resumen.

Invariantes:
- La acción por defecto de un recurso se aplica como máximo una vez por ejecución.
- Una notificación delayed (target, action) se dispara como máximo una vez.
- Evaluar guardas nunca muta el host; solo apply lo hace.
"""

from forja.core.engine.engine import ConvergenceEngine, converge
from forja.core.engine.guards import GuardDecision, evaluate_guards
from forja.core.engine.notifications import (
    NotificationQueue,
    NotificationRouter,
    PendingNotification,
    RouterState,
)
from forja.core.engine.report import RunStats, RunSummary, summarize
from forja.core.engine.validator import ResourceIndex, build_index

__all__ = [
    "ConvergenceEngine",
    "converge",
    "GuardDecision",
    "evaluate_guards",
    "NotificationQueue",
    "NotificationRouter",
    "PendingNotification",
    "RouterState",
    "RunStats",
    "RunSummary",
    "summarize",
    "ResourceIndex",
    "build_index",
]
