"""
Motor de convergencia.

Recorre la lista de recursos en orden de declaración, evalúa guardas, aplica
cada recurso como máximo una vez, interpreta el resultado y alimenta al router
de notificaciones. Un recurso que falla no detiene la ejecución; solo la
validación previa (ids duplicados, notificaciones inconsistentes) aborta antes
de aplicar nada. Todos los recursos se liberan al final, pase lo que pase.

Ejecución estrictamente secuencial: ningún recurso se aplica en paralelo con otro.
"""

from typing import List, Optional, Sequence

from forja.core.errors import GuardError, IdentityConflictError
from forja.core.events import EventSink, EventType, NullEventSink, RunEvent
from forja.core.resources.contracts import (
    ApplyResult,
    ApplyStatus,
    Notification,
    Resource,
    ResourceId,
)

from .guards import evaluate_guards
from .notifications import NotificationRouter
from .report import RunStats, RunSummary, aborted_summary, summarize
from .validator import ResourceIndex, build_index


_STATUS_EVENTS = {
    ApplyStatus.UPDATED: EventType.UPDATED,
    ApplyStatus.UNCHANGED: EventType.UNCHANGED,
    ApplyStatus.FAILED: EventType.FAILED,
}


class ConvergenceEngine:
    """Bucle de control de una ejecución (un solo uso)."""

    def __init__(self, resources: Sequence[Resource], events: Optional[EventSink] = None):
        self.resources: List[Resource] = list(resources)
        self.events: EventSink = events or NullEventSink()
        self.stats = RunStats()
        self.index: Optional[ResourceIndex] = None
        self.router = NotificationRouter(deliver=self._deliver, cascade=self._notifications_of)
        self._ran = False

    def _emit(self, event_type: EventType, **kwargs) -> None:
        self.events.emit(RunEvent(type=event_type, **kwargs))

    def run(self) -> RunSummary:
        """
        Ejecuta la convergencia completa.

        Returns:
            RunSummary; lanza IdentityConflictError si la validación aborta
        """
        if self._ran:
            raise RuntimeError("ConvergenceEngine es de un solo uso; crea otro para una nueva ejecución")
        self._ran = True

        try:
            try:
                self.index = build_index(self.resources)
            except IdentityConflictError as e:
                self._emit(EventType.ABORTED, reason=str(e))
                raise

            self._emit(EventType.STARTED, data={"resources": len(self.index)})
            self.router.begin()
            for resource in self.index:
                self._converge_one(resource)
            self.router.drain()

            summary = summarize(self.stats)
            self._emit(EventType.FINISHED, data=summary.to_dict())
            return summary
        finally:
            self._release_all()

    # ------------------------------------------------------------------
    # Pasada principal
    # ------------------------------------------------------------------

    def _converge_one(self, resource: Resource) -> None:
        rid = resource.identity()
        common = resource.common_props()

        if self.router.is_consumed(rid):
            self.stats.via_notification += 1
            self._emit(
                EventType.CONSUMED,
                resource=str(rid),
                action=common.action,
                reason="aplicado antes por notificación immediate",
            )
            return

        try:
            decision = evaluate_guards(common)
        except GuardError as e:
            result = ApplyResult.failed(str(e), common.action)
        else:
            if not decision.proceed:
                self.stats.record_skip()
                self._emit(EventType.SKIPPED, resource=str(rid), action=common.action, reason=decision.reason)
                return
            result = self._safe_apply(resource, None)

        self._record(rid, resource, result)
        if result.is_updated and common.notifications:
            self.router.dispatch(rid, list(common.notifications))

    def _safe_apply(self, resource: Resource, action: Optional[str]) -> ApplyResult:
        """apply() nunca debe lanzar; si un recurso no respeta el contrato, el fallo se registra igual."""
        try:
            result = resource.apply(action)
        except Exception as e:
            return ApplyResult.failed(f"{e.__class__.__name__}: {e}", action or resource.common_props().action)
        if not isinstance(result, ApplyResult):
            return ApplyResult.failed(
                f"apply() devolvió {type(result).__name__} en lugar de ApplyResult",
                action or resource.common_props().action,
            )
        return result

    def _record(self, rid: ResourceId, resource: Resource, result: ApplyResult) -> None:
        ignore = resource.common_props().ignore_failure
        self.stats.record(rid, result, ignore_failure=ignore)
        data = {"ignored": True} if (result.is_failed and ignore) else {}
        self._emit(
            _STATUS_EVENTS[result.status],
            resource=str(rid),
            action=result.action,
            reason=result.reason,
            data=data,
        )

    # ------------------------------------------------------------------
    # Callbacks del router
    # ------------------------------------------------------------------

    def _deliver(self, source: ResourceId, notification: Notification) -> ApplyResult:
        target = self.index.get(notification.target)
        result = self._safe_apply(target, notification.action)
        ignore = target.common_props().ignore_failure
        self.stats.notifications_fired += 1
        self.stats.record(notification.target, result, ignore_failure=ignore)
        self._emit(
            EventType.NOTIFIED,
            resource=str(notification.target),
            action=notification.action,
            source=str(source),
            reason=result.reason,
            data={"status": result.status.value, "timing": notification.timing.value},
        )
        return result

    def _notifications_of(self, rid: ResourceId) -> List[Notification]:
        return list(self.index.get(rid).common_props().notifications)

    def _release_all(self) -> None:
        for resource in self.resources:
            try:
                resource.release()
            except Exception as e:
                self._emit(
                    EventType.FAILED,
                    resource=str(resource.identity()),
                    action="release",
                    reason=f"{e.__class__.__name__}: {e}",
                )


def converge(resources: Sequence[Resource], events: Optional[EventSink] = None) -> RunSummary:
    """
    Punto de entrada único: converge la lista de recursos y devuelve el resumen.

    Una validación fallida no lanza: devuelve un resumen abortado (contadores a
    cero, success=False).
    """
    engine = ConvergenceEngine(resources, events=events)
    try:
        return engine.run()
    except IdentityConflictError as e:
        return aborted_summary(str(e))
