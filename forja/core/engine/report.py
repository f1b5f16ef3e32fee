"""
Estadísticas de ejecución y resumen final.

RunStats solo lo muta el engine; summarize() es agregación pura y se consume
una vez al final. La CLI decide cómo mostrarlo y qué código de salida usar.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from forja.core.resources.contracts import ApplyResult, ApplyStatus, ResourceId


@dataclass
class RunStats:
    """Contadores de una ejecución."""
    applied: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    ignored_failures: int = 0
    notifications_fired: int = 0
    via_notification: int = 0
    failures: List[Tuple[ResourceId, str]] = field(default_factory=list)

    def record(self, rid: ResourceId, result: ApplyResult, ignore_failure: bool = False) -> None:
        """Registra el resultado de un apply (pasada principal o notificación)."""
        if result.status == ApplyStatus.UPDATED:
            self.applied += 1
        elif result.status == ApplyStatus.UNCHANGED:
            self.unchanged += 1
        elif ignore_failure:
            self.ignored_failures += 1
        else:
            self.failed += 1
            self.failures.append((rid, result.reason or "error desconocido"))

    def record_skip(self) -> None:
        self.skipped += 1


@dataclass(frozen=True)
class RunSummary:
    """Resumen final: lo que la CLI muestra y traduce a código de salida."""
    applied: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    ignored_failures: int = 0
    notifications_fired: int = 0
    via_notification: int = 0
    failures: Tuple[Tuple[str, str], ...] = ()
    aborted: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.failed == 0 and not self.aborted

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applied": self.applied,
            "unchanged": self.unchanged,
            "skipped": self.skipped,
            "failed": self.failed,
            "ignored_failures": self.ignored_failures,
            "notifications_fired": self.notifications_fired,
            "via_notification": self.via_notification,
            "failures": [{"resource": rid, "reason": reason} for rid, reason in self.failures],
            "aborted": self.aborted,
            "error": self.error,
            "success": self.success,
        }


def summarize(stats: RunStats) -> RunSummary:
    """Convierte RunStats en RunSummary (sin efectos secundarios)."""
    return RunSummary(
        applied=stats.applied,
        unchanged=stats.unchanged,
        skipped=stats.skipped,
        failed=stats.failed,
        ignored_failures=stats.ignored_failures,
        notifications_fired=stats.notifications_fired,
        via_notification=stats.via_notification,
        failures=tuple((str(rid), reason) for rid, reason in stats.failures),
    )


def aborted_summary(error: str) -> RunSummary:
    """Resumen de una ejecución abortada en la validación: contadores a cero."""
    return RunSummary(aborted=True, error=error)
