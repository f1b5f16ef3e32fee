"""
Router de notificaciones.

Máquina de estados por ejecución: IDLE → COLLECTING → DRAINING → DONE.

- IMMEDIATE: el destino se aplica de forma síncrona, antes de que el engine
  avance al siguiente recurso, y queda marcado como consumido para que el
  engine no lo aplique de nuevo en su posición original.
- DELAYED: se encola (target, action) con deduplicación; al final de la pasada
  principal se disparan en orden de encolado, una sola vez cada clave.

El router no aplica recursos por sí mismo: delega en `deliver`, que el engine
provee (resolución por índice, registro de estadísticas y eventos).
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, Iterable, Iterator, List, Optional, Set, Tuple

from forja.core.errors import RouterStateError
from forja.core.resources.contracts import ApplyResult, Notification, ResourceId, Timing


class RouterState(str, Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    DRAINING = "draining"
    DONE = "done"


@dataclass(frozen=True)
class PendingNotification:
    """Notificación materializada: el origen cambió de verdad."""
    notification: Notification
    source: ResourceId

    @property
    def key(self) -> Tuple[ResourceId, str]:
        return self.notification.key


# deliver(source, notification) -> resultado del destino
Deliver = Callable[[ResourceId, Notification], ApplyResult]
# cascade(target) -> notificaciones declaradas por el destino
Cascade = Callable[[ResourceId], List[Notification]]


class NotificationQueue:
    """
    Cola ordenada de notificaciones delayed, deduplicada por (target, action).

    Una clave ya vista en la ejecución (pendiente o disparada) no se vuelve a
    encolar: el primer origen gana, sin reordenar ni cambiar timing.
    """

    def __init__(self):
        self._pending: Deque[PendingNotification] = deque()
        self._seen: Set[Tuple[ResourceId, str]] = set()
        self.closed = False

    def enqueue(self, pending: PendingNotification) -> bool:
        """
        Encola si la clave es nueva

        Returns:
            True si se encoló; False si ya estaba (no-op)
        """
        if self.closed:
            raise RouterStateError(
                f"Cola cerrada: no se acepta {pending.notification} desde {pending.source}"
            )
        if pending.key in self._seen:
            return False
        self._seen.add(pending.key)
        self._pending.append(pending)
        return True

    def pop(self) -> Optional[PendingNotification]:
        if not self._pending:
            return None
        return self._pending.popleft()

    def close(self) -> None:
        self.closed = True

    def __len__(self) -> int:
        return len(self._pending)

    def __iter__(self) -> Iterator[PendingNotification]:
        return iter(list(self._pending))


class NotificationRouter:
    """Dueño de la cola de notificaciones y del momento en que se disparan."""

    def __init__(self, deliver: Deliver, cascade: Cascade):
        self._deliver = deliver
        self._cascade = cascade
        self.queue = NotificationQueue()
        self.state = RouterState.IDLE
        self.consumed: Set[ResourceId] = set()
        self.fired: List[PendingNotification] = []

    def begin(self) -> None:
        """IDLE → COLLECTING."""
        if self.state != RouterState.IDLE:
            raise RouterStateError(f"begin() no permitido en estado {self.state.value}")
        self.state = RouterState.COLLECTING

    def is_consumed(self, rid: ResourceId) -> bool:
        return rid in self.consumed

    def dispatch(self, source: ResourceId, notifications: Iterable[Notification]) -> None:
        """
        Recibe las notificaciones declaradas de un recurso que reportó Updated.

        Args:
            source: Recurso origen
            notifications: Notificaciones declaradas por el origen
        """
        if self.state not in (RouterState.COLLECTING, RouterState.DRAINING):
            raise RouterStateError(f"dispatch() no permitido en estado {self.state.value}")

        for notif in notifications:
            pending = PendingNotification(notif, source)
            if notif.timing == Timing.IMMEDIATE:
                if self.state == RouterState.COLLECTING:
                    self.consumed.add(notif.target)
                self._fire(pending)
            else:
                self.queue.enqueue(pending)

    def _fire(self, pending: PendingNotification) -> None:
        self.fired.append(pending)
        result = self._deliver(pending.source, pending.notification)
        if result.is_updated:
            target = pending.notification.target
            cascaded = self._cascade(target)
            if cascaded:
                self.dispatch(target, cascaded)

    def drain(self) -> int:
        """
        COLLECTING → DRAINING → DONE: dispara la cola en orden de encolado.

        Returns:
            Número de notificaciones delayed disparadas
        """
        if self.state != RouterState.COLLECTING:
            raise RouterStateError(f"drain() no permitido en estado {self.state.value}")
        self.state = RouterState.DRAINING

        drained = 0
        while True:
            pending = self.queue.pop()
            if pending is None:
                break
            self._fire(pending)
            drained += 1

        self.queue.close()
        self.state = RouterState.DONE
        return drained
