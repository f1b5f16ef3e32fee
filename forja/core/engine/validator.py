"""
Pasada de validación previa a la ejecución.

Construye el índice ResourceId → posición una sola vez por ejecución; el mismo
recorrido detecta ids duplicados, notificaciones sin destino y notificaciones
immediate hacia recursos anteriores. Cualquier error aquí aborta la ejecución
antes de aplicar nada.
"""

from typing import Dict, Iterator, List, Sequence

from forja.core.errors import IdentityConflictError, UnresolvedNotificationError
from forja.core.resources.contracts import Notification, Resource, ResourceId, Timing


class ResourceIndex:
    """Índice de recursos de una ejecución (búsqueda O(1) por ResourceId)."""

    def __init__(self, resources: Sequence[Resource], slots: Dict[ResourceId, int]):
        self.resources: List[Resource] = list(resources)
        self.slots = slots

    def __contains__(self, rid: ResourceId) -> bool:
        return rid in self.slots

    def __len__(self) -> int:
        return len(self.resources)

    def __iter__(self) -> Iterator[Resource]:
        return iter(self.resources)

    def position(self, rid: ResourceId) -> int:
        return self.slots[rid]

    def get(self, rid: ResourceId) -> Resource:
        return self.resources[self.slots[rid]]


def _index_ids(resources: Sequence[Resource]) -> Dict[ResourceId, int]:
    slots: Dict[ResourceId, int] = {}
    for pos, resource in enumerate(resources):
        rid = resource.identity()
        if rid in slots:
            raise IdentityConflictError(
                f"Recurso duplicado {rid}: declarado en las posiciones {slots[rid] + 1} y {pos + 1}"
            )
        slots[rid] = pos
    return slots


def expand_subscriptions(resources: Sequence[Resource], slots: Dict[ResourceId, int]) -> int:
    """
    Convierte suscripciones en notificaciones inversas.
    Si B se suscribe a A, A recibe una notificación hacia B.

    Returns:
        Número de notificaciones añadidas
    """
    added = 0
    for subscriber in resources:
        subscriber_id = subscriber.identity()
        for sub in subscriber.common_props().subscriptions:
            if sub.target not in slots:
                raise UnresolvedNotificationError(
                    f"{subscriber_id} se suscribe a {sub.target}, que no existe en esta ejecución"
                )
            source = resources[slots[sub.target]]
            notif = Notification(subscriber_id, sub.action, sub.timing)
            notifications = source.common_props().notifications
            if notif not in notifications:
                notifications.append(notif)
                added += 1
    return added


def _check_notifications(resources: Sequence[Resource], slots: Dict[ResourceId, int]) -> None:
    for pos, resource in enumerate(resources):
        source_id = resource.identity()
        for notif in resource.common_props().notifications:
            if notif.target not in slots:
                raise UnresolvedNotificationError(
                    f"{source_id} notifica a {notif.target}, que no existe en esta ejecución"
                )
            if notif.timing == Timing.IMMEDIATE and slots[notif.target] <= pos:
                raise IdentityConflictError(
                    f"{source_id} notifica immediate a {notif.target}, que ya se ejecutó antes "
                    f"(posición {slots[notif.target] + 1}); usa timing delayed"
                )


def build_index(resources: Sequence[Resource]) -> ResourceIndex:
    """
    Valida la lista de recursos y construye el índice de la ejecución.

    Args:
        resources: Recursos en orden de declaración

    Returns:
        ResourceIndex; lanza IdentityConflictError si la entrada es inconsistente
    """
    slots = _index_ids(resources)
    expand_subscriptions(resources, slots)
    _check_notifications(resources, slots)
    return ResourceIndex(resources, slots)
