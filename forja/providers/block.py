"""
Recurso block: bloque de código Python arbitrario (solo vía API Python).

El bloque devuelve False para indicar "sin cambios"; cualquier otro valor
cuenta como cambio. Una excepción del bloque es un fallo del recurso.
"""

from typing import Any, Callable, Optional

from forja.core.errors import ApplyError
from forja.core.resources import ACTION_NOTHING, BaseResource, CommonProps


class BlockResource(BaseResource):
    kind = "block"
    actions = ("run", ACTION_NOTHING)
    default_action = "run"

    def __init__(self, name: str, block: Callable[[], Any], common: Optional[CommonProps] = None):
        super().__init__(common)
        self.name = name
        self.block: Optional[Callable[[], Any]] = block

    @property
    def display_name(self) -> str:
        return self.name

    def _apply_action(self, action: str):
        if action == ACTION_NOTHING:
            return self.unchanged(action, "action :nothing")
        try:
            value = self.block()
        except ApplyError:
            raise
        except Exception as e:
            raise ApplyError(f"El bloque lanzó {e.__class__.__name__}: {e}") from e
        if value is False:
            return self.unchanged(action)
        return self.updated(action)

    def release(self) -> None:
        self.block = None
        super().release()
