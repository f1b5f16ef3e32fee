"""
Clase base para recursos: frontera de errores e implementación por defecto.

Los providers pueden heredar de aquí o implementar solo el contrato (Protocol).
"""

import subprocess
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from forja.core.errors import ApplyError
from forja.core.resources.contracts import ApplyResult, CommonProps, ResourceId


class BaseResource(ABC):
    """
    Base abstracta para recursos.

    Las subclases definen `kind`, `actions` y `_apply_action`; `apply` garantiza
    que ninguna excepción de I/O, subprocess o ApplyError cruce la frontera.
    """

    kind: str = "base"
    actions: Tuple[str, ...] = ()
    default_action: str = ""

    def __init__(self, common: Optional[CommonProps] = None):
        self.common = common or CommonProps(action=self.default_action)
        if not self.common.action:
            self.common.action = self.default_action
        self.released = False

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Clave de presentación (path, nombre de unit, nombre del comando...)"""
        pass

    @abstractmethod
    def _apply_action(self, action: str) -> ApplyResult:
        """
        Ejecuta la acción indicada

        Args:
            action: Acción ya validada contra `actions`

        Returns:
            ApplyResult (unchanged/updated); puede lanzar ApplyError u OSError
        """
        pass

    def identity(self) -> ResourceId:
        return ResourceId(self.kind, self.display_name)

    def common_props(self) -> CommonProps:
        return self.common

    def apply(self, action: Optional[str] = None) -> ApplyResult:
        action = action or self.common.action
        if self.released:
            return self.failed(f"{self.identity()} ya fue liberado", action)
        if action not in self.actions:
            return self.failed(
                f"Acción '{action}' no soportada por {self.kind} (permitidas: {', '.join(self.actions)})",
                action,
            )
        try:
            return self._apply_action(action)
        except ApplyError as e:
            return self.failed(str(e), action)
        except subprocess.SubprocessError as e:
            return self.failed(f"Error ejecutando comando: {e}", action)
        except PermissionError as e:
            return self.failed(f"Sin permisos: {e}", action)
        except OSError as e:
            return self.failed(f"Error de I/O: {e}", action)

    def release(self) -> None:
        """Por defecto: solo marca el recurso como liberado."""
        self.released = True

    def unchanged(self, action: str, reason: Optional[str] = "up to date") -> ApplyResult:
        """Crea un resultado sin cambios"""
        return ApplyResult.unchanged(action, reason)

    def updated(self, action: str, reason: Optional[str] = None) -> ApplyResult:
        """Crea un resultado con cambios"""
        return ApplyResult.updated(action, reason)

    def failed(self, reason: str, action: str = "") -> ApplyResult:
        """Crea un resultado de fallo"""
        return ApplyResult.failed(reason, action)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.identity()} action={self.common.action}>"
