"""
Contratos que deben implementar los recursos (file, execute, systemd_unit, ...).

El core solo define tipos e interfaces; la implementación vive en forja/providers/*.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Protocol

from forja.core.errors import ValidationError


# Predicado de guarda: sin argumentos, devuelve truthy/falsy; si lanza, es GuardError
Predicate = Callable[[], bool]

# Acción especial: el recurso solo existe como destino de notificaciones
ACTION_NOTHING = "nothing"


@dataclass(frozen=True)
class ResourceId:
    """Identificador de recurso (kind, name). Se muestra como kind[name]."""
    kind: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind}[{self.name}]"

    @classmethod
    def parse(cls, value: str) -> "ResourceId":
        """Parsea 'kind[name]' (ej: 'file[/etc/nginx.conf]', 'systemd_unit[nginx.service]')."""
        text = (value or "").strip()
        bracket = text.find("[")
        if bracket <= 0 or not text.endswith("]"):
            raise ValidationError(f"Id de recurso inválido '{value}': se espera kind[name]")
        name = text[bracket + 1:-1]
        if not name:
            raise ValidationError(f"Id de recurso inválido '{value}': nombre vacío")
        return cls(kind=text[:bracket], name=name)


class Timing(str, Enum):
    IMMEDIATE = "immediate"
    DELAYED = "delayed"


@dataclass(frozen=True)
class Notification:
    """Disparo declarado desde un recurso origen hacia un destino."""
    target: ResourceId
    action: str
    timing: Timing = Timing.DELAYED

    @property
    def key(self):
        """Clave de deduplicación en la cola de notificaciones delayed."""
        return (self.target, self.action)

    @classmethod
    def from_parts(
        cls,
        target_kind: str,
        target_name: str,
        action: str,
        timing: str = "delayed",
    ) -> "Notification":
        """Construye desde la forma del DSL (target_kind, target_name, action, timing)."""
        try:
            parsed_timing = Timing(str(timing).lower())
        except ValueError:
            raise ValidationError(f"Timing inválido '{timing}': usa immediate o delayed")
        if not action:
            raise ValidationError("La notificación necesita una acción")
        return cls(ResourceId(target_kind, target_name), action, parsed_timing)

    def __str__(self) -> str:
        return f"{self.action} → {self.target} ({self.timing.value})"


class ApplyStatus(str, Enum):
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass(frozen=True)
class ApplyResult:
    """Resultado de aplicar un recurso. Solo UPDATED puede emitir notificaciones."""
    status: ApplyStatus
    action: str = ""
    reason: Optional[str] = None

    @classmethod
    def unchanged(cls, action: str = "", reason: Optional[str] = "up to date") -> "ApplyResult":
        return cls(ApplyStatus.UNCHANGED, action, reason)

    @classmethod
    def updated(cls, action: str = "", reason: Optional[str] = None) -> "ApplyResult":
        return cls(ApplyStatus.UPDATED, action, reason)

    @classmethod
    def failed(cls, reason: str, action: str = "") -> "ApplyResult":
        return cls(ApplyStatus.FAILED, action, reason or "error desconocido")

    @property
    def is_updated(self) -> bool:
        return self.status is ApplyStatus.UPDATED

    @property
    def is_failed(self) -> bool:
        return self.status is ApplyStatus.FAILED

    @property
    def ok(self) -> bool:
        return self.status is not ApplyStatus.FAILED


@dataclass
class CommonProps:
    """Propiedades comunes a todos los recursos (acción, guardas, notificaciones)."""
    action: str
    only_if: List[Predicate] = field(default_factory=list)
    not_if: List[Predicate] = field(default_factory=list)
    notifications: List[Notification] = field(default_factory=list)
    subscriptions: List[Notification] = field(default_factory=list)  # target = recurso observado
    ignore_failure: bool = False

    @property
    def has_guards(self) -> bool:
        return bool(self.only_if or self.not_if)


class Resource(Protocol):
    """
    Contrato mínimo de un recurso.
    apply nunca lanza: los errores se devuelven como ApplyResult.failed.
    """
    def apply(self, action: Optional[str] = None) -> ApplyResult:
        """Converge el host; action=None usa la acción configurada."""
        ...

    def identity(self) -> ResourceId:
        """Id estable derivado de kind + clave de presentación."""
        ...

    def common_props(self) -> CommonProps:
        """Acceso mutable a guardas y notificaciones."""
        ...

    def release(self) -> None:
        """Libera buffers/handles aunque apply no haya corrido o haya fallado."""
        ...
