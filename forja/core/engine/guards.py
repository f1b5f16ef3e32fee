"""
Evaluación de guardas (not_if / only_if).

Orden fijo: primero todos los not_if (cualquiera truthy → skip), luego todos los
only_if (cualquiera falsy → skip). Un predicado que lanza no es un skip: se
convierte en GuardError y el engine lo registra como fallo del recurso.
"""

from dataclasses import dataclass
from typing import Optional

from forja.core.errors import GuardError
from forja.core.resources.contracts import ACTION_NOTHING, CommonProps, Predicate


@dataclass(frozen=True)
class GuardDecision:
    """Decisión de guardas: proceder o saltar con motivo."""
    proceed: bool
    reason: Optional[str] = None


PROCEED = GuardDecision(proceed=True)


def _call(predicate: Predicate, label: str, position: int) -> bool:
    try:
        return bool(predicate())
    except GuardError:
        raise
    except Exception as e:
        raise GuardError(f"{label} #{position + 1} falló al evaluarse: {e}") from e


def evaluate_guards(common: CommonProps) -> GuardDecision:
    """
    Decide si la acción configurada de un recurso debe ejecutarse.

    Args:
        common: Propiedades comunes del recurso

    Returns:
        GuardDecision; lanza GuardError si un predicado no pudo ejecutarse
    """
    if common.action == ACTION_NOTHING:
        return GuardDecision(proceed=False, reason="action :nothing")

    for i, predicate in enumerate(common.not_if):
        if _call(predicate, "not_if", i):
            return GuardDecision(proceed=False, reason="skipped due to not_if")

    for i, predicate in enumerate(common.only_if):
        if not _call(predicate, "only_if", i):
            return GuardDecision(proceed=False, reason="skipped due to only_if")

    return PROCEED
