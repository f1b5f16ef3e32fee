"""
Contratos y base para recursos.

Los recursos concretos (file, directory, execute, systemd_unit, ...) implementan
estos contratos; el core no depende de ningún recurso concreto.
"""

from forja.core.resources.contracts import (
    ACTION_NOTHING,
    ApplyResult,
    ApplyStatus,
    CommonProps,
    Notification,
    Predicate,
    Resource,
    ResourceId,
    Timing,
)
from forja.core.resources.base import BaseResource

__all__ = [
    "ACTION_NOTHING",
    "ApplyResult",
    "ApplyStatus",
    "BaseResource",
    "CommonProps",
    "Notification",
    "Predicate",
    "Resource",
    "ResourceId",
    "Timing",
]
