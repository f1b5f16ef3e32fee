"""
Core: motor de convergencia y propagación de notificaciones.

ENFORCEMENT (arquitectura limpia):
- Este paquete NO debe importar: forja.cli, forja.loader ni forja.providers
  (implementaciones concretas de recursos).
- Permitido: typing, pathlib.Path, pydantic, rich (solo en events), forja.core.*.
- Los providers, el loader y la CLI importan desde core; nunca al revés.
"""

from forja.core.errors import (
    ForjaError,
    ValidationError,
    ConfigError,
    GuardError,
    ApplyError,
    IdentityConflictError,
)

__all__ = [
    "ForjaError",
    "ValidationError",
    "ConfigError",
    "GuardError",
    "ApplyError",
    "IdentityConflictError",
]
