"""
Errores de forja.

El core solo define excepciones; las capas (CLI) se encargan del formato de salida.
GuardError y ApplyError nunca cruzan la frontera de un recurso: el engine los
convierte en ApplyResult.failed. IdentityConflictError es la única que aborta
la ejecución completa.
"""


class ForjaError(Exception):
    """Error base de forja."""
    pass


class ValidationError(ForjaError):
    """Error de validación de modelos o identificadores."""
    pass


class ConfigError(ForjaError):
    """Error de configuración (receta faltante, YAML inválido, variable de entorno inválida)."""
    pass


class GuardError(ForjaError):
    """Un predicado only_if/not_if no pudo ejecutarse."""
    pass


class ApplyError(ForjaError):
    """La acción subyacente de un recurso falló (I/O, comando, permisos, red)."""
    pass


class IdentityConflictError(ValidationError):
    """
    La lista de recursos es inconsistente: ids duplicados o una notificación
    immediate hacia un recurso anterior a su origen.
    """
    pass


class UnresolvedNotificationError(IdentityConflictError):
    """Una notificación o suscripción apunta a un recurso que no existe en la ejecución."""
    pass


class RouterStateError(ForjaError):
    """Operación no permitida en el estado actual del router de notificaciones."""
    pass
