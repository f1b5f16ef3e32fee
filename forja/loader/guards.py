"""
Predicados de guarda basados en comandos de shell.

exit 0 → verdadero; otro código → falso. Comando inexistente o timeout → GuardError
(el engine lo registra como fallo del recurso, no como skip).
"""

from pathlib import Path
from typing import Optional

from forja.core.errors import ApplyError, GuardError
from forja.core.resources import Predicate
from forja.providers.host import run_command


def command_predicate(command: str, timeout: int = 30, cwd: Optional[Path] = None) -> Predicate:
    """
    Crea un predicado que ejecuta `command` con /bin/sh -c

    Args:
        command: Comando de shell
        timeout: Timeout en segundos
        cwd: Directorio de trabajo

    Returns:
        Callable sin argumentos que devuelve bool
    """
    def predicate() -> bool:
        try:
            result = run_command(command, cwd=cwd, timeout=timeout)
        except ApplyError as e:
            raise GuardError(str(e)) from e
        # 126/127: el shell no pudo ejecutar el comando
        if result.returncode in (126, 127):
            raise GuardError(f"No se pudo ejecutar la guarda '{command}': {result.output}")
        return result.ok

    predicate.command = command  # type: ignore[attr-defined]
    predicate.__name__ = f"guard[{command}]"
    return predicate


def describe_predicate(predicate: Predicate) -> str:
    """Texto legible de un predicado (comando o nombre de la función)."""
    command = getattr(predicate, "command", None)
    if command:
        return command
    return getattr(predicate, "__name__", repr(predicate))
