"""
Recurso execute: comando de shell.

Con action nothing solo corre cuando otro recurso lo notifica (acción run).
`creates` hace el comando idempotente: si la ruta existe, no se ejecuta.
"""

from pathlib import Path
from typing import Dict, Optional, Union

from forja.core.errors import ApplyError
from forja.core.resources import ACTION_NOTHING, BaseResource, CommonProps

from .host import run_command, tail


class ExecuteResource(BaseResource):
    kind = "execute"
    actions = ("run", ACTION_NOTHING)
    default_action = "run"

    def __init__(
        self,
        name: str,
        command: Optional[str] = None,
        cwd: Optional[Union[str, Path]] = None,
        environment: Optional[Dict[str, str]] = None,
        creates: Optional[Union[str, Path]] = None,
        timeout: int = 300,
        common: Optional[CommonProps] = None,
    ):
        super().__init__(common)
        self.name = name
        self.command = command or name
        self.cwd = Path(cwd) if cwd else None
        self.environment = dict(environment or {})
        self.creates = Path(creates) if creates else None
        self.timeout = timeout
        self.last_output = ""
        self.runs = 0

    @property
    def display_name(self) -> str:
        return self.name

    def _apply_action(self, action: str):
        if action == ACTION_NOTHING:
            return self.unchanged(action, "action :nothing")

        if self.creates is not None and self.creates.exists():
            return self.unchanged(action, f"'{self.creates}' ya existe")

        result = run_command(self.command, cwd=self.cwd, timeout=self.timeout, env=self.environment)
        self.runs += 1
        self.last_output = result.output
        if not result.ok:
            detail = tail(result.stderr) or tail(result.stdout)
            message = f"'{self.command}' terminó con código {result.returncode}"
            raise ApplyError(f"{message}: {detail}" if detail else message)
        return self.updated(action)

    def release(self) -> None:
        self.last_output = ""
        super().release()
