"""
Recurso systemd_unit: archivo de unit y estado del servicio vía systemctl.

Las acciones restart/reload siempre se consideran cambio: son las que los
demás recursos notifican cuando su configuración cambia.
"""

from pathlib import Path
from typing import Callable, List, Optional

from forja.core.errors import ApplyError
from forja.core.resources import ACTION_NOTHING, BaseResource, CommonProps

from .host import CommandResult, ensure_file_content, run_command, tail


UNIT_DIR = Path("/etc/systemd/system")

Runner = Callable[[List[str]], CommandResult]


class SystemdUnitResource(BaseResource):
    kind = "systemd_unit"
    actions = (
        "create",
        "enable",
        "disable",
        "start",
        "stop",
        "restart",
        "reload",
        "reload_or_restart",
        ACTION_NOTHING,
    )
    default_action = "create"

    def __init__(
        self,
        name: str,
        content: Optional[str] = None,
        unit_dir: Path = UNIT_DIR,
        timeout: int = 300,
        runner: Optional[Runner] = None,
        common: Optional[CommonProps] = None,
    ):
        super().__init__(common)
        self.name = name
        self.content = content
        self.unit_dir = Path(unit_dir)
        self.timeout = timeout
        self._runner = runner

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def unit_path(self) -> Path:
        return self.unit_dir / self.name

    def _systemctl(self, *args: str) -> CommandResult:
        argv = ["systemctl", *args]
        if self._runner is not None:
            return self._runner(argv)
        return run_command(argv, timeout=self.timeout)

    def _must(self, *args: str) -> None:
        result = self._systemctl(*args)
        if not result.ok:
            detail = tail(result.output)
            raise ApplyError(f"systemctl {' '.join(args)} falló ({result.returncode}): {detail}")

    def _apply_action(self, action: str):
        if action == ACTION_NOTHING:
            return self.unchanged(action, "action :nothing")

        if action == "create":
            if self.content is None:
                return self.unchanged(action, "sin contenido de unit")
            reason = ensure_file_content(self.unit_path, self.content.encode("utf-8"))
            if reason is None:
                return self.unchanged(action)
            self._must("daemon-reload")
            return self.updated(action, reason)

        if action in ("enable", "disable"):
            enabled = self._systemctl("is-enabled", self.name).ok
            if enabled == (action == "enable"):
                return self.unchanged(action)
            self._must(action, self.name)
            return self.updated(action)

        if action in ("start", "stop"):
            active = self._systemctl("is-active", self.name).ok
            if active == (action == "start"):
                return self.unchanged(action)
            self._must(action, self.name)
            return self.updated(action)

        if action == "reload_or_restart":
            self._must("reload-or-restart", self.name)
            return self.updated(action)

        self._must(action, self.name)
        return self.updated(action)

    def release(self) -> None:
        self.content = None
        super().release()
