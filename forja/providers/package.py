"""
Recurso package: paquete del sistema vía apt/dpkg.

El estado instalado se consulta con dpkg-query; apt-get solo corre cuando
el paquete no está en el estado pedido.
"""

from typing import Callable, List, Optional, Tuple

from forja.core.errors import ApplyError
from forja.core.resources import ACTION_NOTHING, BaseResource, CommonProps

from .host import CommandResult, run_command, tail


Runner = Callable[[List[str]], CommandResult]

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


class PackageResource(BaseResource):
    kind = "package"
    actions = ("install", "upgrade", "remove", "purge", ACTION_NOTHING)
    default_action = "install"

    def __init__(
        self,
        name: str,
        version: Optional[str] = None,
        timeout: int = 600,
        runner: Optional[Runner] = None,
        common: Optional[CommonProps] = None,
    ):
        super().__init__(common)
        self.name = name
        self.version = version
        self.timeout = timeout
        self._runner = runner

    @property
    def display_name(self) -> str:
        return self.name

    def _run(self, argv: List[str]) -> CommandResult:
        if self._runner is not None:
            return self._runner(argv)
        return run_command(argv, timeout=self.timeout, env=APT_ENV)

    def _apt(self, *args: str) -> None:
        result = self._run(["apt-get", "-y", "-qq", *args])
        if not result.ok:
            raise ApplyError(f"apt-get {' '.join(args)} falló ({result.returncode}): {tail(result.output)}")

    def query(self) -> Tuple[str, Optional[str]]:
        """
        Estado del paquete según dpkg

        Returns:
            (estado, versión): estado es 'installed', 'config-files' o 'absent';
            la versión solo se informa si está instalado
        """
        result = self._run(["dpkg-query", "-W", "-f=${Status} ${Version}", self.name])
        if not result.ok:
            return "absent", None
        fields = result.stdout.split()
        # "install ok installed 1.2-3" / "deinstall ok config-files 1.2-3"
        state = fields[2] if len(fields) > 2 else ""
        if state == "installed":
            return "installed", fields[3] if len(fields) > 3 else None
        if state == "config-files":
            return "config-files", None
        return "absent", None

    def _target(self) -> str:
        return f"{self.name}={self.version}" if self.version else self.name

    def _apply_action(self, action: str):
        if action == ACTION_NOTHING:
            return self.unchanged(action, "action :nothing")

        state, current = self.query()

        if action == "install":
            if state == "installed" and (self.version is None or current == self.version):
                return self.unchanged(action)
            self._apt("install", self._target())
            if current:
                return self.updated(action, f"{current} → {self.version}")
            return self.updated(action, "instalado")

        if action == "upgrade":
            if state != "installed":
                self._apt("install", self._target())
                return self.updated(action, "instalado")
            self._apt("install", "--only-upgrade", self._target())
            _, after = self.query()
            if after == current:
                return self.unchanged(action)
            return self.updated(action, f"{current} → {after}")

        if action == "remove":
            if state != "installed":
                return self.unchanged(action)
            self._apt("remove", self.name)
            return self.updated(action, "desinstalado")

        if state == "absent":
            return self.unchanged(action)
        self._apt("purge", self.name)
        return self.updated(action, "purgado")
