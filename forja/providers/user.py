"""
Recurso user: cuenta local gestionada con useradd/usermod/userdel.

La cuenta se consulta con getent; los grupos suplementarios solo se añaden
(usermod -aG), nunca se quitan.
"""

from typing import Callable, List, Optional, Sequence

from forja.core.errors import ApplyError
from forja.core.resources import ACTION_NOTHING, BaseResource, CommonProps

from .host import CommandResult, run_command, tail


Runner = Callable[[List[str]], CommandResult]


class UserResource(BaseResource):
    kind = "user"
    actions = ("create", "remove", ACTION_NOTHING)
    default_action = "create"

    def __init__(
        self,
        name: str,
        uid: Optional[int] = None,
        home: Optional[str] = None,
        shell: Optional[str] = None,
        comment: Optional[str] = None,
        groups: Optional[Sequence[str]] = None,
        system: bool = False,
        manage_home: bool = True,
        timeout: int = 60,
        runner: Optional[Runner] = None,
        common: Optional[CommonProps] = None,
    ):
        super().__init__(common)
        self.name = name
        self.uid = uid
        self.home = home
        self.shell = shell
        self.comment = comment
        self.groups = list(groups or [])
        self.system = system
        self.manage_home = manage_home
        self.timeout = timeout
        self._runner = runner

    @property
    def display_name(self) -> str:
        return self.name

    def _run(self, argv: List[str]) -> CommandResult:
        if self._runner is not None:
            return self._runner(argv)
        return run_command(argv, timeout=self.timeout)

    def _must(self, argv: List[str]) -> None:
        result = self._run(argv)
        if not result.ok:
            raise ApplyError(f"{argv[0]} {self.name} falló ({result.returncode}): {tail(result.output)}")

    def entry(self) -> Optional[List[str]]:
        """Campos de passwd (name, x, uid, gid, gecos, home, shell) o None si no existe."""
        result = self._run(["getent", "passwd", self.name])
        if not result.ok:
            return None
        fields = result.stdout.strip().split(":")
        return fields if len(fields) >= 7 else None

    def member_of(self) -> List[str]:
        result = self._run(["id", "-nG", self.name])
        return result.stdout.split() if result.ok else []

    def _create(self) -> None:
        argv = ["useradd"]
        if self.system:
            argv.append("-r")
        if self.manage_home and not self.system:
            argv.append("-m")
        if self.uid is not None:
            argv += ["-u", str(self.uid)]
        if self.home:
            argv += ["-d", self.home]
        if self.shell:
            argv += ["-s", self.shell]
        if self.comment is not None:
            argv += ["-c", self.comment]
        if self.groups:
            argv += ["-G", ",".join(self.groups)]
        self._must(argv + [self.name])

    def _drift(self, fields: List[str]) -> List[str]:
        args: List[str] = []
        if self.uid is not None and fields[2] != str(self.uid):
            args += ["-u", str(self.uid)]
        if self.comment is not None and fields[4] != self.comment:
            args += ["-c", self.comment]
        if self.home and fields[5] != self.home:
            args += ["-d", self.home]
        if self.shell and fields[6] != self.shell:
            args += ["-s", self.shell]
        current = self.member_of() if self.groups else []
        missing = [g for g in self.groups if g not in current]
        if missing:
            args += ["-aG", ",".join(missing)]
        return args

    def _apply_action(self, action: str):
        if action == ACTION_NOTHING:
            return self.unchanged(action, "action :nothing")

        fields = self.entry()

        if action == "remove":
            if fields is None:
                return self.unchanged(action)
            self._must(["userdel", self.name])
            return self.updated(action, "eliminado")

        if fields is None:
            self._create()
            return self.updated(action, "creado")

        args = self._drift(fields)
        if not args:
            return self.unchanged(action)
        self._must(["usermod", *args, self.name])
        return self.updated(action, "modificado")
