"""
Recurso group: grupo local gestionado con groupadd/groupdel.

Los miembros se añaden con usermod -aG; con append=False los miembros que
sobran se quitan con gpasswd -d.
"""

from typing import Callable, List, Optional, Sequence

from forja.core.errors import ApplyError
from forja.core.resources import ACTION_NOTHING, BaseResource, CommonProps

from .host import CommandResult, run_command, tail


Runner = Callable[[List[str]], CommandResult]


class GroupResource(BaseResource):
    kind = "group"
    actions = ("create", "remove", ACTION_NOTHING)
    default_action = "create"

    def __init__(
        self,
        name: str,
        gid: Optional[int] = None,
        members: Optional[Sequence[str]] = None,
        append: bool = True,
        system: bool = False,
        timeout: int = 60,
        runner: Optional[Runner] = None,
        common: Optional[CommonProps] = None,
    ):
        super().__init__(common)
        self.name = name
        self.gid = gid
        self.members = list(members or [])
        self.append = append
        self.system = system
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
            raise ApplyError(f"{' '.join(argv)} falló ({result.returncode}): {tail(result.output)}")

    def entry(self) -> Optional[List[str]]:
        """(name, x, gid, miembros) de getent group, o None si no existe."""
        result = self._run(["getent", "group", self.name])
        if not result.ok:
            return None
        fields = result.stdout.strip().split(":")
        return fields if len(fields) >= 4 else None

    def _sync_members(self, current: List[str]) -> List[str]:
        changes = []
        for member in self.members:
            if member not in current:
                self._must(["usermod", "-aG", self.name, member])
                changes.append(f"+{member}")
        if not self.append:
            for member in current:
                if member not in self.members:
                    self._must(["gpasswd", "-d", member, self.name])
                    changes.append(f"-{member}")
        return changes

    def _apply_action(self, action: str):
        if action == ACTION_NOTHING:
            return self.unchanged(action, "action :nothing")

        fields = self.entry()

        if action == "remove":
            if fields is None:
                return self.unchanged(action)
            self._must(["groupdel", self.name])
            return self.updated(action, "eliminado")

        reasons = []
        if fields is None:
            argv = ["groupadd"]
            if self.system:
                argv.append("-r")
            if self.gid is not None:
                argv += ["-g", str(self.gid)]
            self._must(argv + [self.name])
            reasons.append("creado")
            current: List[str] = []
        else:
            if self.gid is not None and fields[2] != str(self.gid):
                self._must(["groupmod", "-g", str(self.gid), self.name])
                reasons.append(f"gid {self.gid}")
            current = [m for m in fields[3].split(",") if m]

        changes = self._sync_members(current)
        if changes:
            reasons.append("miembros " + " ".join(changes))
        if not reasons:
            return self.unchanged(action)
        return self.updated(action, ", ".join(reasons))
