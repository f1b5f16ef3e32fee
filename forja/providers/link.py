"""
Recurso link: enlace simbólico path → target.
"""

import os
from pathlib import Path
from typing import Optional, Union

from forja.core.errors import ApplyError
from forja.core.resources import BaseResource, CommonProps


def _normalize(target: str) -> str:
    return os.path.normpath(os.path.expanduser(target))


class LinkResource(BaseResource):
    kind = "link"
    actions = ("create", "delete")
    default_action = "create"

    def __init__(
        self,
        path: Union[str, Path],
        target: Union[str, Path],
        common: Optional[CommonProps] = None,
    ):
        super().__init__(common)
        self.path = Path(path)
        self.target = str(target)

    @property
    def display_name(self) -> str:
        return str(self.path)

    def _apply_action(self, action: str):
        if action == "delete":
            if not self.path.is_symlink():
                if self.path.exists():
                    raise ApplyError(f"{self.path} existe y no es un enlace simbólico")
                return self.unchanged(action)
            self.path.unlink()
            return self.updated(action, "eliminado")

        if self.path.is_symlink():
            if _normalize(os.readlink(self.path)) == _normalize(self.target):
                return self.unchanged(action)
            self.path.unlink()
            reason = f"redirigido a {self.target}"
        elif self.path.exists():
            raise ApplyError(f"{self.path} existe y no es un enlace simbólico; no se reemplaza")
        else:
            reason = f"creado → {self.target}"

        self.path.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(self.target, self.path)
        return self.updated(action, reason)
