"""
Recurso directory.
"""

import os
from pathlib import Path
from typing import Optional, Union

from forja.core.errors import ApplyError
from forja.core.resources import BaseResource, CommonProps

from .host import file_mode, remove_path


class DirectoryResource(BaseResource):
    kind = "directory"
    actions = ("create", "delete")
    default_action = "create"

    def __init__(
        self,
        path: Union[str, Path],
        mode: Optional[int] = None,
        recursive: bool = False,
        common: Optional[CommonProps] = None,
    ):
        super().__init__(common)
        self.path = Path(path)
        self.mode = mode
        self.recursive = recursive

    @property
    def display_name(self) -> str:
        return str(self.path)

    def _apply_action(self, action: str):
        if action == "delete":
            if not self.path.exists() and not self.path.is_symlink():
                return self.unchanged(action)
            if not self.path.is_dir():
                raise ApplyError(f"{self.path} existe y no es un directorio")
            remove_path(self.path, recursive=self.recursive)
            return self.updated(action, "eliminado")

        if self.path.exists():
            if not self.path.is_dir():
                raise ApplyError(f"{self.path} existe y no es un directorio")
            if self.mode is not None and file_mode(self.path) != self.mode:
                os.chmod(self.path, self.mode)
                return self.updated(action, f"modo {oct(self.mode)}")
            return self.unchanged(action)

        if self.recursive:
            self.path.mkdir(parents=True)
        else:
            # Sin recursive el padre debe existir
            self.path.mkdir()
        if self.mode is not None:
            os.chmod(self.path, self.mode)
        return self.updated(action, "creado")
