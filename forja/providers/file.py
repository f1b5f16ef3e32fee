"""
Recurso file: contenido y permisos de un archivo.
"""

from pathlib import Path
from typing import Optional, Union

from forja.core.resources import BaseResource, CommonProps

from .host import diff_text, ensure_file_content, read_bytes, remove_path


class FileResource(BaseResource):
    """Archivo con contenido exacto (create, create_if_missing, delete)."""

    kind = "file"
    actions = ("create", "create_if_missing", "delete")
    default_action = "create"

    def __init__(
        self,
        path: Union[str, Path],
        content: Union[str, bytes] = "",
        mode: Optional[int] = None,
        common: Optional[CommonProps] = None,
    ):
        super().__init__(common)
        self.path = Path(path)
        self.content = content
        self.mode = mode
        self.last_diff = ""

    @property
    def display_name(self) -> str:
        return str(self.path)

    def desired_bytes(self) -> bytes:
        if isinstance(self.content, bytes):
            return self.content
        return self.content.encode("utf-8")

    def _apply_action(self, action: str):
        if action == "delete":
            if remove_path(self.path):
                return self.updated(action, "eliminado")
            return self.unchanged(action)

        if action == "create_if_missing" and self.path.exists():
            return self.unchanged(action, "ya existe")

        data = self.desired_bytes()
        current = read_bytes(self.path)
        reason = ensure_file_content(self.path, data, self.mode)
        if reason is None:
            return self.unchanged(action)
        if current is not None and current != data:
            self.last_diff = diff_text(current, data, self.path)
        return self.updated(action, reason)

    def release(self) -> None:
        self.content = b""
        self.last_diff = ""
        super().release()
