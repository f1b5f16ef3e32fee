"""
Recurso template: archivo renderizado con Jinja2 (variables estrictas).

La fuente puede ser un archivo (`source`) o contenido inline (`content`).
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, StrictUndefined, TemplateError

from forja.core.errors import ApplyError
from forja.core.resources import BaseResource, CommonProps

from .host import ensure_file_content, remove_path


class TemplateResource(BaseResource):
    kind = "template"
    actions = ("create", "delete")
    default_action = "create"

    def __init__(
        self,
        path: Union[str, Path],
        source: Optional[Union[str, Path]] = None,
        content: Optional[str] = None,
        variables: Optional[Dict[str, Any]] = None,
        mode: Optional[int] = None,
        common: Optional[CommonProps] = None,
    ):
        super().__init__(common)
        if (source is None) == (content is None):
            raise ValueError("template necesita exactamente uno de: source, content")
        self.path = Path(path)
        self.source = Path(source) if source is not None else None
        self.content = content
        self.variables = dict(variables or {})
        self.mode = mode
        self._env = Environment(undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False)

    @property
    def display_name(self) -> str:
        return str(self.path)

    def render(self) -> str:
        if self.source is not None:
            try:
                text = self.source.read_text(encoding="utf-8")
            except FileNotFoundError:
                raise ApplyError(f"Plantilla no encontrada: {self.source}")
        else:
            text = self.content or ""
        try:
            return self._env.from_string(text).render(**self.variables)
        except TemplateError as e:
            raise ApplyError(f"Error al renderizar {self.source or 'plantilla inline'}: {e}")

    def _apply_action(self, action: str):
        if action == "delete":
            if remove_path(self.path):
                return self.updated(action, "eliminado")
            return self.unchanged(action)

        reason = ensure_file_content(self.path, self.render().encode("utf-8"), self.mode)
        if reason is None:
            return self.unchanged(action)
        return self.updated(action, reason)

    def release(self) -> None:
        self.variables = {}
        self.content = None
        super().release()
