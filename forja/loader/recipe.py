"""
Loader y parser de recetas
Carga YAML, lo valida con modelos Pydantic y construye la lista de recursos
en orden de declaración.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from forja.core.errors import ConfigError, ValidationError
from forja.core.resources import BaseResource, CommonProps, Notification, ResourceId
from forja.core.runtime.settings import ForjaSettings, load_settings
from forja.providers import (
    DirectoryResource,
    ExecuteResource,
    FileResource,
    GroupResource,
    LinkResource,
    PackageResource,
    RemoteFileResource,
    SystemdUnitResource,
    TemplateResource,
    UserResource,
)

from .guards import command_predicate
from .models import SPECS, CommonSpec, NotificationSpec, RecipeSpec


def _notification(spec: NotificationSpec) -> Notification:
    return Notification(ResourceId.parse(spec.target), spec.action, spec.timing)


class RecipeLoader:
    """Carga una receta YAML y construye los recursos"""

    def __init__(self, settings: Optional[ForjaSettings] = None):
        self.settings = settings or load_settings()
        self.base_dir = Path.cwd()
        self.variables: Dict[str, Any] = {}

    def load(self, recipe_file: Path) -> List[BaseResource]:
        """
        Carga una receta completa

        Args:
            recipe_file: Ruta del archivo YAML

        Returns:
            Recursos en orden de declaración; lanza ConfigError si la receta es inválida
        """
        recipe_file = Path(recipe_file)
        if not recipe_file.exists():
            raise ConfigError(f"Receta no encontrada: {recipe_file}")

        try:
            with open(recipe_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML inválido en {recipe_file}: {e}") from e

        self.base_dir = recipe_file.resolve().parent
        return self.load_data(data, origin=str(recipe_file))

    def load_data(self, data: Any, origin: str = "<receta>") -> List[BaseResource]:
        """Construye recursos desde una estructura ya parseada (dict)."""
        if not isinstance(data, dict):
            raise ConfigError(f"{origin}: la receta debe ser un mapa con 'resources'")
        try:
            recipe = RecipeSpec(**data)
        except PydanticValidationError as e:
            raise ConfigError(f"{origin}: {e}") from e

        self.variables = dict(recipe.variables)
        resources: List[BaseResource] = []
        for position, item in enumerate(recipe.resources, start=1):
            resources.append(self._build_item(item, position, origin))
        return resources

    def _build_item(self, item: Dict[str, Any], position: int, origin: str) -> BaseResource:
        if len(item) != 1:
            raise ConfigError(
                f"{origin}: recurso #{position} debe tener exactamente un kind (encontrado: {', '.join(item) or 'ninguno'})"
            )
        kind, fields = next(iter(item.items()))
        spec_cls = SPECS.get(kind)
        if spec_cls is None:
            raise ConfigError(f"{origin}: recurso #{position} con kind desconocido '{kind}' (disponibles: {', '.join(SPECS)})")

        try:
            spec = spec_cls(**(fields or {}))
            return self._build(kind, spec)
        except PydanticValidationError as e:
            raise ConfigError(f"{origin}: {kind} #{position}: {e}") from e
        except (ValidationError, ValueError) as e:
            raise ConfigError(f"{origin}: {kind} #{position}: {e}") from e

    def _resolve(self, path: Optional[str]) -> Optional[Path]:
        if path is None:
            return None
        p = Path(path).expanduser()
        return p if p.is_absolute() else self.base_dir / p

    def _common(self, spec: CommonSpec) -> CommonProps:
        timeout = self.settings.guard_timeout
        return CommonProps(
            action=spec.action or "",
            only_if=[command_predicate(c, timeout=timeout, cwd=self.base_dir) for c in spec.only_if],
            not_if=[command_predicate(c, timeout=timeout, cwd=self.base_dir) for c in spec.not_if],
            notifications=[_notification(n) for n in spec.notifies],
            subscriptions=[_notification(n) for n in spec.subscribes],
            ignore_failure=spec.ignore_failure,
        )

    def _build(self, kind: str, spec: CommonSpec) -> BaseResource:
        common = self._common(spec)

        if kind == "file":
            return FileResource(spec.path, content=spec.content, mode=spec.mode, common=common)
        if kind == "directory":
            return DirectoryResource(spec.path, mode=spec.mode, recursive=spec.recursive, common=common)
        if kind == "link":
            return LinkResource(spec.path, spec.target, common=common)
        if kind == "execute":
            return ExecuteResource(
                spec.name,
                command=spec.command,
                cwd=self._resolve(spec.cwd),
                environment=spec.environment,
                creates=self._resolve(spec.creates),
                timeout=spec.timeout or self.settings.command_timeout,
                common=common,
            )
        if kind == "template":
            variables = dict(self.variables)
            variables.update(spec.variables)
            return TemplateResource(
                spec.path,
                source=self._resolve(spec.source),
                content=spec.content,
                variables=variables,
                mode=spec.mode,
                common=common,
            )
        if kind == "remote_file":
            return RemoteFileResource(
                spec.path,
                spec.source,
                checksum=spec.checksum,
                mode=spec.mode,
                headers=spec.headers,
                timeout=self.settings.http_timeout,
                common=common,
            )
        if kind == "systemd_unit":
            return SystemdUnitResource(
                spec.name,
                content=spec.content,
                timeout=self.settings.command_timeout,
                common=common,
            )
        if kind == "package":
            return PackageResource(
                spec.name,
                version=spec.version,
                timeout=self.settings.command_timeout,
                common=common,
            )
        if kind == "user":
            return UserResource(
                spec.name,
                uid=spec.uid,
                home=spec.home,
                shell=spec.shell,
                comment=spec.comment,
                groups=spec.groups,
                system=spec.system,
                manage_home=spec.manage_home,
                timeout=self.settings.command_timeout,
                common=common,
            )
        if kind == "group":
            return GroupResource(
                spec.name,
                gid=spec.gid,
                members=spec.members,
                append=spec.append,
                system=spec.system,
                timeout=self.settings.command_timeout,
                common=common,
            )
        raise ConfigError(f"kind sin constructor: {kind}")


def load_recipe(recipe_file: Path, settings: Optional[ForjaSettings] = None) -> List[BaseResource]:
    """Atajo: carga una receta YAML con la configuración dada."""
    return RecipeLoader(settings).load(recipe_file)
