"""
Modelos de la receta declarativa (YAML → Pydantic).

Cada kind tiene su modelo; los campos comunes (action, guardas, notificaciones)
viven en CommonSpec.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from forja.core.errors import ValidationError
from forja.core.resources import ResourceId, Timing


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _octal_mode(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value), 8)
    except ValueError:
        raise ValueError(f"modo inválido {value!r}: usa notación octal (ej: '0644')")


class NotificationSpec(BaseModel):
    target: str = Field(..., description="Recurso destino en forma kind[name]")
    action: str = Field(..., description="Acción que el destino debe ejecutar")
    timing: Timing = Field(Timing.DELAYED)

    class Config:
        extra = "forbid"

    @field_validator("target")
    @classmethod
    def _check_target(cls, value: str) -> str:
        try:
            ResourceId.parse(value)
        except ValidationError as e:
            raise ValueError(str(e))
        return value


class CommonSpec(BaseModel):
    action: Optional[str] = None
    only_if: List[str] = Field(default_factory=list, description="Comandos; exit 0 = verdadero")
    not_if: List[str] = Field(default_factory=list, description="Comandos; exit 0 = verdadero")
    notifies: List[NotificationSpec] = Field(default_factory=list)
    subscribes: List[NotificationSpec] = Field(default_factory=list)
    ignore_failure: bool = False

    class Config:
        extra = "forbid"

    @field_validator("only_if", "not_if", "notifies", "subscribes", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> List[Any]:
        return _as_list(value)


class FileModeSpec(CommonSpec):
    mode: Optional[int] = None

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> Optional[int]:
        return _octal_mode(value)


class FileSpec(FileModeSpec):
    path: str
    content: str = ""


class DirectorySpec(FileModeSpec):
    path: str
    recursive: bool = False


class LinkSpec(CommonSpec):
    path: str
    target: str


class ExecuteSpec(CommonSpec):
    name: str
    command: Optional[str] = None
    cwd: Optional[str] = None
    environment: Dict[str, str] = Field(default_factory=dict)
    creates: Optional[str] = None
    timeout: Optional[int] = Field(None, ge=1)


class TemplateSpec(FileModeSpec):
    path: str
    source: Optional[str] = None
    content: Optional[str] = None
    variables: Dict[str, Any] = Field(default_factory=dict)


class RemoteFileSpec(FileModeSpec):
    path: str
    source: str
    checksum: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)


class SystemdUnitSpec(CommonSpec):
    name: str
    content: Optional[str] = None


class PackageSpec(CommonSpec):
    name: str
    version: Optional[str] = None


class UserSpec(CommonSpec):
    name: str
    uid: Optional[int] = Field(None, ge=0)
    home: Optional[str] = None
    shell: Optional[str] = None
    comment: Optional[str] = None
    groups: List[str] = Field(default_factory=list)
    system: bool = False
    manage_home: bool = True

    @field_validator("groups", mode="before")
    @classmethod
    def _listify_groups(cls, value: Any) -> List[Any]:
        return _as_list(value)


class GroupSpec(CommonSpec):
    name: str
    gid: Optional[int] = Field(None, ge=0)
    members: List[str] = Field(default_factory=list)
    append: bool = True
    system: bool = False

    @field_validator("members", mode="before")
    @classmethod
    def _listify_members(cls, value: Any) -> List[Any]:
        return _as_list(value)


class RecipeSpec(BaseModel):
    version: int = Field(1, description="Versión del esquema")
    variables: Dict[str, Any] = Field(default_factory=dict)
    resources: List[Dict[str, Union[Dict[str, Any], None]]] = Field(default_factory=list)

    class Config:
        extra = "forbid"


# kind → modelo de la receta (block solo existe vía API Python)
SPECS = {
    "file": FileSpec,
    "directory": DirectorySpec,
    "link": LinkSpec,
    "execute": ExecuteSpec,
    "template": TemplateSpec,
    "remote_file": RemoteFileSpec,
    "systemd_unit": SystemdUnitSpec,
    "package": PackageSpec,
    "user": UserSpec,
    "group": GroupSpec,
}
