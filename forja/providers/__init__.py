"""
Providers: implementaciones concretas de recursos.

Cada kind es una subclase de BaseResource; añadir un kind es añadir una clase
y registrarla en ALL_KINDS, sin tocar el engine.
"""

from .file import FileResource
from .directory import DirectoryResource
from .link import LinkResource
from .execute import ExecuteResource
from .template import TemplateResource
from .remote_file import RemoteFileResource
from .systemd_unit import SystemdUnitResource
from .block import BlockResource
from .package import PackageResource
from .user import UserResource
from .group import GroupResource

__all__ = [
    "FileResource",
    "DirectoryResource",
    "LinkResource",
    "ExecuteResource",
    "TemplateResource",
    "RemoteFileResource",
    "SystemdUnitResource",
    "BlockResource",
    "PackageResource",
    "UserResource",
    "GroupResource",
    "ALL_KINDS",
]

# Registro de todos los kinds disponibles
ALL_KINDS = {
    cls.kind: cls
    for cls in (
        FileResource,
        DirectoryResource,
        LinkResource,
        ExecuteResource,
        TemplateResource,
        RemoteFileResource,
        SystemdUnitResource,
        BlockResource,
        PackageResource,
        UserResource,
        GroupResource,
    )
}
