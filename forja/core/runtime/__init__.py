"""
Runtime: resolución de rutas de estado y configuración de ejecución.
"""

from forja.core.runtime.resolver import state_root, project_base
from forja.core.runtime.settings import ForjaSettings, load_settings

__all__ = ["state_root", "project_base", "ForjaSettings", "load_settings"]
