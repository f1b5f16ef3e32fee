"""
Configuración de ejecución (variables de entorno FORJA_*).

La CLI carga el .env del proyecto con python-dotenv antes de llamar a
load_settings(); el core solo valida valores.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from forja.core.errors import ConfigError
from forja.core.runtime.resolver import state_root


class ForjaSettings(BaseModel):
    command_timeout: int = Field(300, ge=1, description="Timeout (s) de recursos execute/systemd")
    guard_timeout: int = Field(30, ge=1, description="Timeout (s) de guardas only_if/not_if")
    http_timeout: float = Field(60.0, gt=0, description="Timeout (s) de descargas remote_file")
    log_file: Optional[Path] = Field(None, description="Archivo JSON lines de eventos")
    state_dir: Path = Field(..., description="Directorio de estado")
    verbose: bool = False


_ENV_KEYS = {
    "command_timeout": "FORJA_COMMAND_TIMEOUT",
    "guard_timeout": "FORJA_GUARD_TIMEOUT",
    "http_timeout": "FORJA_HTTP_TIMEOUT",
    "log_file": "FORJA_LOG_FILE",
    "verbose": "FORJA_VERBOSE",
}


def load_settings(env: Optional[Mapping[str, str]] = None, **overrides) -> ForjaSettings:
    """
    Construye ForjaSettings desde el entorno; los overrides (CLI) tienen prioridad.
    Valores inválidos → ConfigError.
    """
    env = os.environ if env is None else env

    data = {"state_dir": state_root(env)}
    for field_name, key in _ENV_KEYS.items():
        value = env.get(key, "").strip()
        if value:
            data[field_name] = value
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ForjaSettings(**data)
    except PydanticValidationError as e:
        raise ConfigError(f"Configuración inválida: {e}") from e
