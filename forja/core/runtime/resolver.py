"""
Resolución de rutas de estado y proyecto.

- state_root(): directorio de estado/runtime (logs de eventos, descargas temporales).
- project_base(): directorio base del proyecto (donde vive forja.yaml y .env).

El core NO escribe en disco; solo expone estas rutas. Quien escribe (CLI/providers)
debe usar state_root() para estado persistente.
"""

import os
from pathlib import Path
from typing import Mapping, Optional


PROJECT_MARKER = "forja.yaml"


def state_root(env: Optional[Mapping[str, str]] = None) -> Path:
    """
    Directorio raíz del estado de forja.
    Resolución: FORJA_STATE_DIR → $XDG_STATE_HOME/forja → ~/.local/state/forja
    """
    env = os.environ if env is None else env

    explicit = env.get("FORJA_STATE_DIR", "").strip()
    if explicit:
        return Path(explicit).expanduser()

    xdg = env.get("XDG_STATE_HOME", "").strip()
    if xdg:
        return Path(xdg).expanduser() / "forja"

    return Path.home() / ".local" / "state" / "forja"


def project_base(start: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """
    Directorio base del proyecto.
    Resolución: FORJA_PROJECT_ROOT → primer directorio (desde start/cwd hacia arriba)
    que contenga forja.yaml; si no, None.
    """
    env = os.environ if env is None else env

    explicit = env.get("FORJA_PROJECT_ROOT", "").strip()
    if explicit:
        return Path(explicit).expanduser().resolve()

    origin = (start or Path.cwd()).resolve()
    for d in [origin] + list(origin.parents):
        if (d / PROJECT_MARKER).exists():
            return d
    return None
