"""
Módulo Host - helpers compartidos por los recursos (comandos, archivos, permisos)

Los helpers lanzan ApplyError u OSError; BaseResource.apply los convierte en
ApplyResult.failed. Ningún helper imprime: los eventos los emite el engine.
"""

import difflib
import hashlib
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from forja.core.errors import ApplyError


@dataclass
class CommandResult:
    """Resultado de un comando del sistema"""
    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return ((self.stdout or "") + (self.stderr or "")).strip()


def run_command(
    command: Union[str, Sequence[str]],
    cwd: Optional[Path] = None,
    timeout: int = 30,
    env: Optional[Dict[str, str]] = None,
) -> CommandResult:
    """
    Ejecuta un comando del sistema

    Args:
        command: Cadena (se ejecuta con /bin/sh -c) o lista con comando y argumentos
        cwd: Directorio de trabajo
        timeout: Timeout en segundos
        env: Variables de entorno adicionales (se suman a las del proceso)

    Returns:
        CommandResult; lanza ApplyError si el comando no existe o excede el timeout
    """
    if isinstance(command, str):
        argv: List[str] = ["/bin/sh", "-c", command]
        label = command
    else:
        argv = list(command)
        label = " ".join(argv)

    full_env = None
    if env:
        full_env = dict(os.environ)
        full_env.update({k: str(v) for k, v in env.items()})

    try:
        r = subprocess.run(
            argv,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=full_env,
            check=False,
        )
    except subprocess.TimeoutExpired:
        raise ApplyError(f"Timeout ({timeout}s) ejecutando: {label}")
    except FileNotFoundError:
        raise ApplyError(f"Comando no encontrado: {argv[0]}")
    return CommandResult(label, r.returncode, r.stdout or "", r.stderr or "")


def tail(text: str, lines: int = 5) -> str:
    """Últimas líneas no vacías de una salida (para motivos de fallo)."""
    kept = [line for line in (text or "").splitlines() if line.strip()]
    return "\n".join(kept[-lines:])


def read_bytes(path: Path) -> Optional[bytes]:
    """Contenido del archivo o None si no existe."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


def file_mode(path: Path) -> Optional[int]:
    """Permisos (bits 0o777) o None si no existe."""
    try:
        return path.stat().st_mode & 0o777
    except FileNotFoundError:
        return None


def sha256_file(path: Path) -> Optional[str]:
    """sha256 hex del archivo o None si no existe."""
    if not path.is_file():
        return None
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def parse_mode(value: Union[None, int, str]) -> Optional[int]:
    """Acepta 0o644, 420, '644' o '0644'."""
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value), 8)
    except ValueError:
        raise ApplyError(f"Modo inválido: {value!r} (usa notación octal, ej: 0644)")


def diff_text(old: bytes, new: bytes, path: Path) -> str:
    """Diff unificado entre contenido actual y deseado (vacío si es binario)."""
    try:
        old_lines = old.decode("utf-8").splitlines(keepends=True)
        new_lines = new.decode("utf-8").splitlines(keepends=True)
    except UnicodeDecodeError:
        return ""
    return "".join(difflib.unified_diff(old_lines, new_lines, f"{path} (actual)", f"{path} (deseado)"))


def write_atomic(path: Path, data: bytes, mode: Optional[int] = None) -> None:
    """Escribe en un temporal del mismo directorio y lo renombra sobre el destino."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        if mode is not None:
            os.chmod(tmp, mode)
        elif path.exists():
            os.chmod(tmp, path.stat().st_mode & 0o7777)
        else:
            # mkstemp crea con 0600; un archivo nuevo respeta el umask
            umask = os.umask(0)
            os.umask(umask)
            os.chmod(tmp, 0o666 & ~umask)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def ensure_file_content(path: Path, data: bytes, mode: Optional[int] = None) -> Optional[str]:
    """
    Converge un archivo al contenido y modo deseados

    Returns:
        None si ya estaba al día; si no, el motivo del cambio
    """
    current = read_bytes(path)
    if current is None:
        write_atomic(path, data, mode)
        return "creado"

    if current != data:
        write_atomic(path, data, mode)
        return "contenido actualizado"

    if mode is not None and file_mode(path) != mode:
        os.chmod(path, mode)
        return f"modo {oct(mode)}"

    return None


def remove_path(path: Path, recursive: bool = False) -> bool:
    """
    Elimina archivo, enlace o directorio

    Returns:
        True si existía y se eliminó
    """
    if path.is_symlink() or path.is_file():
        path.unlink()
        return True
    if path.is_dir():
        if recursive:
            shutil.rmtree(path)
        else:
            path.rmdir()
        return True
    return False
