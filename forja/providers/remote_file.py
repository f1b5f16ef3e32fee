"""
Recurso remote_file: archivo descargado por HTTP(S).

Idempotencia: con checksum (sha256) se compara sin descargar; sin checksum se
descarga y se compara el contenido con el archivo actual.
"""

import hashlib
from pathlib import Path
from typing import Dict, Optional, Union

import httpx

from forja.core.errors import ApplyError
from forja.core.resources import BaseResource, CommonProps

from .host import ensure_file_content, remove_path, sha256_file


class RemoteFileResource(BaseResource):
    kind = "remote_file"
    actions = ("create", "create_if_missing", "delete")
    default_action = "create"

    def __init__(
        self,
        path: Union[str, Path],
        source: str,
        checksum: Optional[str] = None,
        mode: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
        common: Optional[CommonProps] = None,
    ):
        super().__init__(common)
        self.path = Path(path)
        self.source = source
        self.checksum = checksum.lower() if checksum else None
        self.mode = mode
        self.headers = dict(headers or {})
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self.downloads = 0

    @property
    def display_name(self) -> str:
        return str(self.path)

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                headers=self.headers,
                transport=self._transport,
            )
        return self._client

    def download(self) -> bytes:
        try:
            response = self._http().get(self.source)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ApplyError(f"Descarga fallida {self.source}: HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            raise ApplyError(f"Descarga fallida {self.source}: {e}")
        self.downloads += 1
        data = response.content
        if self.checksum:
            actual = hashlib.sha256(data).hexdigest()
            if actual != self.checksum:
                raise ApplyError(
                    f"Checksum no coincide para {self.source}: esperado {self.checksum}, obtenido {actual}"
                )
        return data

    def _apply_action(self, action: str):
        if action == "delete":
            if remove_path(self.path):
                return self.updated(action, "eliminado")
            return self.unchanged(action)

        if action == "create_if_missing" and self.path.exists():
            return self.unchanged(action, "ya existe")

        if self.checksum and sha256_file(self.path) == self.checksum:
            reason = ensure_file_content(self.path, self.path.read_bytes(), self.mode)
            return self.updated(action, reason) if reason else self.unchanged(action)

        reason = ensure_file_content(self.path, self.download(), self.mode)
        if reason is None:
            return self.unchanged(action)
        return self.updated(action, reason)

    def release(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
        super().release()
