"""
Eventos de ejecución: un evento por transición de recurso y uno por notificación.

No hay logger global: el engine recibe un EventSink inyectado y el llamador
(CLI, tests) es dueño de su ciclo de vida (abrir → usar → close()).
El transporte concreto (consola rich, archivo JSON lines) vive aquí como
implementaciones intercambiables del protocolo.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from rich.console import Console
from rich.markup import escape


class EventType(str, Enum):
    STARTED = "started"
    SKIPPED = "skipped"
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    FAILED = "failed"
    CONSUMED = "consumed"
    NOTIFIED = "notified"
    ABORTED = "aborted"
    FINISHED = "finished"


@dataclass(frozen=True)
class RunEvent:
    """Evento estructurado emitido por el engine."""
    type: EventType
    resource: Optional[str] = None
    action: Optional[str] = None
    reason: Optional[str] = None
    source: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"event": self.type.value, "at": self.at.isoformat()}
        for key in ("resource", "action", "reason", "source"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        if self.data:
            out["data"] = dict(self.data)
        return out


class EventSink(Protocol):
    """Protocolo: quien recibe los eventos del engine."""
    def emit(self, event: RunEvent) -> None:
        ...

    def close(self) -> None:
        ...


class NullEventSink:
    """Descarta todos los eventos."""

    def emit(self, event: RunEvent) -> None:
        return None

    def close(self) -> None:
        return None


class MemoryEventSink:
    """Acumula eventos en memoria (tests, resúmenes)."""

    def __init__(self):
        self.events: List[RunEvent] = []
        self.closed = False

    def emit(self, event: RunEvent) -> None:
        self.events.append(event)

    def close(self) -> None:
        self.closed = True

    def of_type(self, event_type: EventType) -> List[RunEvent]:
        return [e for e in self.events if e.type == event_type]

    def types(self) -> List[EventType]:
        return [e.type for e in self.events]


class ConsoleEventSink:
    """Muestra eventos en consola con el formato habitual de la CLI."""

    _STYLES = {
        EventType.SKIPPED: "[yellow]⚠[/yellow]",
        EventType.UNCHANGED: "[dim]·[/dim]",
        EventType.UPDATED: "[green]✓[/green]",
        EventType.FAILED: "[red]✘[/red]",
        EventType.CONSUMED: "[dim]↷[/dim]",
        EventType.NOTIFIED: "[cyan]→[/cyan]",
    }

    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        self.console = console or Console()
        self.verbose = verbose

    def emit(self, event: RunEvent) -> None:
        if event.type == EventType.STARTED:
            total = event.data.get("resources", 0)
            self.console.print(f"[bold cyan]Convergiendo {total} recurso(s)...[/bold cyan]")
            return
        if event.type == EventType.ABORTED:
            self.console.print(f"[red]✘ Ejecución abortada:[/red] {escape(event.reason or '')}")
            return
        if event.type == EventType.FINISHED:
            return
        if event.type == EventType.UNCHANGED and not self.verbose:
            return

        mark = self._STYLES.get(event.type, "")
        resource = escape(event.resource or "")
        action = escape(event.action or "")
        if event.type == EventType.NOTIFIED:
            self.console.print(
                f"  {mark} [cyan]{resource}[/cyan] ← {action} "
                f"[dim](desde {escape(event.source or '')})[/dim]"
            )
            return

        line = f"  {mark} [cyan]{resource}[/cyan]"
        if event.action:
            line += f" {action}"
        if event.reason:
            style = "red" if event.type == EventType.FAILED else "dim"
            line += f" [{style}]({escape(event.reason or '')})[/{style}]"
        self.console.print(line)

    def close(self) -> None:
        return None


class JsonLinesEventSink:
    """Escribe un objeto JSON por línea en un archivo (modo append)."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = open(self.path, "a", encoding="utf-8")

    def emit(self, event: RunEvent) -> None:
        if self._handle.closed:
            return
        self._handle.write(json.dumps(event.to_dict(), ensure_ascii=False) + "\n")
        self._handle.flush()

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()


class MultiEventSink:
    """Reenvía cada evento a varios sinks (ej: consola + archivo)."""

    def __init__(self, *sinks: EventSink):
        self.sinks = list(sinks)

    def emit(self, event: RunEvent) -> None:
        for sink in self.sinks:
            sink.emit(event)

    def close(self) -> None:
        for sink in self.sinks:
            sink.close()
