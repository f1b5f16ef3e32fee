"""
Aplicación CLI de forja.

Solo compone comandos; la lógica vive en core, loader y providers.
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from forja import __version__
from forja.core.engine import RunSummary, build_index, converge
from forja.core.errors import ForjaError
from forja.core.events import ConsoleEventSink, EventSink, JsonLinesEventSink, MultiEventSink
from forja.core.resources import BaseResource
from forja.core.runtime import ForjaSettings, load_settings, project_base
from forja.loader import RecipeLoader, describe_predicate
from forja.providers import ALL_KINDS

app = typer.Typer(
    name="forja",
    help="forja - Convergencia declarativa de hosts",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def _load_env(recipe: Optional[Path] = None) -> None:
    """Carga el .env del proyecto (FORJA_PROJECT_ROOT o directorio con forja.yaml)."""
    start = recipe.resolve().parent if recipe else None
    base = project_base(start)
    if base is not None:
        env_file = base / ".env"
        if env_file.exists():
            load_dotenv(env_file)


def _fail(title: str, message: str) -> None:
    console.print(Panel.fit(f"[red]✘[/red] {escape(message)}", title=f"[bold red]{title}[/bold red]", border_style="red"))
    raise typer.Exit(1)


def _prepare(recipe: Path, **overrides) -> tuple:
    _load_env(recipe)
    try:
        settings = load_settings(**overrides)
        resources = RecipeLoader(settings).load(recipe)
    except ForjaError as e:
        _fail("Receta inválida", str(e))
    return settings, resources


def _print_summary(summary: RunSummary) -> None:
    table = Table(title="Resumen de la ejecución", show_header=True, header_style="bold cyan")
    table.add_column("Métrica", style="cyan")
    table.add_column("Valor", justify="right")
    table.add_row("Aplicados", str(summary.applied))
    table.add_row("Sin cambios", str(summary.unchanged))
    table.add_row("Omitidos", str(summary.skipped))
    table.add_row("Fallidos", f"[red]{summary.failed}[/red]" if summary.failed else "0")
    table.add_row("Fallos ignorados", str(summary.ignored_failures))
    table.add_row("Notificaciones disparadas", str(summary.notifications_fired))
    table.add_row("Acciones vía notificación", str(summary.via_notification))
    console.print(table)

    if summary.aborted:
        console.print(f"[red]✘[/red] Ejecución abortada: {escape(summary.error or '')}")
    for rid, reason in summary.failures:
        console.print(f"  [red]✘[/red] {escape(rid)}: {escape(reason)}")

    if summary.success:
        console.print("[green]✓[/green] Convergencia completada")
    else:
        console.print("[red]✘[/red] La convergencia terminó con fallos")


def _sink(settings: ForjaSettings, quiet: bool) -> EventSink:
    sinks: List[EventSink] = []
    if not quiet:
        sinks.append(ConsoleEventSink(console, verbose=settings.verbose))
    if settings.log_file:
        sinks.append(JsonLinesEventSink(settings.log_file))
    return MultiEventSink(*sinks)


@app.command()
def apply(
    recipe: Path = typer.Argument(..., help="Receta YAML a converger"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Archivo JSON lines de eventos"),
    as_json: bool = typer.Option(False, "--json", help="Imprime el resumen como JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Muestra también started/consumed"),
):
    """Converge el host al estado declarado en la receta"""
    settings, resources = _prepare(recipe, log_file=log_file, verbose=verbose or None)

    events = _sink(settings, quiet=as_json)
    try:
        summary = converge(resources, events)
    finally:
        events.close()

    if as_json:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
    else:
        _print_summary(summary)
    raise typer.Exit(summary.exit_code)


@app.command()
def validate(recipe: Path = typer.Argument(..., help="Receta YAML a validar")):
    """Carga la receta y ejecuta la validación (sin aplicar nada)"""
    _, resources = _prepare(recipe)
    try:
        index = build_index(resources)
    except ForjaError as e:
        _fail("Validación fallida", str(e))
    finally:
        for resource in resources:
            resource.release()
    console.print(f"[green]✓[/green] Receta válida: {len(index)} recursos")


def _describe(resource: BaseResource) -> List[str]:
    common = resource.common_props()
    guards = [f"not_if {describe_predicate(p)}" for p in common.not_if]
    guards += [f"only_if {describe_predicate(p)}" for p in common.only_if]
    notes = [f"{n.action} → {n.target} ({n.timing.value})" for n in common.notifications]
    notes += [f"← {n.target} {n.action} ({n.timing.value})" for n in common.subscriptions]
    return [
        str(resource.identity()),
        common.action or resource.default_action,
        "\n".join(guards) or "-",
        "\n".join(notes) or "-",
    ]


@app.command()
def resources(recipe: Path = typer.Argument(..., help="Receta YAML")):
    """Lista los recursos de la receta con sus guardas y notificaciones"""
    _, loaded = _prepare(recipe)
    table = Table(title=f"Recursos en {recipe.name}", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Recurso", style="cyan")
    table.add_column("Acción", style="green")
    table.add_column("Guardas", style="yellow")
    table.add_column("Notificaciones")
    for position, resource in enumerate(loaded, start=1):
        table.add_row(str(position), *(escape(cell) for cell in _describe(resource)))
        resource.release()
    console.print(table)


@app.command()
def version():
    """Muestra la versión de forja"""
    settings = load_settings()
    console.print(Panel.fit(
        "[bold cyan]forja[/bold cyan]\n"
        "[dim]Convergencia declarativa de hosts[/dim]\n\n"
        f"[bold]Versión:[/bold] {__version__}\n"
        f"[bold]Estado:[/bold] {settings.state_dir}",
        border_style="cyan"
    ))


@app.command()
def info():
    """Muestra los kinds de recurso disponibles"""
    console.print(Panel.fit("[bold cyan]forja - Información[/bold cyan]", border_style="cyan"))
    table = Table(title="Kinds disponibles", show_header=True, header_style="bold cyan")
    table.add_column("Kind", style="cyan", width=15)
    table.add_column("Acción por defecto", style="green")
    table.add_column("Acciones", style="yellow")
    for kind, cls in ALL_KINDS.items():
        table.add_row(kind, cls.default_action, ", ".join(cls.actions))
    console.print(table)
    console.print("\n[dim]Usa 'forja apply <receta.yaml>' para converger un host[/dim]")


def main():
    app()
