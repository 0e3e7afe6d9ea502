"""Plumpkin CLI - inspect and exercise an import map from the command line."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from . import __version__
from .console import console
from .console import err_console
from .logging_setup import init_json_logging
from .module_resolution import CollectingDiagnosticSink
from .module_resolution import ConfigurationNotFound
from .module_resolution import FileConfigSource
from .module_resolution import ImportMapError
from .module_resolution import ImportMapResolver
from .module_resolution import RemoteImportBlocked
from .module_resolution import SpecifierNotFound


def _hint_for(error: ImportMapError) -> str | None:
    if isinstance(error, ConfigurationNotFound):
        return "Pass --config PATH or set PLUMPKIN_CONFIG"
    if isinstance(error, SpecifierNotFound):
        return "Add the specifier (or a prefix ending in /) under imports"
    if isinstance(error, RemoteImportBlocked):
        return 'Remote targets need "importmapRemote": true'
    return None


def _fail(ctx: click.Context, message: str, hint: str | None) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
    if hint:
        err_console.print(f"[dim]{escape(hint)}[/dim]")
    ctx.exit(1)


def _run(ctx: click.Context, coro, loading: bool = False):
    """Run a coroutine and turn import map errors into a clean exit.

    With loading=True, errors raised by the module being loaded are reported the same way.
    """
    try:
        return asyncio.run(coro)
    except ImportMapError as e:
        _fail(ctx, str(e), _hint_for(e))
    except Exception as e:
        if not loading:
            raise
        _fail(ctx, f"{type(e).__name__}: {e}", "The module raised while loading; fix it or run without --load")


def _build_resolver(ctx: click.Context, diagnostics=None) -> ImportMapResolver:
    config_path: Path = ctx.obj["config"]
    return ImportMapResolver(FileConfigSource(config_path, section=ctx.obj["section"]), diagnostics=diagnostics)


@click.group(invoke_without_command=True)
@click.version_option(__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    envvar="PLUMPKIN_CONFIG",
    default="package.json",
    show_default=True,
    help="Configuration file (JSON, YAML or TOML)",
)
@click.option("--section", default=None, help="Dotted table holding the configuration (TOML only, e.g. tool.plumpkin)")
@click.option("--log-file", type=click.Path(path_type=Path, dir_okay=False), default=None, help="Write JSONL logs here")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Log level for --log-file",
)
@click.pass_context
def cli(ctx, config_path, section, log_file, log_level):
    """Plumpkin - resolve module specifiers through an import map."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = config_path
    ctx.obj["section"] = section

    if log_file:
        init_json_logging(log_file, log_level)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@cli.command(name="resolve")
@click.argument("specifier")
@click.option("--referrer", default=None, help="Location of the importing module (selects scopes)")
@click.option("--load", "load_module", is_flag=True, help="Load the module and list its public names")
@click.pass_context
def resolve_cmd(ctx, specifier, referrer, load_module):
    """Resolve SPECIFIER to a location."""
    resolver = _build_resolver(ctx)

    async def _resolve():
        location = await resolver.locate(specifier, referrer)
        module = await resolver.resolve(specifier, referrer) if load_module else None
        return location, module

    location, module = _run(ctx, _resolve(), loading=load_module)
    console.print(f"[cyan]{specifier}[/cyan] -> [green]{location}[/green]", soft_wrap=True)

    if module is not None:
        names = sorted(name for name in vars(module) if not name.startswith("_"))
        console.print(f"[bold]Exports:[/bold] {', '.join(names) if names else '[dim](none)[/dim]'}")


@cli.command(name="check")
@click.pass_context
def check_cmd(ctx):
    """Validate the import map and report warnings."""
    sink = CollectingDiagnosticSink()
    resolver = _build_resolver(ctx, diagnostics=sink)
    _run(ctx, resolver.get_import_map())

    if not sink.messages:
        console.print("[green]✓ Import map OK[/green]")
        return

    for message in sink.messages:
        console.print(f"[yellow]⚠️  {message}[/yellow]", soft_wrap=True)
    console.print(f"\n[yellow]{len(sink)} warning(s)[/yellow]")
    ctx.exit(1)


@cli.command(name="show")
@click.pass_context
def show_cmd(ctx):
    """Show imports and scopes."""
    resolver = _build_resolver(ctx)
    import_map = _run(ctx, resolver.get_import_map())

    if not import_map.imports and not import_map.scopes:
        console.print(f"[dim]No import map found under '{resolver.state.map_field_name}'.[/dim]")
    else:
        table = Table(title="Imports")
        table.add_column("Specifier", style="cyan")
        table.add_column("Target", style="green")
        for key in sorted(import_map.imports):
            table.add_row(key, import_map.imports[key])
        console.print(table)

        for prefix in sorted(import_map.scopes):
            scope_table = Table(title=f"Scope: {prefix}")
            scope_table.add_column("Specifier", style="cyan")
            scope_table.add_column("Target", style="green")
            for key in sorted(import_map.scopes[prefix]):
                scope_table.add_row(key, import_map.scopes[prefix][key])
            console.print(scope_table)

    console.print(f"[dim]Field: {resolver.state.map_field_name}[/dim]")
    remote = "[green]enabled[/green]" if resolver.state.remote_enabled else "[yellow]disabled[/yellow]"
    console.print(f"[dim]Remote imports:[/dim] {remote}")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
