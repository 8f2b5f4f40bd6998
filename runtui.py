#!/usr/bin/env python3
"""
run-tui - interactively assemble container run commands in the terminal
"""
import sys
import signal
import threading
import click
from rich.console import Console
from rich.text import Text
from rich.traceback import install

from catalog import Catalog
from committer import FlagSet, RunOptions, ContainerOptions, RunSelection, collect
from config import Config
from editor import EditorModel
from exceptions import ConfigurationError, CatalogError, SessionError, SessionCancelled, RunTUIError
from logger import setup_logger
from constants import APP_NAME, APP_VERSION, APP_DESCRIPTION, BEGIN_EDIT_PREFILL
from runner import run_tui

try:
    import pyperclip
    CLIPBOARD_AVAILABLE = True
except ImportError:
    CLIPBOARD_AVAILABLE = False

# Install rich traceback handler
install(show_locals=False)

console = Console()
logger = setup_logger(APP_NAME)


CANCEL_SIGNALS = tuple(getattr(signal, name) for name in ('SIGTERM', 'SIGHUP') if hasattr(signal, name))


def _cancel_on_signal(cancel_event: threading.Event):
    """Signal handler that asks the running session to stop at its next key wait"""
    def handler(signum, frame):
        cancel_event.set()
    return handler


def _load_catalog(cfg: Config, catalog_path) -> Catalog:
    path = catalog_path or cfg.get('catalog.path')
    if path:
        return Catalog.load(path)
    return Catalog.default()


@click.group()
@click.option('--config', '-c', help='Configuration file path')
@click.option('--catalog', 'catalog_path', help='YAML catalog of per-image parameters')
@click.option('--wrap-width', type=int, help='Wrap the command preview above this width')
@click.option('--prefill', is_flag=True, default=None, help='Start edits from the current value instead of an empty buffer')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config, catalog_path, wrap_width, prefill, verbose, debug):
    """run-tui - build a container run command interactively"""
    ctx.ensure_object(dict)

    try:
        cfg = Config(config)
        cfg.update_from_cli(**{
            'display.wrap_width': wrap_width,
            'editor.begin_edit': BEGIN_EDIT_PREFILL if prefill else None,
        })

        log_level = 'DEBUG' if debug else ('INFO' if verbose else cfg.get('output.log_level'))
        setup_logger(APP_NAME, level=log_level)

        ctx.obj['config'] = cfg
        ctx.obj['catalog'] = _load_catalog(cfg, catalog_path)
        # Validate eagerly so bad settings fail before the terminal is taken over
        cfg.wrap_width
        cfg.begin_edit
    except (ConfigurationError, CatalogError) as e:
        logger.error(f"Configuration error: {e}")
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)


@cli.command()
@click.argument('image')
@click.option('--dry-run', is_flag=True, help='Print the default command without opening the editor')
@click.option('--copy', 'copy_command', is_flag=True, help='Copy the final command to the clipboard')
@click.pass_context
def edit(ctx, image, dry_run, copy_command):
    """Edit the run parameters for IMAGE"""
    cfg = ctx.obj['config']
    catalog = ctx.obj['catalog']
    program = cfg.get('display.program')

    if dry_run:
        selection = collect(EditorModel.from_catalog(catalog, image))
        console.print(selection.command_line(program), style="bold", markup=False, soft_wrap=True)
        return

    ui_console = Console(no_color=not cfg.get('display.color', True))
    cancel_event = threading.Event()
    previous_handlers = {sig: signal.signal(sig, _cancel_on_signal(cancel_event)) for sig in CANCEL_SIGNALS}
    try:
        flag_set, run_options, container_options = run_tui(
            image, FlagSet(), RunOptions(), ContainerOptions(image=image),
            catalog=catalog, config=cfg, console=ui_console, cancel_event=cancel_event,
        )
    except SessionCancelled:
        console.print("\nCancelled", style="yellow")
        sys.exit(130)
    except SessionError as e:
        logger.error(f"Session error: {e}")
        console.print(f"\n[red]Error: {e}[/red]")
        sys.exit(1)
    except RunTUIError as e:
        logger.error(f"Unexpected error: {e}")
        console.print(f"\n[red]Error: {e}[/red]")
        sys.exit(1)
    finally:
        for sig, handler in previous_handlers.items():
            signal.signal(sig, handler)

    command_line = RunSelection.from_options(flag_set, run_options, container_options).command_line(program)
    console.print()
    console.print("❯", style="bold blue", end=" ")
    console.print(command_line, style="bold", markup=False, soft_wrap=True)

    if copy_command:
        if CLIPBOARD_AVAILABLE:
            try:
                pyperclip.copy(command_line)
                console.print("● Copied to clipboard", style="green")
            except pyperclip.PyperclipException as e:
                console.print(f"Copy failed: {e}", style="red")
        else:
            console.print("Clipboard unavailable", style="yellow")


@cli.command()
@click.pass_context
def images(ctx):
    """List the images the catalog knows about"""
    catalog = ctx.obj['catalog']
    names = catalog.images()
    if not names:
        console.print("[yellow]The catalog is empty[/yellow]")
        return

    for name in names:
        console.print(f"[bold]{name}[/bold]")
        flags = catalog.flags_for(name)
        if flags:
            console.print(f"    [dim]flags:[/dim] {' '.join(flag.value for flag in flags)}")
        for param in catalog.parameters_for(name):
            line = Text("    ")
            line.append(param.param_type.name, style="cyan")
            line.append(" " + " | ".join(param.candidates), style="dim")
            console.print(line)


@cli.command()
@click.pass_context
def config_show(ctx):
    """Show current configuration"""
    cfg = ctx.obj['config']
    console.print(f"[bold]Configuration file:[/bold] {cfg.config_file}")
    for section, values in cfg.config.items():
        console.print(f"[bold cyan]{section}[/bold cyan]")
        if isinstance(values, dict):
            for key, value in values.items():
                console.print(f"  {key}: {value!r}", markup=False)
        else:
            console.print(f"  {values!r}", markup=False)


@cli.command()
@click.pass_context
def config_init(ctx):
    """Create a default configuration file"""
    cfg = ctx.obj['config']
    try:
        path = cfg.create_default_config()
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    console.print(f"[green]Configuration file created at {path}[/green]")


@cli.command()
@click.argument('key')
@click.argument('value')
@click.pass_context
def config_set(ctx, key, value):
    """Set a configuration value (dot notation, e.g. display.wrap_width)"""
    cfg = ctx.obj['config']

    # Keep the type of the existing value where there is one
    current = cfg.get(key)
    if isinstance(current, bool):
        value = value.lower() in ('true', '1', 'yes', 'on')
    elif isinstance(current, int):
        try:
            value = int(value)
        except ValueError:
            console.print(f"[red]{key} must be an integer[/red]")
            sys.exit(1)

    cfg.update_from_cli(**{key: value})
    try:
        cfg.save()
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    console.print(f"[green]✓ {key} = {value!r}[/green]")


@cli.command()
def version():
    """Show version information"""
    console.print(f"[bold]{APP_NAME}[/bold] {APP_VERSION}")
    console.print(f"[dim]{APP_DESCRIPTION}[/dim]")


if __name__ == '__main__':
    cli()
