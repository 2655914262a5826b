"""
Command line interface for rendering and inspecting templates.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional

import typer
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typing_extensions import Annotated

from . import __version__
from .config import ensure_engine_config, find_default_config, load_config_file
from .engine import Engine
from .error.exceptions import ConfigurationError, SafeplateError
from .utils.logging import configure_logging

# Load environment variables (WORKSPACE_ROOT may come from .env)
load_dotenv()

app = typer.Typer(
    name="safeplate",
    help="Render Python templates with escape-by-default variables"
)
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

TemplateDirOption = Annotated[
    Optional[List[Path]],
    typer.Option("--template-dir", "-t", help="Template directory (repeatable, searched in order)")
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a YAML config file")
]
LogLevelOption = Annotated[
    Optional[str],
    typer.Option("--log-level", "-l", help="Log level (DEBUG, INFO, WARNING, ERROR)")
]

def parse_variables(pairs: List[str]) -> Dict[str, Any]:
    """
    Parse ``key=value`` pairs.

    Values are read as YAML scalars, so ``count=0`` binds an integer and
    ``flag=true`` a boolean.
    """
    variables = {}
    for pair in pairs:
        if "=" not in pair:
            raise typer.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--var")
        key, value = pair.split("=", 1)
        variables[key.strip()] = parse_scalar(value)
    return variables

def parse_scalar(value: str) -> Any:
    if not value:
        return ""
    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        # not valid YAML, e.g. "@home"; bind the text as given
        return value

def load_variables_file(path: Path) -> Dict[str, Any]:
    """Load render variables from a YAML mapping."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Error loading variables file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Variables file {path} must contain a mapping")
    return data

def build_engine(
    template_dir: Optional[List[Path]],
    config_path: Optional[Path],
    log_level: Optional[str]
) -> Engine:
    """Create an engine from the command line options and configure logging."""
    source = config_path or find_default_config()
    data = load_config_file(source) if source else {}
    config = ensure_engine_config(
        data,
        template_dirs=[str(path) for path in template_dir] if template_dir else None,
        log_level=log_level,
    )
    configure_logging(config)
    if source:
        logger.debug(f"Loaded configuration from {source}")
    return Engine(config=config)

def fail(error: Exception) -> NoReturn:
    err_console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(code=1)

@app.command("render")
def render(
    name: Annotated[str, typer.Argument(help="Template name, without suffix")],
    template_dir: TemplateDirOption = None,
    var: Annotated[
        Optional[List[str]],
        typer.Option("--var", "-v", help="Variable in format key=value (repeatable)")
    ] = None,
    vars_file: Annotated[
        Optional[Path],
        typer.Option("--vars-file", help="YAML file with render variables")
    ] = None,
    config_path: ConfigOption = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the output to a file")
    ] = None,
    log_level: LogLevelOption = None,
):
    """Render a template and print the result."""
    try:
        engine = build_engine(template_dir, config_path, log_level)
        variables = load_variables_file(vars_file) if vars_file else {}
        variables.update(parse_variables(var or []))
        contents = engine.render(name, variables)
    except SafeplateError as e:
        fail(e)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(contents, encoding="utf-8")
        err_console.print(f"[bold green]Rendered {escape(name)} to {escape(str(output))}[/bold green]")
    else:
        typer.echo(contents, nl=False)

@app.command("resolve")
def resolve(
    name: Annotated[str, typer.Argument(help="Template name, without suffix")],
    template_dir: TemplateDirOption = None,
    config_path: ConfigOption = None,
    log_level: LogLevelOption = None,
):
    """Show which source and escape mode a template name resolves to."""
    try:
        engine = build_engine(template_dir, config_path, log_level)
        template = engine.resolve(name)
    except SafeplateError as e:
        fail(e)

    console.print(
        f"[bold]{escape(template.name)}[/bold] -> {escape(template.filename or template.source_name)}",
        soft_wrap=True,
    )
    console.print(f"escape mode: {template.mode.value}")

@app.command("list")
def list_templates(
    template_dir: TemplateDirOption = None,
    config_path: ConfigOption = None,
    log_level: LogLevelOption = None,
):
    """List available templates."""
    try:
        engine = build_engine(template_dir, config_path, log_level)
        names = engine.list_templates()
    except SafeplateError as e:
        fail(e)

    if not names:
        console.print("[bold yellow]No templates found.[/bold yellow]")
        return

    table = Table(title="Templates")
    table.add_column("Name")
    table.add_column("Source")
    table.add_column("Mode")
    for template_name in names:
        template = engine.resolve(template_name)
        table.add_row(escape(template_name), escape(template.source_name), template.mode.value)
    console.print(table)

@app.command("version")
def version_command():
    """Display version information."""
    console.print(f"safeplate {__version__}")

def main():
    app()

if __name__ == "__main__":
    main()
