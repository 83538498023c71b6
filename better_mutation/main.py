"""better-mutation CLI - flag mutations in JavaScript and TypeScript code."""
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
import typer
from rich.table import Table
from rich.markup import escape

from .config import __version__, get_config
from .analyzer.parser import LanguageParser
from .linter import RULES, Linter, discover_files
from .utils.safe_console import SafeConsole

app = typer.Typer(
    name="better-mutation",
    help="Flag reassignments, ++/-- and mutating library calls outside local scope",
    add_completion=False
)
console = SafeConsole()


def _parse_exception(value: str) -> Dict[str, str]:
    """'foo.bar' -> {object: foo, property: bar}; '.bar' or 'foo.' leave a side open."""
    obj, dot, prop = value.partition('.')
    if not dot:
        return {'object': value}
    exception = {}
    if obj:
        exception['object'] = obj
    if prop:
        exception['property'] = prop
    return exception


def build_overrides(commonjs: bool, prototypes: bool, allow_this: bool, function_props: bool,
                    exceptions: List[str], reducers: Optional[List[str]], lodash_imports: bool,
                    ignored_methods: List[str]) -> Dict[str, Any]:
    """Translate CLI flags into option overrides; unset flags leave file config alone."""
    overrides: Dict[str, Any] = {}
    for key, enabled in (
        ('commonjs', commonjs),
        ('prototypes', prototypes),
        ('allowThis', allow_this),
        ('functionProps', function_props),
        ('useLodashFunctionImports', lodash_imports),
    ):
        if enabled:
            overrides[key] = True
    if exceptions:
        overrides['exceptions'] = [_parse_exception(e) for e in exceptions]
    if reducers is not None:
        overrides['reducers'] = reducers
    if ignored_methods:
        overrides['ignoredMethods'] = ignored_methods
    return overrides


@app.command()
def check(
    paths: List[str] = typer.Argument(None, help="Files or directories to lint (default: current directory)"),
    commonjs: bool = typer.Option(False, "--commonjs", help="Allow assignments to exports/module.exports"),
    prototypes: bool = typer.Option(False, "--prototypes", help="Allow assignments to Function.prototype members"),
    allow_this: bool = typer.Option(False, "--allow-this", help="Allow assignments to this.*"),
    function_props: bool = typer.Option(False, "--function-props", help="Allow property mutation on local functions/classes"),
    exception: List[str] = typer.Option([], "--exception", "-e", help="Exempt OBJECT.PROPERTY (either side may be empty)"),
    reducer: List[str] = typer.Option(None, "--reducer", help="Callee whose callbacks may mutate (default: reduce)"),
    no_reducers: bool = typer.Option(False, "--no-reducers", help="Do not exempt any reducer callbacks"),
    lodash_imports: bool = typer.Option(False, "--lodash-imports", help="Also flag bare lodash imports such as assign()"),
    ignore_method: List[str] = typer.Option([], "--ignore-method", help="Mutating function to ignore, e.g. Object.assign"),
    rule: List[str] = typer.Option([], "--rule", "-r", help="Only run these rules"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON config file"),
    debug: bool = typer.Option(False, "--debug", help="Trace exemption decisions to stderr"),
):
    """Lint files and report mutations."""
    if debug:
        os.environ["BETTER_MUTATION_DEBUG"] = "1"

    paths = paths or ["."]
    for path in paths:
        if not Path(path).exists():
            console.print(f"[bold red]Error:[/bold red] Path does not exist: {escape(path)}")
            raise typer.Exit(2)

    reducers = [] if no_reducers else (reducer or None)
    overrides = build_overrides(commonjs, prototypes, allow_this, function_props,
                                exception, reducers, lodash_imports, ignore_method)

    try:
        project_root = Path(paths[0]) if Path(paths[0]).is_dir() else Path(paths[0]).parent
        project_config = get_config().load_project_config(project_root, config_file)
        rule_names = rule or [name for name in RULES if project_config.is_enabled(name)]
        options = {name: project_config.options_for(name, overrides) for name in RULES}
        linter = Linter(options, rule_names)
    except ValueError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        raise typer.Exit(2)

    findings = []
    skipped = []
    unsupported = []
    files_checked = 0
    for file_path in discover_files(paths):
        if LanguageParser.language_for(file_path) is None:
            unsupported.append(file_path)
            continue
        result = linter.lint_file(file_path)
        if result is None:
            skipped.append(file_path)
            continue
        files_checked += 1
        findings.extend(result)

    if findings:
        table = Table(title="Mutations")
        table.add_column("Location", style="cyan", no_wrap=True)
        table.add_column("Rule", style="magenta")
        table.add_column("Message", style="yellow")

        for finding in findings:
            location = f"{finding.file_path}:{finding.line}:{finding.column + 1}"
            table.add_row(escape(location), finding.rule, escape(finding.message))

        console.print(table)

    for file_path in unsupported:
        console.print(f"[dim]Skipped unsupported file type: {escape(str(file_path))}[/dim]")
    for file_path in skipped:
        console.print(f"[dim]Skipped unreadable file: {escape(str(file_path))}[/dim]")

    console.print(f"\n[bold yellow]Summary:[/bold yellow]")
    console.print(f"  Files checked: {files_checked}")
    console.print(f"  Mutations found: {len(findings)}")

    if findings:
        raise typer.Exit(1)
    console.print("[bold green]✓ No mutations found![/bold green]")


@app.command()
def rules():
    """List available rules."""
    table = Table(title="Rules")
    table.add_column("Rule", style="cyan")
    table.add_column("Description")

    for name, rule_class in RULES.items():
        table.add_row(name, rule_class.description)

    console.print(table)


def _version_callback(value: bool):
    if value:
        console.print(f"better-mutation {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True,
                                 help="Show version and exit"),
):
    """better-mutation - forbid mutation outside local scope."""
    pass


if __name__ == "__main__":
    app()
