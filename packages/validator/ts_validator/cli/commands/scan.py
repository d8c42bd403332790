"""Scan command implementation."""

import logging
import time
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console

from ts_validator.analysis.analyzer import analyze_modules
from ts_validator.analysis.validation import ValidationRuleSet
from ts_validator.cli.formatters.terminal import format_scan_results
from ts_validator.config.ignore import (
    IgnoreManager, Suppression, filter_by_baseline, load_baseline, save_baseline
)
from ts_validator.models.violation import Violation
from ts_validator.scanners.typescript_scanner import TypeScriptScanner

logger = logging.getLogger(__name__)

console = Console()

DEFAULT_RULES = ValidationRuleSet.ZOD_STRICT


def resolve_rules(cli_rules: Optional[str], config_rules: Optional[str]) -> ValidationRuleSet:
    """Pick the rule set: command line first, then config file, then zod-strict."""
    if cli_rules:
        return ValidationRuleSet.from_name(cli_rules)
    if config_rules:
        try:
            return ValidationRuleSet.from_name(str(config_rules))
        except ValueError:
            logger.warning(f"Unknown rule set in config: {config_rules!r}, using {DEFAULT_RULES.value}")
    return DEFAULT_RULES


def run_scan(
    path: Path,
    output_format: str = "terminal",
    output_path: Optional[Path] = None,
    rules: Optional[str] = None,
    fail_on_warning: bool = False,
    baseline_path: Optional[Path] = None,
    save_baseline_path: Optional[Path] = None,
    verbose: bool = False,
    quiet: bool = False,
    no_color: bool = False
) -> int:
    """
    Run the validation scan.

    The output format is passed explicitly; progress lines are only printed
    for terminal output so structured formats stay machine readable.

    Returns exit code: 1 when failing on warnings and violations remain, else 0.
    """
    terminal = output_format == "terminal"
    show_progress = terminal and not quiet

    ignore_manager = IgnoreManager()
    config_loaded = ignore_manager.load(path)

    if verbose and config_loaded and terminal:
        console.print(f"[dim]Loaded config from: {ignore_manager.loaded_from}[/dim]")

    rule_set = resolve_rules(rules, ignore_manager.get_rules())
    fail_on_warning = fail_on_warning or ignore_manager.fail_on_warning()

    scanner = TypeScriptScanner(exclude_patterns=ignore_manager.get_exclude_patterns())

    if show_progress:
        console.print("[dim]Parsing TypeScript files...[/dim]")

    timings = {}
    start = time.perf_counter()
    modules = scanner.scan(path)
    timings["Parsing"] = time.perf_counter() - start

    start = time.perf_counter()
    result = analyze_modules(modules, rule_set)
    timings["Analysis"] = time.perf_counter() - start
    result.skipped += scanner.skipped

    if show_progress and result.skipped:
        console.print(f"[yellow]Skipped {result.skipped} files that could not be parsed[/yellow]")

    violations: List[Violation] = result.violations
    suppressed: List[Suppression] = []
    if ignore_manager.config:
        violations, suppressed = ignore_manager.partition(violations)

    if baseline_path and baseline_path.exists():
        baseline = load_baseline(baseline_path)
        violations = filter_by_baseline(violations, baseline)
        if show_progress:
            console.print(f"[dim]Filtered by baseline: {baseline_path}[/dim]")

    if save_baseline_path:
        save_baseline(violations, save_baseline_path)
        if show_progress:
            console.print(f"[dim]Saved baseline to: {save_baseline_path}[/dim]")

    if terminal:
        format_scan_results(
            result,
            violations,
            str(path),
            suppressed=suppressed,
            timings=timings,
            verbose=verbose,
            quiet=quiet,
            no_color=no_color
        )
    elif output_format == "json":
        from ts_validator.cli.formatters.json import JSONFormatter, format_json
        if output_path:
            JSONFormatter().save(result, violations, output_path, str(path), suppressed)
        else:
            click.echo(format_json(result, violations, str(path), suppressed))
    elif output_format == "sarif":
        from ts_validator.cli.formatters.sarif import SARIFFormatter, format_sarif
        if output_path:
            SARIFFormatter().save(violations, output_path, suppressed)
        else:
            click.echo(format_sarif(violations, suppressed))
    elif output_format == "markdown":
        _output_markdown(violations, str(path), rule_set, output_path)

    if fail_on_warning and violations:
        return 1
    return 0


def _output_markdown(
    violations: List[Violation],
    scan_path: str,
    rule_set: ValidationRuleSet,
    output_path: Optional[Path]
):
    """Output violations as Markdown."""
    lines = [
        "# TypeScript Validation Report",
        "",
        f"**Scanned:** `{scan_path}`",
        f"**Rules:** `{rule_set.value}`",
        f"**Violations:** {len(violations)}",
        "",
        "## Violations",
        "",
    ]

    for violation in violations:
        lines.append(f"### {violation.rule_id}: {violation.kind.value}")
        lines.append("")
        lines.append(f"**Location:** `{violation.file}:{violation.line}:{violation.column}`")
        lines.append("")
        lines.append(violation.message)
        lines.append("")
        lines.append("---")
        lines.append("")

    md_content = "\n".join(lines)

    if output_path:
        output_path.write_text(md_content, encoding="utf-8")
    else:
        click.echo(md_content)


@click.command()
@click.argument('path', type=click.Path(exists=True), default='.')
@click.option('--rules', '-r',
              type=click.Choice([r.value for r in ValidationRuleSet]),
              default=None, help='Validation rule set to use (default: zod-strict)')
@click.option('--format', '-f', 'output_format',
              type=click.Choice(['terminal', 'json', 'sarif', 'markdown']),
              default='terminal', help='Output format')
@click.option('--output', '-o', type=click.Path(), help='Output file path')
@click.option('--fail-on-warning', is_flag=True, default=False,
              help='Exit with code 1 if violations are found')
@click.option('--baseline', type=click.Path(),
              help='Baseline file - only report new violations')
@click.option('--save-baseline', type=click.Path(),
              help='Save current violations as baseline')
@click.option('--no-color', is_flag=True, default=False,
              help='Disable colored output (for CI/CD environments)')
@click.pass_context
def scan(ctx: click.Context, path: str, rules: Optional[str], output_format: str,
         output: Optional[str], fail_on_warning: bool, baseline: Optional[str],
         save_baseline: Optional[str], no_color: bool):
    """
    Scan TypeScript route handlers for unvalidated request input.

    PATH is the directory or file to scan. Defaults to current directory.

    Examples:

        ts-validator scan ./src

        ts-validator scan . --rules zod-lenient --fail-on-warning

        ts-validator scan . --format sarif --output results.sarif

        ts-validator scan . --baseline baseline.json
    """
    ctx.ensure_object(dict)
    exit_code = run_scan(
        path=Path(path),
        output_format=output_format,
        output_path=Path(output) if output else None,
        rules=rules,
        fail_on_warning=fail_on_warning,
        baseline_path=Path(baseline) if baseline else None,
        save_baseline_path=Path(save_baseline) if save_baseline else None,
        verbose=ctx.obj.get('verbose', False),
        quiet=ctx.obj.get('quiet', False),
        no_color=no_color
    )

    ctx.exit(exit_code)
