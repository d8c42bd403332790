"""Terminal formatter with Rich output."""

from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from ts_validator.analysis.analyzer import AnalysisResult
from ts_validator.config.ignore import Suppression
from ts_validator.models.violation import Violation, ViolationKind

console = Console()


class TerminalFormatter:
    """Rich terminal output formatter for analysis results."""

    KIND_COLORS = {
        ViolationKind.DIRECT_ACCESS: "red",
        ViolationKind.INDIRECT_ACCESS: "yellow",
        ViolationKind.ALIAS: "yellow",
    }

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        no_color: bool = False
    ):
        self.verbose = verbose
        self.quiet = quiet
        self.console = Console(no_color=True, highlight=False) if no_color else console

    def format_results(
        self,
        result: AnalysisResult,
        violations: List[Violation],
        scan_path: str,
        suppressed: Optional[List[Suppression]] = None,
        timings: Optional[dict] = None
    ):
        """Format and display analysis results."""
        suppressed = suppressed or []

        if self.quiet and not violations:
            return

        if not self.quiet:
            self._print_header(result, violations, scan_path)
            self._print_files(result)

        if timings and self.verbose:
            for label, seconds in timings.items():
                self.console.print(f"[dim]{label} completed in: {seconds:.3f}s[/dim]")
            self.console.print()

        if not violations:
            self.console.print("[green]No unvalidated request input found![/green]")
        else:
            for violation in violations:
                self._print_violation(violation)

        if suppressed and not self.quiet:
            self.console.print()
            self.console.print(f"[dim]{len(suppressed)} violations suppressed by configuration[/dim]")
            if self.verbose:
                for item in suppressed:
                    self.console.print(
                        f"  [dim]{escape(item.violation.format_location())} ({escape(item.reason)})[/dim]",
                        soft_wrap=True,
                    )

        if not self.quiet:
            self._print_summary(result, violations)

    def _print_header(self, result: AnalysisResult, violations: List[Violation], scan_path: str):
        """Print the report header."""
        color = "green" if not violations else "red"

        header = Text()
        header.append("TypeScript Validation Report\n", style="bold")
        header.append(f"Scanned: {scan_path}\n", style="dim")
        header.append(f"Rules: {result.rules.value}\n", style="dim")
        header.append(f"Files analyzed: {result.files_analyzed}\n", style="dim")
        header.append("Violations: ", style="dim")
        header.append(str(len(violations)), style=f"bold {color}")

        self.console.print(Panel(header, border_style=color))
        self.console.print()

    def _print_files(self, result: AnalysisResult):
        """Print one status line per analyzed file."""
        for summary in result.files:
            if summary.controllers or summary.violations or self.verbose:
                self.console.print(escape(summary.status), soft_wrap=True)
        if result.files:
            self.console.print()

    def _print_violation(self, violation: Violation):
        """Print a single violation."""
        color = self.KIND_COLORS[violation.kind]
        self.console.print(
            f"❗ [{color}]{escape(violation.format_location())}[/{color}]",
            soft_wrap=True,
        )

    def _print_summary(self, result: AnalysisResult, violations: List[Violation]):
        """Print summary line."""
        by_kind = {kind: 0 for kind in ViolationKind}
        for violation in violations:
            by_kind[violation.kind] += 1

        self.console.print()
        self.console.print("📊 [bold]Summary:[/bold]")
        parts = [
            f"[{self.KIND_COLORS[kind]}]{kind.value}: {count}[/{self.KIND_COLORS[kind]}]"
            for kind, count in by_kind.items()
        ]
        self.console.print(f"  {' | '.join(parts)}")
        self.console.print(
            f"  {result.total_controllers} controllers in {result.files_analyzed} files"
        )


def format_scan_results(
    result: AnalysisResult,
    violations: List[Violation],
    scan_path: str,
    suppressed: Optional[List[Suppression]] = None,
    timings: Optional[dict] = None,
    verbose: bool = False,
    quiet: bool = False,
    no_color: bool = False
):
    """Convenience function to format scan results."""
    formatter = TerminalFormatter(verbose=verbose, quiet=quiet, no_color=no_color)
    formatter.format_results(result, violations, scan_path, suppressed=suppressed, timings=timings)
