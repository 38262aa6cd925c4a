from __future__ import annotations

from io import StringIO
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from alcov.core.model.cobertura import CoberturaDocument


def _style_percent(pct: float | None, green: float, yellow: float) -> str:
    if pct is None:
        return "n/a"
    v = round(pct, 2)
    if v >= green:
        return f"[green]{v}%[/green]"
    if v >= yellow:
        return f"[yellow]{v}%[/yellow]"
    return f"[red]{v}%[/red]"


def _style_miss(n: int) -> str:
    return f"[red]{n}[/red]" if n else f"[green]{n}[/green]"


def _pct(covered: int, valid: int) -> float | None:
    return (100.0 * covered / valid) if valid else None


def render_summary(
    doc: CoberturaDocument,
    *,
    excluded_objects: int = 0,
    color: bool = True,
    green: float = 90.0,
    yellow: float = 75.0,
) -> str:
    """Render a per-object coverage table for a Cobertura document."""
    table = Table(title="AL Coverage", box=box.SIMPLE_HEAVY, header_style="bold", expand=True)

    table.add_column("Object", overflow="fold")
    table.add_column("File", overflow="fold")
    table.add_column("Lines\nTot.", justify="right")
    table.add_column("Lines\nHit", justify="right")
    table.add_column("Lines\nMiss", justify="right")
    table.add_column("Cov.", justify="right")

    for cls in doc.iter_classes():
        valid = cls.lines_valid
        covered = cls.lines_covered
        table.add_row(
            cls.name,
            cls.filename,
            str(valid),
            str(covered),
            _style_miss(valid - covered),
            _style_percent(_pct(covered, valid), green, yellow),
        )

    table.add_section()

    valid = doc.lines_valid
    covered = doc.lines_covered
    table.add_row(
        "[bold]Overall[/bold]",
        "",
        f"[bold]{valid}[/bold]",
        f"[bold]{covered}[/bold]",
        f"[bold]{valid - covered}[/bold]",
        f"[bold]{_style_percent(_pct(covered, valid), green, yellow)}[/bold]",
    )

    buf = StringIO()
    console = Console(file=buf, force_terminal=color, no_color=not color)
    console.print()
    console.print(table)
    if excluded_objects:
        console.print(f"{excluded_objects} executed object(s) without source were left out of the report.")
    console.print()
    return buf.getvalue().rstrip()


__all__ = ["render_summary"]
