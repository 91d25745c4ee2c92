"""Display formatting for faultline."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from faultline.runner import RunResult, StepRecord
from faultline.state import FaultModelState

console = Console()


def print_banner() -> None:
    """Print the faultline banner."""
    banner = Text()
    banner.append("faultline", style="bold blue")
    banner.append(" — crash and send-omission fault injection", style="dim")
    console.print(Panel(banner, border_style="blue"))


def get_node_status(state: FaultModelState, name: str) -> str:
    """Status label for a node in the model."""
    if state.is_crashed(name):
        return "crashed"
    if any(name in pair for pair, omitted in state.send_omissions.items() if omitted):
        return "omitting"
    return "up"


def get_status_icon(status: str) -> str:
    """Get icon for node status."""
    icons = {
        "up": "[green]●[/green]",
        "omitting": "[yellow]◐[/yellow]",
        "crashed": "[red]✗[/red]",
    }
    return icons.get(status, "?")


def get_status_style(status: str) -> str:
    """Get style for node status."""
    styles = {
        "up": "green",
        "omitting": "yellow",
        "crashed": "red",
    }
    return styles.get(status, "")


def print_state(state: FaultModelState, names: list[str], tolerance: int) -> None:
    """Print nodes, active faults and send omissions."""
    table = Table(title="Nodes", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Drops to")

    for name in names:
        status = get_node_status(state, name)
        drops = [dst for (src, dst), omitted in state.send_omissions.items() if omitted and src == name]
        table.add_row(
            get_status_icon(status),
            name,
            Text(status, style=get_status_style(status)),
            ", ".join(drops) or "-",
        )

    console.print(table)

    budget_style = "red" if state.active_faults > tolerance else "blue"
    console.print(
        f"Active faults: [{budget_style}]{state.active_faults}[/{budget_style}] "
        f"(tolerance {tolerance})"
    )
    console.print()


def print_step(record: StepRecord) -> None:
    """Print one driver step."""
    if not record.admitted:
        console.print(f"[dim]·[/dim] [dim]{record.command} skipped[/dim]")
    elif record.passed:
        console.print(f"[green]✓[/green] {record.command}")
    else:
        console.print(f"[red]✗[/red] {record.command} -> [red]{record.result}[/red]")


def print_run_result(result: RunResult) -> None:
    """Print the history and verdict of a run."""
    for record in result.history:
        print_step(record)
    console.print()
    style = "red" if result.falsified else "green"
    console.print(f"[{style}]{result.summary}[/{style}]")


def print_error(message: str) -> None:
    """Print error message."""
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print warning message."""
    console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str) -> None:
    """Print info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_peek(run_name: str, content: str) -> None:
    """Print the tail of a run log."""
    console.print(Panel(
        content,
        title=f"[bold]{run_name}[/bold] latest log",
        border_style="dim",
    ))


def print_help() -> None:
    """Print help message."""
    help_text = """
[bold]Commands:[/bold]

  [cyan]status[/cyan], [cyan]s[/cyan]               Show nodes and active faults
  [cyan]crash[/cyan] <node>            Crash a node (if the fault budget allows)
  [cyan]omit[/cyan] <src> <dst>        Drop messages src forwards to dst
  [cyan]send[/cyan] <src> <dst> [msg]  Send a message through the simulated cluster
  [cyan]run[/cyan] [steps] [seed]      Run random fault commands
  [cyan]history[/cyan]               Show commands run so far
  [cyan]logs[/cyan]                  Write and show the run log
  [cyan]runs[/cyan]                  List runs that have logs
  [cyan]reset[/cyan]                 Start over with a fresh cluster

  [cyan]help[/cyan]                  Show this help
  [cyan]quit[/cyan], [cyan]q[/cyan]               Exit
"""
    console.print(help_text)
