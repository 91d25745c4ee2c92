"""CLI and REPL interface for faultline."""

from __future__ import annotations

import random
import sys
from dataclasses import dataclass, field

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.history import FileHistory
from rich.console import Console

from faultline.cluster import LocalCluster
from faultline.commands import BeginSendOmission, Crash
from faultline.config import FaultConfig, build_parser, config_from_args
from faultline.display import (
    print_banner,
    print_error,
    print_help,
    print_info,
    print_peek,
    print_run_result,
    print_state,
    print_step,
    print_warning,
)
from faultline.errors import FaultInjectionError
from faultline.fault_logging import DiagnosticsLog, list_runs, read_log_tail, write_log
from faultline.model import FaultModel
from faultline.runner import FaultRunner
from faultline.state import ensure_faultline_dir

console = Console()


@dataclass
class Session:
    """A simulated cluster and the fault runner driving it."""

    config: FaultConfig
    cluster: LocalCluster = field(init=False)
    runner: FaultRunner = field(init=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        log = DiagnosticsLog(debug_enabled=self.config.debug, echo=self.config.verbose, console=console)
        model = FaultModel(self.config.num_nodes, log=log)
        self.cluster = LocalCluster(model.names)
        self.runner = FaultRunner(model, self.cluster, self.cluster.registry(), policy=self.config.retry)

    @property
    def model(self) -> FaultModel:
        return self.runner.model


def get_prompt(session: Session) -> str:
    """Generate the prompt string."""
    state = session.runner.state
    prefix = "[falsified] " if session.runner.falsified else ""
    if state.active_faults:
        return f"{prefix}[{state.active_faults}/{session.model.tolerance} faults] faultline> "
    return f"{prefix}faultline> "


def _check_names(session: Session, names: list[str]) -> bool:
    unknown = [n for n in names if n not in session.runner.registry]
    if unknown:
        print_error(f"Unknown node(s): {', '.join(unknown)}. Nodes: {', '.join(session.model.names)}")
        return False
    return True


def _run_step(session: Session, command) -> None:
    if session.runner.falsified:
        print_warning("Run is falsified. Use 'reset' to start over.")
        return
    record = session.runner.step(command)
    if not record.admitted:
        print_warning(f"{command} not admitted in current state")
        return
    print_step(record)


def cmd_crash(session: Session, args: list[str]) -> None:
    """Crash a node by name."""
    if len(args) != 1:
        print_error("Usage: crash <node>")
        return
    if not _check_names(session, args):
        return
    _run_step(session, Crash(args[0]))


def cmd_omit(session: Session, args: list[str]) -> None:
    """Begin a send omission from one node to another."""
    if len(args) != 2:
        print_error("Usage: omit <src> <dst>")
        return
    if not _check_names(session, args):
        return
    _run_step(session, BeginSendOmission(args[0], args[1]))


def cmd_send(session: Session, args: list[str]) -> None:
    """Send a message between two simulated nodes."""
    if len(args) < 2:
        print_error("Usage: send <src> <dst> [msg]")
        return
    if not _check_names(session, args[:2]):
        return
    registry = session.runner.registry
    source, destination = registry.resolve(args[0]), registry.resolve(args[1])
    message = " ".join(args[2:]) or "ping"

    if session.cluster.send(source, destination, message):
        console.print(f"[green]→[/green] {args[0]} delivered {message!r} to {args[1]}")
    else:
        console.print(f"[red]✗[/red] {args[0]} → {args[1]}: {message!r} dropped")


def cmd_run(session: Session, args: list[str]) -> None:
    """Run random fault commands: run [steps] [seed]."""
    try:
        steps = int(args[0]) if args else session.config.steps
        seed = int(args[1]) if len(args) > 1 else session.config.seed
    except ValueError:
        print_error("Usage: run [steps] [seed]")
        return

    start = len(session.runner.history)
    session.runner.run(steps, random.Random(seed))
    for record in session.runner.history[start:]:
        print_step(record)


def cmd_history(session: Session, args: list[str]) -> None:
    """Show every command considered so far."""
    if not session.runner.history:
        console.print("[dim]No commands yet.[/dim]")
        return
    print_run_result(session.runner.result())


def cmd_logs(session: Session, args: list[str]) -> None:
    """Write the session log and show its tail."""
    config = session.config
    log_path = write_log(
        config.run_name,
        "shell",
        session.runner.result().summary,
        session.model.log,
        seed=config.seed,
        project_root=config.project_root,
    )
    session.model.log.clear()
    tail = read_log_tail(config.run_name, project_root=config.project_root)
    print_peek(config.run_name, tail or "(empty)")
    print_info(f"Log written to {log_path}")


def cmd_runs(session: Session, args: list[str]) -> None:
    """List runs that have logs."""
    runs = list_runs(session.config.project_root)
    if not runs:
        console.print("[dim]No run logs yet.[/dim]")
        return
    for name in runs:
        marker = "[cyan]*[/cyan]" if name == session.config.run_name else " "
        console.print(f"{marker} {name}")


def handle_command(line: str, session: Session) -> bool:
    """Handle a command line. Returns True to continue, False to quit."""
    parts = line.strip().split()
    if not parts:
        return True

    cmd = parts[0].lower()
    args = parts[1:]

    try:
        if cmd in ("quit", "exit", "q"):
            return False
        elif cmd in ("h", "help"):
            print_help()
        elif cmd in ("s", "status"):
            print_state(session.runner.state, session.model.names, session.model.tolerance)
        elif cmd == "crash":
            cmd_crash(session, args)
        elif cmd in ("omit", "omission"):
            cmd_omit(session, args)
        elif cmd == "send":
            cmd_send(session, args)
        elif cmd == "run":
            cmd_run(session, args)
        elif cmd == "history":
            cmd_history(session, args)
        elif cmd == "logs":
            cmd_logs(session, args)
        elif cmd == "runs":
            cmd_runs(session, args)
        elif cmd == "reset":
            session.reset()
            print_info(f"Fresh cluster of {session.config.num_nodes} nodes")
        else:
            print_error(f"Unknown command: {cmd}. Type 'help' for commands.")
    except FaultInjectionError as e:
        print_error(str(e))

    return True


def run_batch(config: FaultConfig) -> int:
    """Run one random fault sequence and write its log. Returns an exit code."""
    session = Session(config)
    print_info(f"Running {config.steps} steps against {config.num_nodes} nodes (seed {config.seed})")

    exit_code = 0
    try:
        session.runner.run(config.steps, random.Random(config.seed))
    except FaultInjectionError as e:
        session.model.log.error(str(e))
        print_error(f"Run aborted: {e}")
        exit_code = 2

    result = session.runner.result()
    print_run_result(result)
    if result.falsified:
        exit_code = exit_code or 1

    log_path = write_log(
        config.run_name,
        "run",
        result.summary,
        session.model.log,
        seed=config.seed,
        project_root=config.project_root,
    )
    print_info(f"Log written to {log_path}")
    return exit_code


def repl(config: FaultConfig) -> None:
    """Interactive fault shell."""
    session = Session(config)

    history_file = ensure_faultline_dir(config.project_root) / "history"
    prompt_session = PromptSession(
        history=FileHistory(str(history_file)),
        auto_suggest=AutoSuggestFromHistory(),
    )

    print_banner()
    print_state(session.runner.state, session.model.names, session.model.tolerance)

    while True:
        try:
            line = prompt_session.prompt(get_prompt(session))
            if not handle_command(line, session):
                break
        except KeyboardInterrupt:
            continue
        except EOFError:
            break

    console.print("[dim]bye[/dim]")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = config_from_args(args)
    ensure_faultline_dir(config.project_root)

    if args.command == "run":
        sys.exit(run_batch(config))
    repl(config)


if __name__ == "__main__":
    main()
