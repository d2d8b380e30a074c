"""Command line for generating and solving puzzles, rendered with Rich."""

from __future__ import annotations

import dataclasses
import logging
import random
from pathlib import Path
from typing import Optional

import rich.box
import typer
from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tictacgo.config import CONFIG_FILE, load_config
from tictacgo.engine.gamegenerator import (
    Difficulty,
    DifficultyScore,
    GameGenerator,
    Puzzle,
    get_motif_info,
)
from tictacgo.engine.gamesolver import SearchBudget, Solution, Solver
from tictacgo.engine.gamestate import State
from tictacgo.errors import TicTacGoError
from tictacgo.models import BoardGeometry, Occupant, random_geometry

console = Console()
app = typer.Typer(add_completion=False, help="tic-tac-go puzzle generator and solver.")

_STYLES = {
    Occupant.EMPTY: "[dim]·[/dim]",
    Occupant.CROSS: "[bold red]×[/bold red]",
    Occupant.CIRCLE: "[bold white]o[/bold white]",
    Occupant.PLAYER: "[bold green]@[/bold green]",
}


# -- rendering ----------------------------------------------------------------


def _render_board(state: State) -> Table:
    """Return a Rich Table showing the board; holes are left blank."""
    g = state.geometry
    table = Table(
        show_header=False,
        show_edge=True,
        pad_edge=True,
        box=rich.box.HEAVY,
        border_style="bright_blue",
        padding=(0, 1),
    )
    for _ in range(g.cols):
        table.add_column(width=1, justify="center")

    for r in range(g.rows):
        cells: list[str] = []
        for c in range(g.cols):
            if (r, c) in g:
                cells.append(_STYLES[state.occupant(g.index((r, c)))])
            else:
                cells.append(" ")
        table.add_row(*cells)
    return table


def _render_score(score: DifficultyScore | None) -> Table:
    table = Table(box=rich.box.ROUNDED, border_style="dim", show_header=False)
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right", style="yellow")
    if score is None:
        table.add_row("score", "n/a")
        return table
    table.add_row("pushes", str(score.pushes))
    table.add_row("branching", f"{score.branching:.2f}")
    table.add_row("dependencies", str(score.dependencies))
    table.add_row("motifs", str(score.motifs))
    table.add_row("score", f"{score.value:.2f}")
    return table


def _print_puzzle(puzzle: Puzzle) -> None:
    title = f"[bold cyan]{puzzle.difficulty.value.title()}  seed {puzzle.seed}[/bold cyan]"
    if puzzle.is_fallback:
        title += "  [yellow](fallback)[/yellow]"
    panel = Panel(
        Group(
            Align.center(_render_board(puzzle.initial_state)),
            Text(""),
            Align.center(_render_score(puzzle.score)),
        ),
        title=title,
        border_style="bright_blue",
        padding=(1, 2),
    )
    console.print(Align.center(panel))


def _print_solution(state: State, solution: Solution) -> None:
    status = Text()
    status.append("  Status: ", style="dim")
    status.append(str(solution.status), style="bold yellow")
    if solution.reason and not solution.is_found:
        status.append(f" ({solution.reason})", style="dim")
    m = solution.metrics
    status.append("    Expanded: ", style="dim")
    status.append(str(m.states_expanded), style="bold yellow")

    parts: list = [Align.center(_render_board(state)), Text(""), Align.center(status)]
    if solution.is_found:
        moves = Text()
        moves.append("  Pushes: ", style="dim")
        moves.append(str(m.push_count), style="bold green")
        moves.append("    Moves: ", style="dim")
        moves.append(str(m.step_count), style="bold green")
        parts.append(Align.center(moves))
        if solution.moves:
            path = " ".join(
                move.direction.value.upper() if move.moves_piece else move.direction.value
                for move in solution.moves
            )
            parts.append(Align.center(Text(path, style="cyan")))

    console.print(
        Align.center(
            Panel(
                Group(*parts),
                title="[bold]Solve[/bold]",
                border_style="bright_blue",
                padding=(1, 2),
            )
        )
    )


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )


# -- commands -----------------------------------------------------------------


@app.command()
def generate(
    difficulty: Difficulty = typer.Option(
        Difficulty.EASY, "-d", "--difficulty", help="Target difficulty."
    ),
    seed: Optional[int] = typer.Option(
        None, "-s", "--seed", help="Random seed. Omit for a random one."
    ),
    rows: Optional[int] = typer.Option(
        None, "--rows", min=1, help="Board rows. Omit rows and cols for a random shape."
    ),
    cols: Optional[int] = typer.Option(None, "--cols", min=1, help="Board columns."),
    holes: int = typer.Option(0, "--holes", min=0, help="Random holes in the board."),
    crosses: Optional[int] = typer.Option(
        None, "-x", "--crosses", min=0, help="Exact number of crosses."
    ),
    diagonal: bool = typer.Option(False, "--diagonal", help="Diagonal lines count."),
    config_path: Path = typer.Option(CONFIG_FILE, "-c", "--config", help="JSON config file."),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging."),
) -> None:
    """Generate a puzzle and print it with its difficulty score."""
    _setup_logging(verbose)
    config = load_config(config_path)
    if diagonal:
        config = dataclasses.replace(
            config, rules=dataclasses.replace(config.rules, diagonal=True)
        )
    if seed is None:
        seed = random.randrange(2**32)
    rng = random.Random(seed)

    if rows is None and cols is None:
        geometry = random_geometry(rng, holes)
    else:
        geometry = BoardGeometry.rectangle(rows or cols, cols or rows)
        if holes:
            candidates = list(geometry.cells)
            rng.shuffle(candidates)
            geometry = BoardGeometry.rectangle(
                geometry.rows, geometry.cols, candidates[:holes]
            )

    try:
        puzzle = GameGenerator(config).generate(geometry, difficulty, seed, crosses)
    except TicTacGoError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    _print_puzzle(puzzle)


@app.command()
def solve(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="ASCII board file."),
    max_expansions: int = typer.Option(
        200_000, "--max-expansions", min=1, help="Expansion budget."
    ),
    time_limit: float = typer.Option(30.0, "--time-limit", help="Seconds before giving up."),
    diagonal: bool = typer.Option(False, "--diagonal", help="Diagonal lines count."),
    config_path: Path = typer.Option(CONFIG_FILE, "-c", "--config", help="JSON config file."),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging."),
) -> None:
    """Solve a board drawn in ASCII ('.' empty, 'x' cross, 'o' circle, '@' player, '#' hole)."""
    _setup_logging(verbose)
    config = load_config(config_path)
    rules = dataclasses.replace(config.rules, diagonal=diagonal or config.rules.diagonal)
    try:
        state = State.from_ascii(path.read_text(encoding="utf-8"))
    except ValueError as e:
        console.print(f"[red]Invalid board: {e}[/red]")
        raise typer.Exit(code=1)

    solver = Solver(rules, SearchBudget(max_expansions, time_limit))
    solution = solver.solve(state)
    _print_solution(state, solution)
    if not solution.is_found:
        raise typer.Exit(code=2)


@app.command()
def motifs() -> None:
    """List the trap motifs used to bias scrambling."""
    table = Table(box=rich.box.ROUNDED, border_style="dim")
    table.add_column("Motif", style="bold cyan")
    table.add_column("Description")
    for info in get_motif_info():
        table.add_row(info["name"], info["description"])
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
