"""Push-optimal solver."""

from __future__ import annotations

import heapq
import logging
import time
from functools import lru_cache
from itertools import combinations, count, permutations

from tictacgo.engine.gamedeadlock.detector import DeadlockDetector
from tictacgo.engine.gamemoves.movegen import Move, MoveKind, legal_moves, transition
from tictacgo.engine.gamerules.rules import (
    DEFAULT_RULES,
    LineRules,
    is_loss,
    is_win,
    winning_lines,
)
from tictacgo.engine.gamesolver.context import SearchBudget, SearchContext
from tictacgo.engine.gamesolver.metrics import dependency_count
from tictacgo.engine.gamesolver.solution import Solution, SolverMetrics, SolveStatus
from tictacgo.engine.gamestate.encoder import StateEncoder
from tictacgo.engine.gamestate.state import State, iter_bits
from tictacgo.errors import DefinitelyUnsolvable, SolverBudgetExceeded
from tictacgo.models.geometry import BoardGeometry

logger = logging.getLogger(__name__)

# Expansions between progress reports.
PROGRESS_INTERVAL = 5_000


@lru_cache(maxsize=64)
def _detector(geometry: BoardGeometry, rules: LineRules) -> DeadlockDetector:
    return DeadlockDetector(geometry, rules)


@lru_cache(maxsize=256)
def _line_cells(geometry: BoardGeometry, rules: LineRules) -> tuple[tuple[int, ...], ...]:
    return tuple(tuple(iter_bits(line)) for line in winning_lines(geometry, rules))


def push_lower_bound(
    state: State, rules: LineRules = DEFAULT_RULES
) -> int | None:
    """Fewest pushes any solution of ``state`` can need, or None if hopeless.

    Every push moves one piece by one cell, and a winning line needs at
    least ``length - 1`` circles besides the player, so the cheapest
    assignment of circles to distinct cells of some line (by Manhattan
    distance) bounds the push count from below.  The bound ignores the
    player, which makes it the same for every state reached by steps.
    """
    need = rules.length - 1
    circles = list(iter_bits(state.circles))
    if len(circles) < need:
        return None
    g = state.geometry
    best: int | None = None
    for cells in _line_cells(g, rules):
        for chosen in combinations(circles, need):
            for targets in permutations(cells, need):
                cost = 0
                for piece, target in zip(chosen, targets):
                    cost += g.distance(piece, target)
                    if best is not None and cost >= best:
                        break
                else:
                    best = cost
                    if best == 0:
                        return 0
    return best


def _mean(total: int, n: int) -> float:
    return total / n if n else 0.0


class Solver:
    """A* search over states, minimising pushes.

    Steps cost nothing and pushes cost one, so the first winning state taken
    off the frontier has the fewest possible pushes; ties are broken by the
    total number of moves.  Successors that lose, or that the deadlock
    detector proves dead, are dropped before they reach the frontier.
    """

    def __init__(
        self,
        rules: LineRules = DEFAULT_RULES,
        budget: SearchBudget | None = None,
        prune_deadlocks: bool = True,
    ) -> None:
        self.rules = rules
        self.budget = budget or SearchBudget()
        self.prune_deadlocks = prune_deadlocks

    # -- public API -----------------------------------------------------------

    def solve(
        self,
        state: State,
        context: SearchContext | None = None,
        with_dependencies: bool = True,
    ) -> Solution:
        """Search for a solution of ``state``.

        The result is ``FOUND`` with the move sequence, ``UNSOLVABLE`` when
        the search space was exhausted, or ``UNKNOWN`` when the budget ran out
        or the context was cancelled first.
        """
        context = context or SearchContext(budget=self.budget)
        started = time.perf_counter()
        metrics = SolverMetrics()
        if with_dependencies:
            metrics.dependency_count = dependency_count(state)

        solution = self._search(state, context, metrics)
        metrics.computation_time_ms = (time.perf_counter() - started) * 1000.0
        logger.debug(
            f"Solve {solution.status}: pushes={metrics.push_count} "
            f"expanded={metrics.states_expanded} "
            f"time={metrics.computation_time_ms:.1f}ms"
        )
        return solution

    def hint(self, state: State, context: SearchContext | None = None) -> Move | None:
        """Return the first move of a solution, or ``None`` if there is none."""
        if is_win(state, self.rules):
            return None
        solution = self.solve(state, context, with_dependencies=False)
        return solution.moves[0] if solution.has_moves else None

    def is_solvable(self, state: State, context: SearchContext | None = None) -> bool:
        """True when a solution is found within the budget."""
        return self.solve(state, context, with_dependencies=False).is_found

    def require_solution(
        self, state: State, context: SearchContext | None = None
    ) -> Solution:
        """Like ``solve`` but raise instead of returning a non-``FOUND`` result."""
        solution = self.solve(state, context)
        if solution.status is SolveStatus.UNKNOWN:
            raise SolverBudgetExceeded(
                f"No solution within {solution.metrics.states_expanded} expansions."
            )
        if solution.status is SolveStatus.UNSOLVABLE:
            raise DefinitelyUnsolvable(solution.reason or "search exhausted")
        return solution

    # -- search ---------------------------------------------------------------

    def _search(
        self, start: State, context: SearchContext, metrics: SolverMetrics
    ) -> Solution:
        rules = self.rules
        if is_win(start, rules):
            metrics.push_count = 0
            metrics.step_count = 0
            return Solution(SolveStatus.FOUND, [], [start], metrics)
        if is_loss(start, rules):
            return Solution(SolveStatus.UNSOLVABLE, metrics=metrics, reason="loss")
        h0 = push_lower_bound(start, rules)
        if h0 is None:
            return Solution(
                SolveStatus.UNSOLVABLE, metrics=metrics, reason="too_few_circles"
            )
        detector = _detector(start.geometry, rules) if self.prune_deadlocks else None
        if detector is not None:
            report = detector.check(start)
            if report.is_deadlocked:
                return Solution(
                    SolveStatus.UNSOLVABLE, metrics=metrics, reason=str(report.reason)
                )

        encoder = StateEncoder(start.geometry)
        start_key = encoder.encode(start)
        parents: dict[int, tuple[int, Move] | None] = {start_key: None}
        best: dict[int, tuple[int, int]] = {start_key: (0, 0)}
        bounds: dict[int, int | None] = {start.circles: h0}
        closed: set[int] = set()
        dead: set[int] = set()
        tie = count()
        frontier: list[tuple[int, int, int, int, int, State]] = [
            (h0, 0, 0, next(tie), start_key, start)
        ]
        branching = 0

        while frontier:
            if context.is_cancelled(metrics.states_expanded):
                metrics.mean_branching_factor = _mean(branching, metrics.states_expanded)
                return Solution(SolveStatus.UNKNOWN, metrics=metrics, reason="budget")

            f, pushes, steps, _, key, current = heapq.heappop(frontier)
            if key in closed or best[key] < (pushes, steps):
                continue
            closed.add(key)

            if is_win(current, rules):
                metrics.mean_branching_factor = _mean(branching, metrics.states_expanded)
                return self._reconstruct(start, key, parents, metrics)

            metrics.states_expanded += 1
            if metrics.states_expanded % PROGRESS_INTERVAL == 0:
                context.report_progress(
                    metrics.states_expanded, f"frontier={len(frontier)}"
                )

            successors = legal_moves(current)
            branching += len(successors)
            h_here = f - pushes
            for move in successors:
                child = transition(current, move)
                child_key = encoder.encode(child)
                if child_key in closed or child_key in dead:
                    continue
                pushed = move.kind is MoveKind.PUSH
                cost = (pushes + pushed, steps + 1)
                known = best.get(child_key)
                if known is not None and known <= cost:
                    continue

                h = h_here
                if pushed:
                    if child.circles in bounds:
                        h = bounds[child.circles]
                    else:
                        h = bounds[child.circles] = push_lower_bound(child, rules)
                    if h is None or is_loss(child, rules) or (
                        detector is not None and detector.is_deadlocked(child)
                    ):
                        dead.add(child_key)
                        metrics.pruned_states += 1
                        continue

                best[child_key] = cost
                parents[child_key] = (key, move)
                metrics.states_generated += 1
                heapq.heappush(
                    frontier,
                    (cost[0] + h, cost[0], cost[1], next(tie), child_key, child),
                )

        metrics.mean_branching_factor = _mean(branching, metrics.states_expanded)
        return Solution(SolveStatus.UNSOLVABLE, metrics=metrics, reason="exhausted")

    def _reconstruct(
        self,
        start: State,
        key: int,
        parents: dict[int, tuple[int, Move] | None],
        metrics: SolverMetrics,
    ) -> Solution:
        path: list[Move] = []
        link = parents[key]
        while link is not None:
            key, move = link
            path.append(move)
            link = parents[key]
        path.reverse()

        states = [start]
        for move in path:
            states.append(transition(states[-1], move))
        metrics.push_count = sum(1 for m in path if m.kind is MoveKind.PUSH)
        metrics.step_count = len(path)
        return Solution(SolveStatus.FOUND, path, states, metrics)
