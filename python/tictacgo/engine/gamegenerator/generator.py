"""Generates solvable tic-tac-go puzzles."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass

from tictacgo.engine.gamedeadlock.detector import DeadlockDetector
from tictacgo.engine.gamegenerator.difficulty import (
    DEFAULT_CONFIG,
    BandFit,
    Difficulty,
    DifficultyBand,
    DifficultyProfile,
    DifficultyScore,
    GeneratorConfig,
)
from tictacgo.engine.gamegenerator.motifs import cell_matches, motif_count
from tictacgo.engine.gamemoves.movegen import (
    Move,
    normalized,
    reachable,
    reachable_pulls,
    transition,
)
from tictacgo.engine.gamerules.rules import (
    crosses_aligned,
    is_loss,
    is_win,
    winning_lines,
)
from tictacgo.engine.gamesolver.context import SearchBudget, SearchContext
from tictacgo.engine.gamesolver.solution import Solution, SolveStatus
from tictacgo.engine.gamesolver.solver import Solver, push_lower_bound
from tictacgo.engine.gamestate.encoder import StateEncoder
from tictacgo.engine.gamestate.state import State, iter_bits
from tictacgo.errors import GenerationExhausted, InvalidGeometry
from tictacgo.models.geometry import BoardGeometry

logger = logging.getLogger(__name__)

# Preferred distance of new crosses from the centre of the circles.
CROSS_DISTANCE = (2, 6)

# Positions visited by the fallback search before it stops widening.
FALLBACK_NODES = 5_000

# Candidates scored per fallback layer, and in total.
FALLBACK_TRIES = 3
FALLBACK_SOLVES = 40

# Expansions only, so the fallback does not depend on the clock.
FALLBACK_BUDGET = SearchBudget(max_expansions=200_000, time_limit=None)


@dataclass(frozen=True)
class Puzzle:
    """A generated puzzle: a start position known to be solvable."""

    geometry: BoardGeometry
    initial_state: State
    difficulty: Difficulty
    score: DifficultyScore | None
    seed: int
    is_fallback: bool = False

    @property
    def pushes(self) -> int | None:
        return self.score.pushes if self.score else None

    def to_ascii(self) -> str:
        return self.initial_state.to_ascii()


class GameGenerator:
    """Creates solvable puzzles by scrambling backwards from a solved position.

    Every scramble move walks the player within its region and then pulls
    one piece, and each pull undoes a push, so replaying the scramble
    forwards solves the puzzle.  Pulls that spread the circles away from
    every line are favoured.  The solver scores the position after every
    batch of moves; the first position inside the requested band is
    returned.
    """

    def __init__(self, config: GeneratorConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self.rules = config.rules
        self.solver = Solver(config.rules, config.solver_budget)

    # -- entry point ----------------------------------------------------------

    def generate(
        self,
        geometry: BoardGeometry,
        difficulty: Difficulty | str = Difficulty.EASY,
        seed: int = 0,
        cross_count: int | None = None,
    ) -> Puzzle:
        """Return a solvable puzzle of ``difficulty`` on ``geometry``.

        The same geometry, difficulty, seed and config give the same puzzle
        unless the time limit cuts generation short.  Raises
        ``InvalidGeometry`` for boards that can never be won.
        """
        difficulty = Difficulty(difficulty)
        self.validate(geometry, cross_count or 0)
        profile = self.config.profile(difficulty)
        rng = random.Random(seed)
        detector = DeadlockDetector(geometry, self.rules)
        deadline = time.perf_counter() + self.config.time_limit
        cap = self.max_crosses(geometry)

        for attempt in range(self.config.max_restarts):
            if time.perf_counter() > deadline:
                logger.debug(f"Time limit reached after {attempt} attempts")
                break
            if cross_count is None:
                crosses = min(rng.randint(profile.min_crosses, profile.max_crosses), cap)
            else:
                crosses = cross_count
            start = self.seed_state(geometry, crosses, rng, detector)
            found = self._attempt(start, profile, rng, detector, deadline)
            if found is not None:
                state, score = found
                logger.info(
                    f"Generated {difficulty} puzzle: seed={seed} attempt={attempt} "
                    f"pushes={score.pushes} score={score.value}"
                )
                return Puzzle(geometry, state, difficulty, score, seed)
            logger.debug(f"Attempt {attempt} rejected, restarting")

        logger.info(f"Falling back to the fixed puzzle for seed={seed}")
        return self.fallback(geometry, difficulty, seed)

    # -- validation -----------------------------------------------------------

    def validate(self, geometry: BoardGeometry, cross_count: int = 0) -> None:
        length = self.rules.length
        if not winning_lines(geometry, self.rules):
            raise InvalidGeometry(f"Board has no line of {length} playable cells.")
        if not geometry.is_connected():
            raise InvalidGeometry("Board is not connected.")
        if geometry.size < length + cross_count + 1:
            raise InvalidGeometry(
                f"Board has {geometry.size} cells; {length} circles and "
                f"{cross_count} crosses need at least {length + cross_count + 1}."
            )

    def max_crosses(self, geometry: BoardGeometry) -> int:
        """Most crosses a profile may place while leaving two cells free."""
        return max(0, geometry.size - self.rules.length - 2)

    # -- seed position --------------------------------------------------------

    def seed_state(
        self,
        geometry: BoardGeometry,
        crosses: int,
        rng: random.Random,
        detector: DeadlockDetector | None = None,
    ) -> State:
        """A won position: circles on a random line, plus up to ``crosses`` crosses.

        Crosses go on shuffled free cells, preferring those at distance 2-6
        from the centre of the circles.  A cross is skipped when it would
        complete a line of crosses or could never be pushed again.
        """
        detector = detector or DeadlockDetector(geometry, self.rules)
        line = list(iter_bits(rng.choice(winning_lines(geometry, self.rules))))
        player = rng.choice(line)
        circles = 0
        for i in line:
            if i != player:
                circles |= 1 << i
        state = State(geometry, player, circles, 0)

        cells = [geometry.cell(i) for i in line]
        cr = sum(r for r, _ in cells) / len(cells)
        cc = sum(c for _, c in cells) / len(cells)
        lo, hi = CROSS_DISTANCE

        def preference(i: int) -> int:
            r, c = geometry.cell(i)
            return 0 if lo <= abs(r - cr) + abs(c - cc) <= hi else 1

        free = [i for i in range(geometry.size) if state.is_empty(i)]
        rng.shuffle(free)
        free.sort(key=preference)

        placed = 0
        for i in free:
            if placed >= crosses:
                break
            trial = State(geometry, player, circles, state.crosses | (1 << i))
            if crosses_aligned(trial, self.rules):
                continue
            if detector.frozen_pieces(trial) & trial.crosses:
                continue
            state = trial
            placed += 1
        if placed < crosses:
            logger.debug(f"Placed {placed} of {crosses} crosses")
        return state

    # -- scrambling -----------------------------------------------------------

    def scramble(
        self,
        state: State,
        steps: int,
        rng: random.Random,
        detector: DeadlockDetector | None = None,
    ) -> State:
        """Apply up to ``steps`` walk-and-pull moves to ``state``; stops early on a stall."""
        detector = detector or DeadlockDetector(state.geometry, self.rules)
        previous: State | None = None
        for _ in range(steps):
            nxt = self._scramble_step(state, previous, rng, detector)
            if nxt is None:
                break
            previous, state = state, nxt
        return state

    def _scramble_step(
        self,
        state: State,
        previous: State | None,
        rng: random.Random,
        detector: DeadlockDetector,
    ) -> State | None:
        """One weighted walk-and-pull that does not deadlock, or None."""
        options = [(move, transition(state, move)) for move in reachable_pulls(state)]
        # Don't return the pieces to where they just were unless nothing else moves.
        if previous is not None and len(options) > 1:
            options = [
                (m, s)
                for m, s in options
                if (s.circles, s.crosses) != (previous.circles, previous.crosses)
            ]

        matches = cell_matches(state.geometry)
        bound = push_lower_bound(state, self.rules)
        weights = [self._weight(move, nxt, bound, matches) for move, nxt in options]
        while options:
            pick = rng.choices(range(len(options)), weights)[0]
            _, nxt = options.pop(pick)
            weights.pop(pick)
            if not detector.is_deadlocked(nxt):
                return nxt
        return None

    def _weight(
        self, move: Move, after: State, bound: int | None, matches: tuple[int, ...]
    ) -> float:
        weight = 1.0 + self.config.motif_bias * matches[move.piece_destination]
        if bound is None or not (after.circles >> move.piece_destination) & 1:
            return weight
        # One pull changes the line-assignment bound by at most one.
        spread = (push_lower_bound(after, self.rules) or 0) - bound
        return weight * self.config.spread_bias**spread

    def _attempt(
        self,
        start: State,
        profile: DifficultyProfile,
        rng: random.Random,
        detector: DeadlockDetector,
        deadline: float,
    ) -> tuple[State, DifficultyScore] | None:
        config = self.config
        band = profile.band
        budget = config.budget(profile)
        batch = max(1, config.batch_size)
        state = start
        previous: State | None = None
        for pulls in range(1, config.scramble_steps(profile) + 1):
            nxt = self._scramble_step(state, previous, rng, detector)
            if nxt is None:
                logger.debug(f"Scramble stalled after {pulls - 1} pulls")
                return None
            previous, state = state, nxt

            # Replaying the scramble forwards takes ``pulls`` pushes, so no
            # solve can reach the band before that many pulls.
            if pulls < band.min_pushes or (pulls - band.min_pushes) % batch:
                continue
            if is_win(state, self.rules):
                continue
            bound = push_lower_bound(state, self.rules)
            if band.max_pushes is not None and bound is not None and bound > band.max_pushes:
                logger.debug(f"After {pulls} pulls: at least {bound} pushes -> above")
                return None

            remaining = deadline - time.perf_counter()
            if remaining <= 0:
                return None
            score = self.score(state, remaining, budget)
            if score is None:
                return None
            fit = band.classify(score)
            logger.debug(
                f"After {pulls} pulls: pushes={score.pushes} "
                f"score={score.value} -> {fit}"
            )
            if fit is BandFit.WITHIN:
                return state, score
            if fit is BandFit.ABOVE:
                return None
        return None

    # -- scoring --------------------------------------------------------------

    def score(
        self,
        state: State,
        time_left: float | None = None,
        budget: SearchBudget | None = None,
    ) -> DifficultyScore | None:
        """Score ``state`` with a bounded solve; None unless a solution is found."""
        budget = budget or self.config.solver_budget
        if time_left is not None and (
            budget.time_limit is None or time_left < budget.time_limit
        ):
            budget = SearchBudget(budget.max_expansions, time_left)
        solution = self.solver.solve(state, SearchContext(budget=budget))
        if solution.status is SolveStatus.UNSOLVABLE:
            logger.warning(
                f"Scrambled state reported unsolvable ({solution.reason}):\n"
                f"{state.to_ascii()}"
            )
        if not solution.is_found:
            return None
        return self._score_solution(state, solution)

    def _score_solution(self, state: State, solution: Solution) -> DifficultyScore:
        m = solution.metrics
        return DifficultyScore.compute(
            m.push_count or 0,
            m.mean_branching_factor,
            m.dependency_count,
            motif_count(state),
            self.config.weights,
        )

    # -- fallback -------------------------------------------------------------

    def fallback(
        self, geometry: BoardGeometry, difficulty: Difficulty | str, seed: int
    ) -> Puzzle:
        """A fixed puzzle as close to the band of ``difficulty`` as the board allows.

        Breadth-first search over walk-and-pull moves, starting from the
        circles on the first line in row-major order with no crosses.  Every
        layer of the search is one pull deeper, and that depth bounds the
        push count of its states from above.  Positions that are not won,
        cannot be won by walking and pass the deadlock checks are scored
        from the layer at the band's minimum push count upwards; the first
        one inside the band is returned, otherwise the closest one scored.
        Nothing here depends on the seed or the clock.
        """
        difficulty = Difficulty(difficulty)
        band = self.config.profile(difficulty).band
        detector = DeadlockDetector(geometry, self.rules)
        layers = self._fallback_layers(geometry, detector)
        if not any(layers):
            raise GenerationExhausted(
                f"No fallback puzzle exists on this board (seed={seed})."
            )

        picked = self._pick_fallback(layers, band)
        if picked is None:
            raise GenerationExhausted(
                f"No fallback candidate could be verified (seed={seed})."
            )
        state, score = picked
        logger.debug(
            f"Fallback puzzle: pushes={score.pushes} score={score.value} "
            f"-> {band.classify(score)}"
        )
        return Puzzle(geometry, state, difficulty, score, seed, is_fallback=True)

    def _fallback_layers(
        self, geometry: BoardGeometry, detector: DeadlockDetector
    ) -> list[list[State]]:
        """Fallback candidates grouped by their pull distance from the start."""
        encoder = StateEncoder(geometry)
        line = list(iter_bits(winning_lines(geometry, self.rules)[0]))

        frontier: list[State] = []
        seen: set[int] = set()
        for player in line:
            circles = sum(1 << i for i in line if i != player)
            start = State(geometry, player, circles, 0)
            key = encoder.encode(normalized(start))
            if key not in seen:
                seen.add(key)
                frontier.append(start)

        layers: list[list[State]] = [[]]
        while frontier and len(seen) < FALLBACK_NODES:
            reached: list[State] = []
            candidates: list[State] = []
            for state in frontier:
                for move in reachable_pulls(state):
                    nxt = transition(state, move)
                    key = encoder.encode(normalized(nxt))
                    if key in seen or is_loss(nxt, self.rules):
                        continue
                    seen.add(key)
                    reached.append(nxt)
                    if self._is_fallback_candidate(nxt, detector):
                        candidates.append(nxt)
            if reached:
                layers.append(candidates)
            frontier = reached
        return layers

    def _pick_fallback(
        self, layers: list[list[State]], band: DifficultyBand
    ) -> tuple[State, DifficultyScore] | None:
        solver = Solver(self.rules, FALLBACK_BUDGET)
        first = min(max(band.min_pushes, 1), len(layers) - 1)
        best: tuple[State, DifficultyScore] | None = None
        solves = 0
        # Deeper layers first from the band's floor; shallower ones only if
        # nothing at or above it could be scored.
        for depths in (range(first, len(layers)), range(first - 1, 0, -1)):
            for depth in depths:
                above = False
                for state in layers[depth][:FALLBACK_TRIES]:
                    if solves >= FALLBACK_SOLVES:
                        return best
                    solves += 1
                    solution = solver.solve(state)
                    if not (solution.is_found and solution.push_count):
                        continue
                    score = self._score_solution(state, solution)
                    fit = band.classify(score)
                    if fit is BandFit.WITHIN:
                        return state, score
                    above = above or fit is BandFit.ABOVE
                    if best is None or band_gap(band, score) < band_gap(band, best[1]):
                        best = state, score
                if above or (best is not None and depth < first):
                    break
            if best is not None:
                return best
        return best

    def _is_fallback_candidate(self, state: State, detector: DeadlockDetector) -> bool:
        if is_win(state, self.rules) or detector.is_deadlocked(state):
            return False
        lines = winning_lines(state.geometry, self.rules)
        for cell in iter_bits(reachable(state)):
            mask = state.circles | (1 << cell)
            if any(mask & line == line for line in lines):
                return False
        return True


def band_gap(band: DifficultyBand, score: DifficultyScore) -> float:
    """How far ``score`` lies outside ``band``, in score points; 0 inside or on its edge."""
    gap = max(band.min_score - score.value, float(band.min_pushes - score.pushes), 0.0)
    if band.max_score is not None:
        gap = max(gap, score.value - band.max_score)
    if band.max_pushes is not None:
        gap = max(gap, float(score.pushes - band.max_pushes))
    return gap


def generate(
    geometry: BoardGeometry,
    difficulty: Difficulty | str = Difficulty.EASY,
    seed: int = 0,
    cross_count: int | None = None,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> Puzzle:
    """Generate a puzzle with a fresh ``GameGenerator``."""
    return GameGenerator(config).generate(geometry, difficulty, seed, cross_count)
