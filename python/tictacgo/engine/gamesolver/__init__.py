from tictacgo.engine.gamesolver.context import SearchBudget, SearchContext
from tictacgo.engine.gamesolver.metrics import dependency_count, push_options
from tictacgo.engine.gamesolver.solution import Solution, SolverMetrics, SolveStatus
from tictacgo.engine.gamesolver.solver import Solver, push_lower_bound

__all__ = [
    "SearchBudget",
    "SearchContext",
    "Solution",
    "SolveStatus",
    "Solver",
    "SolverMetrics",
    "dependency_count",
    "push_lower_bound",
    "push_options",
]
