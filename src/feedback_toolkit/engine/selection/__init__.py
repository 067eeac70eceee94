"""
Selection Package

Chooses which questions a time-bounded call should ask.

Exports:
    - select_questions: Main selection entry point
    - Constraints: Per-call budget, threshold and strategy
    - SelectionAlgorithm: Strategy identifiers
    - available_strategies: Strategy descriptions
    - recommend_algorithm: Strategy suggestion from candidate count and preference
    - SelectionError: Internal contract violation
"""

from .algorithm import (
    AlgorithmPreference,
    SelectionAlgorithm,
    available_strategies,
    recommend_algorithm,
)
from .config import Constraints
from .knapsack import solve_knapsack
from .selector import SelectionError, Selector, select_questions
from .strategies import (
    STRATEGY_REGISTRY,
    DynamicProgrammingStrategy,
    GreedyPriorityStrategy,
    SelectionStrategy,
    StrategyOutcome,
    TimeBalancedStrategy,
    TokenEstimationStrategy,
    get_strategy,
)

__all__ = [
    "select_questions",
    "Selector",
    "SelectionError",
    "Constraints",
    "SelectionAlgorithm",
    "available_strategies",
    "AlgorithmPreference",
    "recommend_algorithm",
    "solve_knapsack",
    "STRATEGY_REGISTRY",
    "SelectionStrategy",
    "StrategyOutcome",
    "GreedyPriorityStrategy",
    "DynamicProgrammingStrategy",
    "TimeBalancedStrategy",
    "TokenEstimationStrategy",
    "get_strategy",
]
