"""
Scoring Utilities
ngage_judging/scoring/utils.py

Float helpers shared by the aggregator and leaderboard builder. Nothing here
rounds; rounding is a display concern.
"""

import math
from typing import Dict, List, Mapping, Optional, Union

from ngage_judging.models.enumerations import TotalScoreRule
from ngage_judging.models.rubric import ScoringRubric

Number = Union[int, float]


def as_number(value: object) -> Optional[float]:
    """Return value as a float if it is a finite real number, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def mean(values: List[float]) -> float:
    """Arithmetic mean; 0.0 for an empty list."""
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def weighted_mean(values: List[float], weights: List[float]) -> float:
    """
    Calculate weighted mean.

    Formula: Σ(value_i × weight_i) / Σ(weight_i)
    Returns 0.0 if all weights are zero.
    """
    if len(values) != len(weights):
        raise ValueError("values and weights must have same length")

    total_weight = math.fsum(weights)
    if total_weight == 0:
        return 0.0
    return math.fsum(v * w for v, w in zip(values, weights)) / total_weight


def compute_total(
    values: Mapping[str, object],
    rubric: Optional[ScoringRubric] = None,
    rule: TotalScoreRule = TotalScoreRule.WEIGHTED_MEAN,
) -> Optional[float]:
    """
    Combine one judge's per-criterion values into a single total.

    Only numeric values take part; booleans and keys the rubric does not
    define are ignored. Without a rubric every key weighs 1.0.

    Returns:
        The total, or None when no numeric value is present.
    """
    numbers: List[float] = []
    weights: List[float] = []
    maxima: List[Optional[float]] = []

    if rubric is not None:
        for criterion in rubric.criteria:
            number = as_number(values.get(criterion.key))
            if number is None:
                continue
            numbers.append(number)
            weights.append(criterion.weight)
            maxima.append(criterion.upper_bound)
    else:
        for key in sorted(values):
            number = as_number(values[key])
            if number is None:
                continue
            numbers.append(number)
            weights.append(1.0)
            maxima.append(None)

    if not numbers:
        return None

    if rule == TotalScoreRule.SIMPLE_SUM:
        return math.fsum(numbers)

    if rule == TotalScoreRule.NORMALIZED_PERCENT and rubric is not None:
        possible = math.fsum(m * w for m, w in zip(maxima, weights))
        if possible == 0:
            return 0.0
        return math.fsum(v * w for v, w in zip(numbers, weights)) / possible * 100

    return weighted_mean(numbers, weights)


def scores_tied(a: float, b: float, epsilon: float) -> bool:
    return abs(a - b) <= epsilon


def criteria_means(samples: Mapping[str, List[float]]) -> Dict[str, float]:
    return {key: mean(values) for key, values in samples.items() if values}
