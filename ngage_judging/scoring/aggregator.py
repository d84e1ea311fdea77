# ngage_judging/scoring/aggregator.py
"""
Score Aggregator
----------------
Collapses every judge Score for one submission into an AggregatedScore.

    judge_total_j    = score_j.total_score, or compute_total(score_j.scores)
    average_score    = mean(judge_total_j)
    score_range      = [min(judge_total_j), max(judge_total_j)]
    criteria_avg[k]  = mean of score_j.scores[k] over judges that scored k

A judge that left a criterion blank does not drag its average toward zero.
Records with no usable total still count toward judge_count but not toward
the average or range. Malformed persisted values are skipped, never raised.
"""

from typing import Any, Dict, List, Optional, Sequence

import structlog

from ngage_judging.models.aggregation import AggregatedScore, ScoreRange
from ngage_judging.models.enumerations import TotalScoreRule
from ngage_judging.models.rubric import ScoringRubric
from ngage_judging.models.score import Score
from ngage_judging.scoring.utils import as_number, compute_total, criteria_means, mean


class ScoreAggregator:
    """Aggregate judge scores for a submission."""

    def __init__(
        self,
        rubric: Optional[ScoringRubric] = None,
        rule: TotalScoreRule = TotalScoreRule.WEIGHTED_MEAN,
        logger: Optional[Any] = None,
    ):
        self.rubric = rubric
        self.rule = rule
        self._logger = logger or structlog.get_logger(__name__)

    def judge_total(self, score: Score) -> Optional[float]:
        """One judge's total: the stored value, else computed from criteria."""
        stored = as_number(score.total_score)
        if stored is not None:
            return stored
        return compute_total(score.scores, self.rubric, self.rule)

    def aggregate(self, scores: Sequence[Score], submission_id: Optional[str] = None) -> AggregatedScore:
        """
        Args:
            scores: Every Score recorded for the submission, in any order.
            submission_id: Id to report when scores is empty.

        Returns:
            AggregatedScore; the zero-judge result when scores is empty.
        """
        if submission_id is None:
            submission_id = scores[0].submission_id if scores else ""

        if not scores:
            return AggregatedScore(submission_id=submission_id)

        totals: List[float] = []
        samples: Dict[str, List[float]] = {}

        for score in scores:
            total = self.judge_total(score)
            if total is not None:
                totals.append(total)
            for key, value in score.scores.items():
                number = as_number(value)
                if number is not None:
                    samples.setdefault(key, []).append(number)

        result = AggregatedScore(
            submission_id=submission_id,
            judge_count=len(scores),
            average_score=mean(totals),
            total_score=sum(totals),
            score_range=ScoreRange(
                min=min(totals) if totals else 0.0,
                max=max(totals) if totals else 0.0,
            ),
            criteria_averages=criteria_means(samples),
            individual_scores=list(scores),
        )

        self._logger.debug(
            "submission_aggregated",
            submission_id=submission_id,
            judge_count=result.judge_count,
            judges_with_total=len(totals),
            average_score=result.average_score,
        )
        return result
