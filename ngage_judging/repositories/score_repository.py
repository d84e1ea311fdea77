"""
Score Repository - Ngage Judging Engine
ngage_judging/repositories/score_repository.py

Data access layer for judge Score records.
"""

from typing import Dict, Iterable, List, Optional

from ngage_judging.models.score import Score
from ngage_judging.repositories.base import BaseRepository


class ScoreRepository(BaseRepository[Score]):
    """
    Repository for Score CRUD operations.

    The store does not enforce one score per (submission, judge); callers
    look up the pair before creating.
    """

    COLLECTION = "scores"
    ENTITY_TYPE = "Score"
    MODEL = Score

    def create(self, score: Score) -> Score:
        """
        Create a new score.

        Raises:
            DuplicateEntityException: a score with the same id exists
        """
        return self._create(score)

    def get_by_id(self, score_id: str) -> Optional[Score]:
        return self._get(score_id)

    def get_by_submission_id(self, submission_id: str) -> List[Score]:
        """Scores for a submission, newest first."""
        return self._find([("submissionId", "==", submission_id)])

    def get_by_judge_id(self, judge_id: str) -> List[Score]:
        """Scores given by a judge, newest first."""
        return self._find([("judgeId", "==", judge_id)])

    def get_by_event_id(self, event_id: str) -> List[Score]:
        """Scores recorded in an event, newest first."""
        return self._find([("eventId", "==", event_id)])

    def get_by_submission_and_judge(self, submission_id: str, judge_id: str) -> Optional[Score]:
        """Most recent score a judge gave a submission, if any."""
        matches = self._find(
            [("submissionId", "==", submission_id), ("judgeId", "==", judge_id)],
            limit=1,
        )
        return matches[0] if matches else None

    def update(self, score: Score) -> Score:
        """
        Replace an existing score.

        Raises:
            EntityNotFoundException: no score with this id
        """
        return self._replace(score)

    def get_by_submission_ids(self, submission_ids: Iterable[str]) -> Dict[str, List[Score]]:
        """
        Scores for several submissions, keyed by submission id.

        Every requested id gets an entry, empty when it has no scores, so
        "not scored yet" is distinguishable from "not requested".
        """
        ids = list(dict.fromkeys(submission_ids))
        result: Dict[str, List[Score]] = {submission_id: [] for submission_id in ids}

        for batch in self.chunked(ids, self.store.in_query_limit):
            for score in self._find([("submissionId", "in", batch)], order_by=None):
                result[score.submission_id].append(score)

        for scores in result.values():
            scores.sort(key=lambda s: s.created_at, reverse=True)

        return result
