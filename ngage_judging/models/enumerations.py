from enum import Enum

class ScoringType(str, Enum):
    NUMERIC = "numeric"  # 0..max_score
    SCALE = "scale"      # options.min..options.max
    BOOLEAN = "boolean"

class SubmissionStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"

class TotalScoreRule(str, Enum):
    WEIGHTED_MEAN = "weighted_mean"            # sum(v*w) / sum(w)
    SIMPLE_SUM = "simple_sum"                  # sum(v)
    NORMALIZED_PERCENT = "normalized_percent"  # sum(v*w) / sum(max*w) * 100

class RankingMode(str, Enum):
    SEQUENTIAL = "sequential"    # 1, 2, 3, 4
    COMPETITION = "competition"  # 1, 2, 2, 4

class LeaderboardSortField(str, Enum):
    AVERAGE_SCORE = "average_score"
    TOTAL_SCORE = "total_score"
    SUBMISSION_COUNT = "submission_count"
    TEAM_NAME = "team_name"

class TrendDirection(str, Enum):
    UPWARD = "upward"
    DOWNWARD = "downward"
    STABLE = "stable"

class JudgeRole(str, Enum):
    JUDGE = "judge"
    LEAD_JUDGE = "lead_judge"
    PANEL_MEMBER = "panel_member"
