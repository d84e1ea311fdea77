"""
ngage_judging - score aggregation, leaderboard ranking and rubric validation
for Ngage event judging.
"""

__version__ = "1.0.0"
