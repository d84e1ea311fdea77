"""
scoring/ - judging computation

Modules:
    utils.py                - float helpers and the judge total rule
    rubric_validator.py     - raw input -> normalized criterion values
    aggregator.py           - Score[] -> AggregatedScore
    leaderboard_builder.py  - aggregated submissions -> ranked Leaderboard
    leaderboard_filters.py  - filtering / display sorting of a Leaderboard
    trend.py                - team score history and trend
"""
