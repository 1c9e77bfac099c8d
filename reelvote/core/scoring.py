"""Final score policies.

A policy turns the per-cohort averages of a reel into its final score. The
active policy is selected by ``settings.SCORING_POLICY``; every policy falls
back to whichever cohort actually voted, and scores 0 when nobody did.
"""
from typing import Callable, Dict

ScoringPolicy = Callable[[float, float, int, int], float]


def _blend(judge_weight: float) -> ScoringPolicy:
    audience_weight = 1.0 - judge_weight

    def compute_final_score(
        audience_avg: float,
        judge_avg: float,
        audience_count: int,
        judge_count: int,
    ) -> float:
        if audience_count > 0 and judge_count > 0:
            return judge_avg * judge_weight + audience_avg * audience_weight
        if judge_count > 0:
            return judge_avg
        if audience_count > 0:
            return audience_avg
        return 0.0

    return compute_final_score


SCORING_POLICIES: Dict[str, ScoringPolicy] = {
    "balanced": _blend(0.5),
    "judge_weighted": _blend(0.6),
}


def get_scoring_policy(name: str) -> ScoringPolicy:
    """Look up a policy by name."""
    try:
        return SCORING_POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown scoring policy: {name}")


def compute_final_score(
    audience_avg: float,
    judge_avg: float,
    audience_count: int,
    judge_count: int,
    policy: str = "balanced",
) -> float:
    """Compute a reel's final score with the named policy, rounded to 2 places."""
    score = get_scoring_policy(policy)(audience_avg, judge_avg, audience_count, judge_count)
    return round(score, 2)
