from .engine import MatchAggregator, weighted_overall
from .skills import SkillsScorer
from .types import MatchBreakdown, SkillsScore

__all__ = ["MatchAggregator", "weighted_overall", "SkillsScorer", "MatchBreakdown", "SkillsScore"]
