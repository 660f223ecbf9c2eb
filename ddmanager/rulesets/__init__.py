from .store import RulesetStore
from .matcher import direct_matches, bound_matches, matching_monitors

__all__ = [
    "RulesetStore",
    "direct_matches",
    "bound_matches",
    "matching_monitors",
]
