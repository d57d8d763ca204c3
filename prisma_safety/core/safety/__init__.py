from .config import SafetyConfig, load_config
from .engine import SafetyRuleEngine, list_safety_issues
from .models import IssueKind, SafetyIssue
from .rules import BUILTIN_RULES


__all__ = [
    "BUILTIN_RULES",
    "IssueKind",
    "SafetyConfig",
    "SafetyIssue",
    "SafetyRuleEngine",
    "list_safety_issues",
    "load_config",
]
