# Rules Package
from rakshak.rules.accident_rules import AccidentRules, RuleEngine, RuleResult

__all__ = ["AccidentRules", "RuleEngine", "RuleResult"]
