from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

@dataclass(frozen=True)
class RuleResult:
    """
    Outcome of one export check. Skipped checks count as passed.
    """
    rule_id: str
    passed: bool
    message: str
    metrics: Optional[dict[str, Any]] = None
    skipped: bool = False

@dataclass(frozen=True)
class ValidationReport:
    """
    All checks run against one exported file.
    """
    passed: bool
    results: list[RuleResult]

    def find(self, rule_id: str) -> RuleResult:
        for r in self.results:
            if r.rule_id == rule_id:
                return r
        raise KeyError(rule_id)
