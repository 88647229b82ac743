"""
Rule engine: tokenizes a source once and runs every enabled rule over it.

A rule that raises is recorded as a diagnostic for that rule only; the other
rules' violations are kept. An unterminated literal stops the file (nothing
can be checked reliably) and is reported as a tokenizer diagnostic.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from luastyle.config import LintConfig, default_config
from luastyle.errors import Diagnostic, MalformedLiteral, RuleFault
from luastyle.lexer import tokenize
from luastyle.reporting import Violation, sort_key
from luastyle.rules import RULES, Rule
from luastyle.structure import SourceFile


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileResult:
    """Violations and diagnostics for one file."""
    path: str
    violations: List[Violation] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations and not self.diagnostics


class Linter:
    """
    Runs registered rules against Lua sources.

    Usage:
        linter = Linter(load_config())
        result = linter.lint_source(text, "init.lua")
    """

    def __init__(self, config: Optional[LintConfig] = None, rules: Optional[Sequence[Rule]] = None):
        self.config = config or default_config()
        if rules is None:
            rules = [RULES[rid] for rid in self.config.enabled_rules]
        self.rules = list(rules)

    def lint_source(self, text: str, path: str = "<string>") -> FileResult:
        """Lint one source buffer."""
        try:
            tokens = tokenize(text, path)
        except MalformedLiteral as e:
            logger.warning(f"{path}: {e}")
            return FileResult(path=path, diagnostics=[Diagnostic(
                component="tokenizer",
                message=str(e),
                path=path,
                line=e.line,
                column=e.column,
            )])

        source = SourceFile(path=path, text=text, tokens=tokens)
        violations: List[Violation] = []
        diagnostics: List[Diagnostic] = []
        for rule in self.rules:
            try:
                violations.extend(self._run_rule(rule, source))
            except Exception as e:
                fault = RuleFault(rule.rule_id, e)
                logger.warning(f"{path}: {fault}", exc_info=logger.isEnabledFor(logging.DEBUG))
                diagnostics.append(Diagnostic(
                    component=f"rule:{rule.rule_id}",
                    message=str(fault),
                    path=path,
                ))

        violations.sort(key=sort_key)
        logger.debug(f"{path}: {len(violations)} violation(s) from {len(self.rules)} rule(s)")
        return FileResult(path=path, violations=violations, diagnostics=diagnostics)

    def _run_rule(self, rule: Rule, source: SourceFile) -> List[Violation]:
        settings = self.config.rules.get(rule.rule_id)
        if settings is None:
            options = {p.name: p.default for p in rule.parameters}
            severity = rule.severity
        else:
            options = settings.parameters
            severity = settings.severity
        found = rule.check(source, options)
        if severity is not rule.severity:
            found = [dataclasses.replace(v, severity=severity) for v in found]
        return found


def lint_source(text: str, path: str = "<string>", config: Optional[LintConfig] = None) -> FileResult:
    """Convenience function to lint a source buffer."""
    return Linter(config).lint_source(text, path)
