"""
Tests for the rule engine: rule orchestration, fault isolation, ordering.
"""

import pytest

from conftest import lint, only
from luastyle.config import config_from_mapping, default_config
from luastyle.engine import Linter, lint_source
from luastyle.errors import ConfigError
from luastyle.reporting import Severity, Violation
from luastyle.rules import RULES


class BoomRule:
    """A rule that always crashes."""

    rule_id = "boom"
    description = "Always raises"
    severity = Severity.WARNING
    parameters = ()

    def check(self, source, options):
        raise RuntimeError("kaboom")


class TestExamples:
    """End-to-end behaviour on small inputs."""

    def test_double_quoted_string(self):
        """`local foo = "Bob";` under single-quote style gives one quoting violation."""
        result = lint('local foo = "Bob";', "quoting", quoteStyle="single")
        assert [(v.rule_id, v.line, v.column) for v in result.violations] == [("quoting", 1, 13)]

    def test_comma_chained_declaration(self):
        result = lint("local a, b = 1, true;", "declaration-style")
        assert [v.rule_id for v in result.violations] == ["declaration-style"]

    def test_spacing_and_semicolons_together(self):
        result = lint("if(x) then\n\treturn x\nend", "spacing", "semicolons")
        assert [(v.rule_id, v.line, v.column) for v in result.violations] == [
            ("spacing", 1, 3),
            ("semicolons", 2, 10),
        ]

    def test_missing_final_newline(self):
        assert len(lint("local x = 1;", "eof-newline").violations) == 1
        assert lint("local x = 1;\n", "eof-newline").violations == []

    def test_unknown_rule_in_config(self):
        with pytest.raises(ConfigError):
            config_from_mapping({"rules": {"no-such-rule": {"enabled": True}}})


class TestOrchestration:
    """Rule selection and result shape."""

    def test_default_config_runs_every_rule(self):
        assert [r.rule_id for r in Linter().rules] == list(RULES)

    def test_disabled_rules_do_not_run(self):
        result = lint('local foo = "Bob"', "quoting")
        assert {v.rule_id for v in result.violations} == {"quoting"}

    def test_violations_sorted(self):
        result = lint_source('local a_b = "x"\nlocal c_d = "y"\n')
        keys = [(v.line, v.column, v.rule_id) for v in result.violations]
        assert keys == sorted(keys)

    def test_path_attached(self):
        result = Linter(only("quoting")).lint_source('x = "a";\n', "src/init.lua")
        assert result.violations[0].path == "src/init.lua"

    def test_offsets_within_source(self):
        source = 'local a_b, c = "x", 2\nif(a_b) then\n  print(a_b)\nend\nprint(c)'
        result = lint_source(source)
        assert result.violations
        for v in result.violations:
            assert 0 <= v.offset <= len(source)
            assert v.line >= 1 and v.column >= 1

    def test_clean_source_is_ok(self):
        result = lint_source("local x = 1;\n")
        assert result.ok

    def test_severity_override(self):
        config = config_from_mapping({
            "default_enabled": False,
            "rules": {"quoting": {"enabled": True, "severity": "error"}},
        })
        result = Linter(config).lint_source('x = "a";\n')
        assert result.violations[0].severity is Severity.ERROR

    def test_rule_severity_default(self):
        result = lint("--bad\n", "comment-style")
        assert result.violations[0].severity is Severity.INFO


class TestProperties:
    """Idempotence and independence of rules."""

    SOURCE = 'local first, second = "a", "b"\nif(first) then\n  print(first)\nend\nprint(second)'

    def test_idempotent(self):
        linter = Linter(default_config())
        assert linter.lint_source(self.SOURCE) == linter.lint_source(self.SOURCE)

    def test_rules_are_independent(self):
        """Each rule's output is the same alone as alongside every other rule."""
        combined = lint_source(self.SOURCE).violations
        for rule_id in RULES:
            alone = lint(self.SOURCE, rule_id).violations
            together = [v for v in combined if v.rule_id == rule_id]
            assert [(v.line, v.column, v.message) for v in alone] == \
                [(v.line, v.column, v.message) for v in together]

    def test_violations_are_immutable(self):
        v = lint_source(self.SOURCE).violations[0]
        assert isinstance(v, Violation)
        with pytest.raises(AttributeError):
            v.line = 99


class TestFaults:
    """Tooling faults become diagnostics."""

    def test_rule_fault_is_isolated(self):
        linter = Linter(default_config(), rules=[BoomRule(), RULES["quoting"]])
        result = linter.lint_source('x = "a";\n', "f.lua")
        assert [v.rule_id for v in result.violations] == ["quoting"]
        assert len(result.diagnostics) == 1
        diag = result.diagnostics[0]
        assert diag.component == "rule:boom"
        assert "kaboom" in diag.message
        assert diag.path == "f.lua"

    def test_unterminated_string(self):
        result = lint_source("local s = 'never closed\n", "broken.lua")
        assert result.violations == []
        assert len(result.diagnostics) == 1
        diag = result.diagnostics[0]
        assert diag.component == "tokenizer"
        assert (diag.line, diag.column) == (1, 11)
        assert str(diag).startswith("broken.lua:1:11: error: tokenizer:")

    def test_unterminated_block_comment(self):
        result = lint_source("--[[ open\n")
        assert result.diagnostics[0].component == "tokenizer"

    def test_unbalanced_blocks_do_not_crash(self):
        result = lint_source("end end )\nfunction f(\n")
        assert result.diagnostics == []
