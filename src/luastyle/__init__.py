"""
luastyle - Lua style conformance linter

Tokenizes Lua source, runs independent style rules over the token stream,
and reports violations in a stable order.
"""

__version__ = "0.1.0"
__author__ = "luastyle contributors"

from luastyle.lexer import Lexer, Token, TokenType, tokenize
from luastyle.errors import ConfigError, Diagnostic, LuaStyleError, MalformedLiteral, RuleFault
from luastyle.reporting import Reporter, Severity, Violation
from luastyle.config import LintConfig, RuleSettings, config_from_mapping, default_config, load_config
from luastyle.engine import FileResult, Linter, lint_source

__all__ = [
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Errors
    "ConfigError",
    "Diagnostic",
    "LuaStyleError",
    "MalformedLiteral",
    "RuleFault",
    # Reporting
    "Reporter",
    "Severity",
    "Violation",
    # Configuration
    "LintConfig",
    "RuleSettings",
    "config_from_mapping",
    "default_config",
    "load_config",
    # Engine
    "FileResult",
    "Linter",
    "lint_source",
]
