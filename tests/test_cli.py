"""
CLI Tests
=========

Tests for the kscope command using click's CliRunner.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from kscope import __version__
from kscope.cli.kscope import main


@pytest.fixture
def runner():
    return CliRunner()


# =============================================================================
# Expression Mode Tests
# =============================================================================

class TestExpressionMode:
    """kscope -e TEXT"""

    def test_prints_grouping(self, runner):
        result = runner.invoke(main, ["-e", "1+2*3"])
        assert result.exit_code == 0
        assert result.output.strip() == "(1.0 + (2.0 * 3.0))"

    def test_ast_output(self, runner):
        result = runner.invoke(main, ["--ast", "-e", "a-b"])
        assert result.exit_code == 0
        assert "BinaryOp: -" in result.output
        assert "  Variable: b" in result.output

    def test_syntax_error(self, runner):
        result = runner.invoke(main, ["-e", "1+"])
        assert result.exit_code == 1
        assert "<expr>:1:3: error: unknown token when expecting a primary expression" in result.output

    def test_deep_nesting_is_a_syntax_error(self, runner):
        result = runner.invoke(main, ["-e", "(" * 400 + "1" + ")" * 400])
        assert result.exit_code == 1
        assert "expression nested too deeply" in result.output

    def test_strict_numbers(self, runner):
        assert runner.invoke(main, ["-e", "1.2.3"]).exit_code == 0
        result = runner.invoke(main, ["--strict-numbers", "-e", "1.2.3"])
        assert result.exit_code == 1
        assert "invalid numeric literal '1.2.3'" in result.output


# =============================================================================
# File and Stream Tests
# =============================================================================

class TestFileInput:
    """Parsing files and standard input."""

    def test_parse_file(self, runner):
        with runner.isolated_filesystem():
            Path("prog.ks").write_text("def foo(a b) a+b;\nextern sin(x);\nfoo(1, 2);\n")
            result = runner.invoke(main, ["prog.ks", "--ast"])
        assert result.exit_code == 0
        assert "Function: foo(a, b)" in result.output
        assert "Extern: sin(x)" in result.output
        assert "Function: <anonymous>()" in result.output

    def test_parse_file_with_errors(self, runner):
        with runner.isolated_filesystem():
            Path("bad.ks").write_text("def foo(a, b) a+b\n")
            result = runner.invoke(main, ["bad.ks"])
        assert result.exit_code == 1
        assert "bad.ks:1:10: error: expected ')' in prototype" in result.output
        assert "2 errors" in result.output

    def test_max_errors(self, runner):
        with runner.isolated_filesystem():
            Path("bad.ks").write_text(") ) ) )\n")
            result = runner.invoke(main, ["--max-errors", "2", "bad.ks"])
        assert result.exit_code == 1
        assert "2 errors" in result.output

    def test_missing_file(self, runner):
        result = runner.invoke(main, ["does-not-exist.ks"])
        assert result.exit_code == 2

    def test_negative_max_errors_rejected(self, runner):
        result = runner.invoke(main, ["--max-errors", "-1", "-e", "1"])
        assert result.exit_code == 2

    def test_stdin(self, runner):
        result = runner.invoke(main, [], input="def id(x) x;\nid(4);\n")
        assert result.exit_code == 0
        assert "ready> " not in result.output

    def test_stdin_dash(self, runner):
        result = runner.invoke(main, ["--ast", "-"], input="extern cos(x)\n")
        assert result.exit_code == 0
        assert "Extern: cos(x)" in result.output

    def test_stdin_prompt(self, runner):
        result = runner.invoke(main, ["--prompt"], input="1;\n")
        assert result.exit_code == 0
        assert "ready> " in result.output

    def test_env_strict_numbers(self, runner):
        result = runner.invoke(
            main, [], input="1.2.3\n", env={"KSCOPE_STRICT_NUMBERS": "1"}
        )
        assert result.exit_code == 1
        assert "1 error" in result.output


# =============================================================================
# Misc Tests
# =============================================================================

class TestMisc:

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "--strict-numbers" in result.output
