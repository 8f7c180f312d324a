"""
Stak Session Test Suite
=======================

Tests for the Session driver: running source, persistent state, file
handling, and error rendering with source context.
"""

from pathlib import Path

import pytest
from stak.session import Session, SessionOptions, RunResult
from stak.runtime.values import Value
from stak.language.ast import ChunkNode
from stak.errors import LexError, ParseError, StakError, UnknownIdentifierError


# =============================================================================
# Running Source
# =============================================================================

class TestRunSource:
    """Test Session.run_source."""

    def test_result(self):
        result = Session().run_source("1 2 +")
        assert isinstance(result, RunResult)
        assert result.filename == "<input>"
        assert result.token_count == 3
        assert isinstance(result.ast, ChunkNode)
        assert result.stack == [Value.integer(3)]

    def test_state_persists(self):
        session = Session()
        session.run_source("1 2")
        assert session.run_source("+").stack == [Value.integer(3)]

    def test_variables_persist(self):
        session = Session()
        session.run_source("1 2 (a b)")
        assert session.run_source("b a").stack == [Value.integer(2), Value.integer(1)]

    def test_macros_persist(self):
        session = Session()
        session.run_source("macro sq (int) copy * end")
        assert session.run_source("4 sq").stack == [Value.integer(16)]

    def test_failed_run_keeps_prefix(self):
        session = Session()
        with pytest.raises(UnknownIdentifierError):
            session.run_source("1 2 foo")
        assert session.stack == [Value.integer(1), Value.integer(2)]

    def test_parse_source_does_not_run(self):
        session = Session()
        result = session.parse_source("1 2 +")
        assert result.token_count == 3
        assert session.stack == []

    def test_options(self):
        session = Session(SessionOptions(filename="repl", trace=True))
        assert session.program.trace is True
        assert session.run_source("1").filename == "repl"


# =============================================================================
# Files
# =============================================================================

class TestRunFile:
    """Test Session.run_file."""

    def test_run_file(self, tmp_path: Path):
        source = tmp_path / "prog.stk"
        source.write_text('"ab" 3 *  # repeat\n', encoding="utf-8")
        result = Session().run_file(str(source))
        assert result.filename == str(source)
        assert result.stack == [Value.string("ababab")]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            Session().run_file(str(tmp_path / "missing.stk"))


# =============================================================================
# Error Rendering
# =============================================================================

class TestErrorRendering:
    """Errors carry the filename and offending source line."""

    def test_execution_error(self):
        with pytest.raises(UnknownIdentifierError) as excinfo:
            Session().run_source("1 2 +\nfoo", "script.stk")
        lines = str(excinfo.value).splitlines()
        assert lines[0] == "script.stk:2:1: error: unknown id 'foo'"
        assert lines[1] == "    foo"
        assert lines[2] == "    ^^^"
        assert lines[3].startswith("hint:")

    def test_caret_under_token(self):
        with pytest.raises(StakError) as excinfo:
            Session().run_source("1 2 bar")
        lines = str(excinfo.value).splitlines()
        assert lines[1] == "    1 2 bar"
        assert lines[2] == "        ^^^"

    def test_lex_error(self):
        with pytest.raises(LexError) as excinfo:
            Session().run_source('"abc')
        assert str(excinfo.value).startswith("<input>:1:1: error: unclosed string")

    def test_parse_error(self):
        with pytest.raises(ParseError) as excinfo:
            Session().run_source("1 end", "x.stk")
        assert str(excinfo.value).startswith("x.stk:1:3: error: unexpected token end")

    def test_error_attributes(self):
        with pytest.raises(StakError) as excinfo:
            Session().run_source("nope")
        error = excinfo.value
        assert error.message == "unknown id 'nope'"
        assert error.position.column == 1
        assert error.filename == "<input>"
        assert error.source_line == "nope"

    def test_source_line_counts_newlines_only(self):
        with pytest.raises(UnknownIdentifierError) as excinfo:
            Session().run_source("1\x0c2\nfoo")
        assert excinfo.value.position.line == 2
        assert excinfo.value.source_line == "foo"

    def test_source_line_drops_carriage_return(self):
        with pytest.raises(UnknownIdentifierError) as excinfo:
            Session().run_source("foo\r\n1")
        assert excinfo.value.source_line == "foo"
