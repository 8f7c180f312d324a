"""
Stak Session Driver
===================

A Session ties the front end and the evaluator together and keeps one
Program alive across calls, which is what both the CLI and the REPL
need: every piece of input runs against the stack, variables, and
macros left behind by the previous one.

Pipeline
--------
    Source → Lexer → Tokens → Parser → AST → Program.run → Stack

Usage
-----
>>> from stak.session import Session
>>> session = Session()
>>> session.run_source("1 2 (a b)").stack
[]
>>> session.run_source("b a").stack
[2, 1]

Errors
------
Every StakError raised by a stage is re-raised with the offending source
line and filename attached, so ``str(error)`` shows the location, the
line, and a caret under the failing span. A failed run keeps whatever
state the instructions before the failure produced.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging

from stak.errors import StakError
from stak.language.ast import ChunkNode
from stak.language.lexer import Token, lex
from stak.language.parser import parse
from stak.runtime.program import Program
from stak.runtime.values import Value


logger = logging.getLogger(__name__)


@dataclass
class SessionOptions:
    """
    Session configuration options.

    Attributes:
        filename: Name used in error locations for source run directly
        trace: Log every evaluated node (and the stack before it) at DEBUG
    """
    filename: str = "<input>"
    trace: bool = False


@dataclass
class RunResult:
    """
    Result of running one piece of source.

    Attributes:
        filename: Name the source was run under
        token_count: Number of tokens lexed
        tokens: The tokens themselves
        ast: Root of the parsed AST
        stack: Snapshot of the operand stack after the run, bottom first
    """
    filename: str = ""
    token_count: int = 0
    tokens: list[Token] = field(default_factory=list)
    ast: Optional[ChunkNode] = None
    stack: list[Value] = field(default_factory=list)


class Session:
    """
    A persistent Stak interpreter.

    Example:
        session = Session(SessionOptions(trace=True))
        session.run_source("macro sq (int) copy * end")
        result = session.run_source("4 sq")
        print(result.stack)

    Attributes:
        options: Session configuration
        program: The Program all input runs against
    """

    def __init__(self, options: Optional[SessionOptions] = None):
        """
        Initialize the session.

        Args:
            options: Session configuration (uses defaults if None)
        """
        self.options = options or SessionOptions()
        self.program = Program.std_program()
        self.program.trace = self.options.trace

    def run_source(self, source: str, filename: Optional[str] = None) -> RunResult:
        """
        Lex, parse, and run a piece of source.

        Args:
            source: Stak source code
            filename: Name for error messages (defaults to options.filename)

        Returns:
            RunResult describing the completed run

        Raises:
            StakError: On the first lexing, parsing, or execution error
        """
        result = self.parse_source(source, filename)

        try:
            self.program.run(result.ast)
        except StakError as e:
            logger.debug(f"Run of {result.filename} failed: {e.message}")
            raise e.attach_source(source, result.filename)

        result.stack = list(self.program.stack)
        return result

    def parse_source(self, source: str, filename: Optional[str] = None) -> RunResult:
        """
        Lex and parse a piece of source without running it.

        Args:
            source: Stak source code
            filename: Name for error messages (defaults to options.filename)

        Returns:
            RunResult with tokens and AST filled in; the stack is the
            current stack, untouched

        Raises:
            LexError: If the source cannot be tokenized
            ParseError: If the tokens do not form a valid program
        """
        filename = filename or self.options.filename
        result = RunResult(filename=filename)

        try:
            result.tokens = lex(source)
            result.token_count = len(result.tokens)
            result.ast = parse(result.tokens)
        except StakError as e:
            raise e.attach_source(source, filename)

        result.stack = list(self.program.stack)
        return result

    def parse_file(self, filepath: str) -> RunResult:
        """Lex and parse a source file without running it."""
        return self.parse_source(_read_source(filepath), filepath)

    def run_file(self, filepath: str) -> RunResult:
        """
        Run a Stak source file.

        Args:
            filepath: Path to the source file

        Returns:
            RunResult describing the completed run

        Raises:
            StakError: If the program fails
            FileNotFoundError: If the source file does not exist
        """
        return self.run_source(_read_source(filepath), filepath)

    @property
    def stack(self) -> list[Value]:
        """Current contents of the operand stack, bottom first."""
        return list(self.program.stack)


def _read_source(filepath: str) -> str:
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {filepath}")
    return path.read_text(encoding="utf-8")
