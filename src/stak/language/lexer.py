"""
Stak Lexer (Tokenizer)
======================

This module converts Stak source text into a flat list of tokens for
the parser. The scan is a single forward pass that tracks the byte
offset, line, and column of every token for error reporting.

Token Categories
----------------
- Literals: "strings", 'c' characters, integers, floats, true/false
- Identifiers: any other run of non-space characters (+, drop, my-var, ...)
- Binding groups: (a b) take values, {a b} copy values into variables
- Copy prefix: @x pushes a variable without consuming it
- Keywords: if, else, repeat, end, macro

Reserved Symbols
----------------
The seven characters  " ' ( ) { } @  always end the current token, so
``x+"y"`` lexes as ``x+`` and ``"y"``. Whitespace separates
everything else.

Comments
--------
A ``#`` at the start of a token comments out the rest of the line.

Number Formats
--------------
| Form              | Example   | Token |
|-------------------|-----------|-------|
| Digits only       | 42        | INT   |
| Digits too large  | 99999...  | FLOAT |
| Decimal/exponent  | 2.5, 1e3  | FLOAT |

A run is only treated as a number when its first character is a decimal
digit, so ``-1`` is an identifier, not a negative literal.

Example Usage
-------------
>>> from stak.language.lexer import lex
>>> for token in lex('"hi" 3 * (s)'):
...     print(repr(token))
Token(STRING, 'hi', 1:1)
Token(INT, 3, 1:6)
Token(IDENTIFIER, '*', 1:8)
Token(TAKE, ('s',), 1:10)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, Union
import logging
import re
import string

from stak.errors import LexError, Position


logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Lexical categories of Stak source.

    Literal types carry their decoded Python value; TAKE and COPY_TO carry
    a tuple of identifier names; COPY carries the wrapped Token; keyword
    types carry no value.
    """

    # === Literals ===
    STRING = auto()         # "text"
    CHAR = auto()           # 'c'
    INT = auto()            # 64-bit signed integer
    FLOAT = auto()          # 64-bit float
    BOOLEAN = auto()        # true / false

    # === Names and binding forms ===
    IDENTIFIER = auto()     # bare word
    TAKE = auto()           # (a b)
    COPY_TO = auto()        # {a b}
    COPY = auto()           # @token

    # === Keywords ===
    END = auto()
    IF = auto()
    ELSE = auto()
    REPEAT = auto()
    MACRO = auto()


# Map keyword strings to their token types
KEYWORDS: dict[str, TokenType] = {
    "end": TokenType.END,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "repeat": TokenType.REPEAT,
    "macro": TokenType.MACRO,
}

BOOLEANS: dict[str, bool] = {
    "true": True,
    "false": False,
}

# Characters that always terminate the current token
SYMBOLS = frozenset('"\'(){}@')

INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1

_INT_PATTERN = re.compile(r"[0-9]+")
_FLOAT_PATTERN = re.compile(r"[0-9]+(\.[0-9]*)?([eE][+-]?[0-9]+)?")

TokenValue = Union[str, int, float, bool, tuple[str, ...], "Token", None]


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single lexical element of Stak source.

    Attributes:
        type: The TokenType classification
        value: Decoded payload (see TokenType for what each type carries)
        position: Source span covered by the token
    """
    type: TokenType
    value: TokenValue
    position: Position

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is None:
            return f"Token({self.type.name}, {self.position})"
        return f"Token({self.type.name}, {self.value!r}, {self.position})"

    def __str__(self) -> str:
        """Source-like display form used in error messages."""
        if self.type == TokenType.STRING:
            return '"' + self.value + '"'
        if self.type == TokenType.CHAR:
            return f"'{self.value}'"
        if self.type == TokenType.BOOLEAN:
            return "true" if self.value else "false"
        if self.type in (TokenType.INT, TokenType.FLOAT):
            return repr(self.value)
        if self.type == TokenType.IDENTIFIER:
            return self.value
        if self.type == TokenType.TAKE:
            return "(" + " ".join(reversed(self.value)) + ")"
        if self.type == TokenType.COPY_TO:
            return "{" + " ".join(reversed(self.value)) + "}"
        if self.type == TokenType.COPY:
            return f"@{self.value}"
        return self.type.name.lower()

    @property
    def kind(self) -> str:
        """Human-readable name of the token's category."""
        if self.type == TokenType.TAKE:
            return "take-into-identifiers"
        if self.type == TokenType.COPY_TO:
            return "copy-to-identifiers"
        if self.type == TokenType.COPY:
            return f"copy of {self.value.kind}"
        if self.type in KEYWORDS.values():
            return f"keyword '{self.type.name.lower()}'"
        return self.type.name.lower()


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes Stak source code.

    Usage:
        lexer = Lexer(source_text)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source text being tokenized
    """

    def __init__(self, source: str):
        """
        Initialize the lexer with source text.

        Args:
            source: The Stak source code to tokenize
        """
        self.source = source

        # Current position in source
        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source text.

        Yields:
            Token objects in source order

        Raises:
            LexError: If the source cannot be tokenized
        """
        while True:
            token = self._next_token()
            if token is None:
                return
            yield token

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self) -> str:
        """Current character, or empty string past the end."""
        if self._at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """
        Consume and return the current character.

        Updates line and column tracking for error reporting.
        """
        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    def _mark(self) -> tuple[int, int, int]:
        """Snapshot the current offset, line and column."""
        return (self._pos, self._line, self._column)

    def _position_from(self, mark: tuple[int, int, int]) -> Position:
        """Build a Position spanning from a mark to the current location."""
        start, line, column = mark
        return Position(
            start=start,
            end=self._pos,
            line=line,
            end_line=self._line,
            column=column,
            end_column=self._column,
        )

    def _error(self, message: str, mark: Optional[tuple[int, int, int]] = None) -> LexError:
        """Create a LexError spanning from mark (or here) to here."""
        if mark is None:
            mark = self._mark()
        position = self._position_from(mark)
        if position.end == position.start and not self._at_end():
            position = Position(
                position.start, position.start + 1,
                position.line, position.line,
                position.column, position.column + 1,
            )
        return LexError(message, position)

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        """Skip whitespace and '#' line comments."""
        while not self._at_end():
            char = self._peek()

            if char.isspace():
                self._advance()
                continue

            if char == "#":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
                continue

            break

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _next_token(self) -> Optional[Token]:
        """
        Scan the next token from source.

        Returns:
            The next Token, or None at end of input
        """
        self._skip_whitespace_and_comments()
        if self._at_end():
            return None

        mark = self._mark()
        char = self._peek()

        if char == '"':
            return self._scan_string(mark)

        if char == "'":
            return self._scan_char(mark)

        if char == "(":
            return self._scan_group(mark, ")", TokenType.TAKE, "identifier take")

        if char == "{":
            return self._scan_group(mark, "}", TokenType.COPY_TO, "identifier copy")

        if char in ")}":
            self._advance()
            raise self._error(f"unmatched '{char}'", mark)

        if char == "@":
            return self._scan_copy(mark)

        return self._scan_word(mark)

    def _scan_string(self, mark: tuple[int, int, int]) -> Token:
        """Scan a double-quoted string. No escape sequences are recognized."""
        self._advance()  # consume opening "

        chars = []
        while not self._at_end() and self._peek() != '"':
            chars.append(self._advance())

        if self._at_end():
            raise self._error("unclosed string", mark)
        self._advance()  # consume closing "

        return Token(TokenType.STRING, "".join(chars), self._position_from(mark))

    def _scan_char(self, mark: tuple[int, int, int]) -> Token:
        """Scan a single-quoted character holding exactly one character."""
        self._advance()  # consume opening '

        if self._at_end():
            raise self._error("expected character", mark)
        char = self._advance()

        if self._peek() != "'":
            raise self._error("unclosed character", mark)
        self._advance()  # consume closing '

        return Token(TokenType.CHAR, char, self._position_from(mark))

    def _scan_group(
        self,
        mark: tuple[int, int, int],
        closer: str,
        token_type: TokenType,
        description: str,
    ) -> Token:
        """
        Scan a (...) or {...} identifier group.

        The names are stored reversed, so the declared order becomes the
        order in which values are popped: in ``1 2 (a b)`` the first name
        listed is bound to the deeper value.
        """
        self._advance()  # consume opener

        names = []
        while True:
            self._skip_whitespace_and_comments()
            if self._at_end():
                raise self._error(f"unclosed {description}", mark)
            if self._peek() == closer:
                self._advance()
                break

            token = self._next_token()
            if token.type != TokenType.IDENTIFIER:
                raise LexError(f"expected identifier, got {token.kind}", token.position)
            names.append(token.value)

        return Token(token_type, tuple(reversed(names)), self._position_from(mark))

    def _scan_copy(self, mark: tuple[int, int, int]) -> Token:
        """Scan '@' followed by exactly one token, which it wraps."""
        self._advance()  # consume @

        inner = self._next_token()
        if inner is None:
            raise self._error("unexpected end", mark)

        return Token(TokenType.COPY, inner, self._position_from(mark))

    def _scan_word(self, mark: tuple[int, int, int]) -> Token:
        """Scan a run of characters up to whitespace or a reserved symbol."""
        chars = [self._advance()]
        while not self._at_end():
            char = self._peek()
            if char.isspace() or char in SYMBOLS:
                break
            chars.append(self._advance())

        return classify_word("".join(chars), self._position_from(mark))


# =============================================================================
# Word Classification
# =============================================================================

def classify_word(word: str, position: Position) -> Token:
    """
    Decide what kind of token a bare run of characters is.

    Args:
        word: The characters of the run
        position: Span of the run in the source

    Returns:
        A BOOLEAN, keyword, INT, FLOAT or IDENTIFIER token

    Raises:
        LexError: For an empty run or a malformed number
    """
    if not word:
        raise LexError("empty id", position)

    if word in BOOLEANS:
        return Token(TokenType.BOOLEAN, BOOLEANS[word], position)

    if word in KEYWORDS:
        return Token(KEYWORDS[word], None, position)

    if word[0] in string.digits:
        if _INT_PATTERN.fullmatch(word):
            value = int(word)
            if INT_MIN <= value <= INT_MAX:
                return Token(TokenType.INT, value, position)
        if _FLOAT_PATTERN.fullmatch(word):
            return Token(TokenType.FLOAT, float(word), position)
        raise LexError(
            f"error occurred while parsing the number {word!r}: invalid digit found in string",
            position,
        )

    return Token(TokenType.IDENTIFIER, word, position)


def lex(text: str) -> list[Token]:
    """
    Tokenize a complete piece of source text.

    Args:
        text: Stak source code

    Returns:
        The tokens in source order (comments removed)

    Raises:
        LexError: On the first lexical error; no partial result is returned
    """
    tokens = list(Lexer(text).tokenize())
    logger.debug(f"Lexed {len(tokens)} tokens from {len(text)} characters")
    return tokens
