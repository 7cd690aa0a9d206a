"""
Lox Scanner
Turns Lox source text into a list of tokens terminated by an EOF token
"""

from typing import Any, List
from dataclasses import dataclass

# Import pyparsing with error handling
try:
    import pyparsing as pp
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")

from error_handling import LoxErrorHandler
from utilities import num_format


@dataclass(frozen=True)
class Token:
    """Lox token with its literal payload, source text and line"""
    type: str
    value: Any
    lexeme: str
    line: int

    def __str__(self) -> str:
        return self.lexeme

    def describe(self) -> str:
        """Token dump format: KIND lexeme literal"""
        if self.type == "NUMBER":
            literal = num_format(self.value)
        elif self.type == "STRING":
            literal = self.value
        else:
            literal = "null"
        return f"{self.type} {self.lexeme} {literal}"


KEYWORDS = {
    "and": "AND",
    "class": "CLASS",
    "else": "ELSE",
    "false": "FALSE",
    "fun": "FUN",
    "for": "FOR",
    "if": "IF",
    "nil": "NIL",
    "or": "OR",
    "print": "PRINT",
    "return": "RETURN",
    "super": "SUPER",
    "this": "THIS",
    "true": "TRUE",
    "var": "VAR",
    "while": "WHILE",
}

SYMBOLS = {
    "(": "LEFT_PAREN",
    ")": "RIGHT_PAREN",
    "{": "LEFT_BRACE",
    "}": "RIGHT_BRACE",
    ",": "COMMA",
    ".": "DOT",
    "-": "MINUS",
    "+": "PLUS",
    ";": "SEMICOLON",
    "*": "STAR",
    "/": "SLASH",
    "!": "BANG",
    "!=": "BANG_EQUAL",
    "=": "EQUAL",
    "==": "EQUAL_EQUAL",
    ">": "GREATER",
    ">=": "GREATER_EQUAL",
    "<": "LESS",
    "<=": "LESS_EQUAL",
}


class LoxScanner:
    """Lox token grammar defined with pyparsing"""

    def __init__(self):
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup the token patterns; longest operators are tried first by one_of"""

        def line_of(s: str, loc: int) -> int:
            return pp.lineno(loc, s)

        def make_string(s, loc, toks):
            text = toks[0]
            # A string spanning lines reports the line it ends on
            return Token("STRING", text[1:-1], text, line_of(s, loc + len(text) - 1))

        def make_number(s, loc, toks):
            text = toks[0]
            return Token("NUMBER", float(text), text, line_of(s, loc))

        def make_word(s, loc, toks):
            text = toks[0]
            if text in KEYWORDS:
                return Token(KEYWORDS[text], None, text, line_of(s, loc))
            return Token("IDENTIFIER", text, text, line_of(s, loc))

        def make_symbol(s, loc, toks):
            text = toks[0]
            return Token(SYMBOLS[text], None, text, line_of(s, loc))

        comment = pp.Regex(r"//[^\n]*")
        string_literal = pp.Regex(r'"[^"]*"').set_parse_action(make_string)
        number = pp.Regex(r"\d+(?:\.\d+)?").set_parse_action(make_number)
        word = pp.Regex(r"[A-Za-z_][A-Za-z0-9_]*").set_parse_action(make_word)
        symbol = pp.one_of(list(SYMBOLS)).set_parse_action(make_symbol)

        token = string_literal | number | word | symbol
        program = pp.ZeroOrMore(token) + pp.StringEnd()
        program.ignore(comment)
        program.parse_with_tabs()

        self.token = token
        self.program = program

    def scan(self, source: str, filename: str = "<input>") -> List[Token]:
        """Scan a complete source text"""
        try:
            result = self.program.parse_string(source)
        except pp.ParseException as e:
            raise LoxErrorHandler(source, filename).enhance_scan_exception(e) from e

        tokens = list(result)
        tokens.append(Token("EOF", None, "", source.count("\n") + 1))
        return tokens


def create_scanner() -> LoxScanner:
    """Create a Lox scanner"""
    return LoxScanner()


def scan(source: str, filename: str = "<input>") -> List[Token]:
    """Scan Lox source text into tokens"""
    return create_scanner().scan(source, filename)
