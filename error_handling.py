"""
Error handling for the Lox scanner, parser and interpreter
Structured errors that can be shown to the user without further translation
"""

from typing import List, Optional, Dict
from pyparsing import ParseException


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    line: int,
    column: int = 0,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'line': line,
        'column': column,
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict, kind: str = "Parse") -> str:
    """Format parse error as string"""
    error_msg = f"{kind} error at line {error['line']}"
    if error['got']:
        error_msg += f" near {error['got']}"
    error_msg += f": {error['message']}"

    if error['context']:
        error_msg += f"\n{error['context']}"

    if error['suggestions']:
        error_msg += "\n  Suggestions:"
        for suggestion in error['suggestions']:
            error_msg += f"\n    - {suggestion}"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1 and col_num > 0:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def find_column(source_text: str, line_num: int, lexeme: Optional[str]) -> int:
    """Best-effort column of a lexeme on a line; 0 when it cannot be found"""
    lines = source_text.split('\n')
    if not lexeme or line_num < 1 or line_num > len(lines):
        return 0
    return lines[line_num - 1].find(lexeme) + 1


def quote_got(text: Optional[str]) -> Optional[str]:
    """Quote the offending text for display"""
    if text is None:
        return None
    if text == "":
        return "end of input"
    return f"'{text}'"


def generate_suggestions(message: str, got: Optional[str]) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if "';'" in message:
        suggestions.append("Statements and declarations end with ';'")

    if "Invalid assignment target" in message:
        suggestions.append("Only a variable name can appear on the left of '='")

    if "'}'" in message and got == "end of input":
        suggestions.append("Check that every '{' has a matching '}'")

    if "')'" in message:
        suggestions.append("Check that every '(' has a matching ')'")

    if "Unterminated string" in message:
        suggestions.append("Close the string with '\"'")

    return suggestions


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class LoxScanError(Exception):
    """Raised when source text cannot be split into tokens"""
    def __init__(self, message: str, line: int = 0, column: int = 0,
                 got: Optional[str] = None, context: Optional[str] = None):
        self.message = message
        self.line = line
        self.column = column
        self.got = got
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        got = quote_got(self.got)
        error_dict = make_parse_error(
            self.message, self.line, self.column, got, self.context,
            generate_suggestions(self.message, got)
        )
        return format_parse_error(error_dict, kind="Scan")


class LoxParseError(Exception):
    """Raised on the first unexpected token; parsing never recovers"""
    def __init__(self, message: str, line: int = 0, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None):
        self.message = message
        self.line = line
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        super().__init__(message)

    def __str__(self) -> str:
        error_dict = make_parse_error(
            self.message, self.line, 0, quote_got(self.got),
            self.context, self.suggestions
        )
        return format_parse_error(error_dict)


class LoxRuntimeError(Exception):
    """Raised by the evaluator; aborts the remaining statements"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"Runtime error: {self.message}"


class LoxErrorHandler:
    """Attaches source context to scanner and parser errors"""
    def __init__(self, source_text: str, filename: str = "<input>"):
        self.source_text = source_text
        self.filename = filename
        self.lines = source_text.split('\n')

    def enhance_scan_exception(self, exc: ParseException) -> LoxScanError:
        """Convert a pyparsing exception raised by the scanner into a LoxScanError"""
        loc = exc.loc
        got = self.source_text[loc] if loc < len(self.source_text) else ""
        if got == '"':
            message = "Unterminated string"
        elif got:
            message = f"Unexpected character '{got}'"
        else:
            message = "Unexpected end of input"
        return LoxScanError(
            message=message,
            line=exc.lineno,
            column=exc.col,
            got=got,
            context=get_context_lines(self.source_text, exc.lineno, exc.col)
        )

    def enhance_parse_error(self, error: LoxParseError) -> LoxParseError:
        """Return a copy of the parse error with source context and suggestions"""
        column = find_column(self.source_text, error.line, error.got)
        got = quote_got(error.got)
        return LoxParseError(
            message=error.message,
            line=error.line,
            got=error.got,
            context=get_context_lines(self.source_text, error.line, column),
            suggestions=error.suggestions or generate_suggestions(error.message, got)
        )
