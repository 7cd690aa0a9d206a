"""
Lox Parser
Recursive-descent parser turning a token list into statements
"""

from typing import Callable, Dict, List, Optional, Sequence
import sys

from error_handling import LoxErrorHandler, LoxParseError
from scanning import Token, create_scanner
from syntax import (
    Assign, Binary, Block, Call, Expr, Expression, Grouping, If, Literal,
    Logical, Operator, Print, Stmt, Unary, Var, Variable, While,
    COMPARISON_OPERATORS, EQUALITY_OPERATORS, FACTOR_OPERATORS,
    TERM_OPERATORS, UNARY_OPERATORS,
    make_boolean, make_nil, make_number, make_string, pretty_print_ast,
)

MAX_CALL_ARGUMENTS = 255
NESTED_TOO_DEEPLY = "Expression nested too deeply"


class LoxGrammar:
    """
    One pass over one token list.

    program     -> declaration* EOF
    declaration -> varDecl | statement
    varDecl     -> "var" IDENTIFIER ( "=" expression )? ";"
    statement   -> exprStmt | printStmt | ifStmt | whileStmt | forStmt | block
    expression  -> assignment
    assignment  -> IDENTIFIER "=" assignment | logic_or
    logic_or    -> logic_and ( "or" logic_and )*
    logic_and   -> equality ( "and" equality )*
    equality    -> comparison ( ( "!=" | "==" ) comparison )*
    comparison  -> term ( ( ">" | ">=" | "<" | "<=" ) term )*
    term        -> factor ( ( "-" | "+" ) factor )*
    factor      -> unary ( ( "/" | "*" ) unary )*
    unary       -> ( "!" | "-" ) unary | call
    call        -> primary ( "(" arguments? ")" )*
    primary     -> NUMBER | STRING | "true" | "false" | "nil" | IDENTIFIER | "(" expression ")"
    """

    def __init__(self, tokens: Sequence[Token], debug: bool = False):
        if not tokens or tokens[-1].type != "EOF":
            raise LoxParseError("Token stream must end with an EOF token")
        self.tokens = tokens
        self.current = 0
        self.debug = debug

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def is_at_end(self) -> bool:
        return self.peek().type == "EOF"

    def advance(self) -> Token:
        """Return the current token and move past it; stays put on EOF"""
        token = self.peek()
        if not self.is_at_end():
            self.current += 1
        return token

    def check(self, token_type: str) -> bool:
        return self.peek().type == token_type

    def match(self, *token_types: str) -> bool:
        if self.peek().type in token_types:
            self.advance()
            return True
        return False

    def expect(self, token_type: str) -> Optional[Token]:
        """Consume a token of the given kind, or put the cursor back and return None"""
        start = self.current
        token = self.advance()
        if token.type == token_type:
            return token
        self.current = start
        return None

    def consume(self, token_type: str, message: str) -> Token:
        token = self.expect(token_type)
        if token is None:
            raise self.error(self.peek(), message)
        return token

    def error(self, token: Token, message: str) -> LoxParseError:
        return LoxParseError(message, token.line, token.lexeme)

    # ------------------------------------------------------------------
    # Declarations and statements
    # ------------------------------------------------------------------

    def parse_program(self) -> List[Stmt]:
        statements = []
        try:
            while not self.is_at_end():
                stmt = self.declaration()
                if self.debug:
                    print(f"Parsed declaration: {stmt}", file=sys.stderr)
                    print(pretty_print_ast(stmt, 1), file=sys.stderr, end="")
                statements.append(stmt)
        except RecursionError as e:
            raise self.error(self.peek(), NESTED_TOO_DEEPLY) from e
        return statements

    def parse_single_expression(self) -> Expr:
        try:
            expr = self.expression()
        except RecursionError as e:
            raise self.error(self.peek(), NESTED_TOO_DEEPLY) from e
        if not self.is_at_end():
            raise self.error(self.peek(), "Expected end of expression")
        return expr

    def declaration(self) -> Stmt:
        if self.match("VAR"):
            return self.var_declaration()
        return self.statement()

    def var_declaration(self) -> Stmt:
        name = self.consume("IDENTIFIER", "Expected identifier after 'var'")
        initializer = None
        if self.expect("EQUAL"):
            initializer = self.expression()
        self.consume("SEMICOLON", "Expected ';' after variable declaration")
        return Var(name.value, initializer)

    def statement(self) -> Stmt:
        if self.match("FOR"):
            return self.for_statement()
        if self.match("IF"):
            return self.if_statement()
        if self.match("PRINT"):
            return self.print_statement()
        if self.match("WHILE"):
            return self.while_statement()
        if self.match("LEFT_BRACE"):
            return Block(tuple(self.block()))
        return self.expression_statement()

    def for_statement(self) -> Stmt:
        """Desugar a for loop into a block holding the initializer and a while loop"""
        self.consume("LEFT_PAREN", "Expected '(' after 'for'")

        if self.match("SEMICOLON"):
            initializer = None
        elif self.match("VAR"):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check("SEMICOLON"):
            condition = self.expression()
        self.consume("SEMICOLON", "Expected ';' after loop condition")

        increment = None
        if not self.check("RIGHT_PAREN"):
            increment = self.expression()
        self.consume("RIGHT_PAREN", "Expected ')' after for clauses")

        body = [self.statement()]
        if increment is not None:
            body.append(Expression(increment))
        if condition is None:
            condition = Literal(make_boolean(True))

        statements = [] if initializer is None else [initializer]
        statements.append(While(condition, tuple(body)))
        return Block(tuple(statements))

    def if_statement(self) -> Stmt:
        self.consume("LEFT_PAREN", "Expected '(' after 'if'")
        condition = self.expression()
        self.consume("RIGHT_PAREN", "Expected ')' after if condition")

        then_branch = self.statement()
        else_branch = None
        if self.match("ELSE"):
            else_branch = self.statement()
        return If(condition, then_branch, else_branch)

    def while_statement(self) -> Stmt:
        self.consume("LEFT_PAREN", "Expected '(' after 'while'")
        condition = self.expression()
        self.consume("RIGHT_PAREN", "Expected ')' after condition")
        return While(condition, (self.statement(),))

    def block(self) -> List[Stmt]:
        statements = []
        while not self.check("RIGHT_BRACE") and not self.is_at_end():
            statements.append(self.declaration())
        self.consume("RIGHT_BRACE", "Expected '}' after block")
        return statements

    def print_statement(self) -> Stmt:
        value = self.expression()
        self.consume("SEMICOLON", "Expected ';' after value")
        return Print(value)

    def expression_statement(self) -> Stmt:
        expr = self.expression()
        self.consume("SEMICOLON", "Expected ';' after expression")
        return Expression(expr)

    # ------------------------------------------------------------------
    # Expressions, lowest precedence first
    # ------------------------------------------------------------------

    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        expr = self.logic_or()

        if self.match("EQUAL"):
            equals = self.previous()
            value = self.assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            raise self.error(equals, "Invalid assignment target")

        return expr

    def logic_or(self) -> Expr:
        expr = self.logic_and()
        while self.match("OR"):
            right = self.logic_and()
            expr = Logical(expr, Operator.OR, right)
        return expr

    def logic_and(self) -> Expr:
        expr = self.equality()
        while self.match("AND"):
            right = self.equality()
            expr = Logical(expr, Operator.AND, right)
        return expr

    def _left_assoc(self, operators: Dict[str, Operator], operand: Callable[[], Expr]) -> Expr:
        expr = operand()
        while self.peek().type in operators:
            operator = operators[self.advance().type]
            right = operand()
            expr = Binary(expr, operator, right)
        return expr

    def equality(self) -> Expr:
        return self._left_assoc(EQUALITY_OPERATORS, self.comparison)

    def comparison(self) -> Expr:
        return self._left_assoc(COMPARISON_OPERATORS, self.term)

    def term(self) -> Expr:
        return self._left_assoc(TERM_OPERATORS, self.factor)

    def factor(self) -> Expr:
        return self._left_assoc(FACTOR_OPERATORS, self.unary)

    def unary(self) -> Expr:
        if self.peek().type in UNARY_OPERATORS:
            operator = UNARY_OPERATORS[self.advance().type]
            return Unary(operator, self.unary())
        return self.call()

    def call(self) -> Expr:
        expr = self.primary()
        while self.match("LEFT_PAREN"):
            expr = self.finish_call(expr)
        return expr

    def finish_call(self, callee: Expr) -> Expr:
        arguments = []
        if not self.check("RIGHT_PAREN"):
            while True:
                if len(arguments) >= MAX_CALL_ARGUMENTS:
                    raise self.error(self.peek(), f"Can't have more than {MAX_CALL_ARGUMENTS} arguments")
                arguments.append(self.expression())
                if not self.match("COMMA"):
                    break
        self.consume("RIGHT_PAREN", "Expected ')' after arguments")
        return Call(callee, tuple(arguments))

    def primary(self) -> Expr:
        token = self.advance()

        if token.type == "FALSE":
            return Literal(make_boolean(False))
        if token.type == "TRUE":
            return Literal(make_boolean(True))
        if token.type == "NIL":
            return Literal(make_nil())
        if token.type == "NUMBER":
            return Literal(make_number(token.value))
        if token.type == "STRING":
            return Literal(make_string(token.value))
        if token.type == "IDENTIFIER":
            return Variable(token.value)
        if token.type == "LEFT_PAREN":
            expr = self.expression()
            self.consume("RIGHT_PAREN", "Expected ')' after expression")
            return Grouping(expr)

        raise self.error(token, "Expected expression")


class LoxParser:
    """Main Lox parser combining scanner and grammar"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.scanner = create_scanner()

    def parse(self, tokens: Sequence[Token]) -> List[Stmt]:
        """Parse a token list into a program"""
        return LoxGrammar(tokens, self.debug).parse_program()

    def parse_expression(self, tokens: Sequence[Token]) -> Expr:
        """Parse a token list holding exactly one expression"""
        return LoxGrammar(tokens, self.debug).parse_single_expression()

    def parse_string(self, text: str, filename: str = "<input>") -> List[Stmt]:
        """Parse Lox source code from string"""
        tokens = self.tokenize(text, filename)
        try:
            return self.parse(tokens)
        except LoxParseError as e:
            raise LoxErrorHandler(text, filename).enhance_parse_error(e) from e

    def parse_file(self, filepath: str) -> List[Stmt]:
        """Parse a Lox source file"""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.parse_string(content, filepath)

    def tokenize(self, text: str, filename: str = "<input>") -> List[Token]:
        """Tokenize Lox source code"""
        return self.scanner.scan(text, filename)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> LoxParser:
    """Create a Lox parser"""
    return LoxParser(debug=debug)


def create_debug_parser() -> LoxParser:
    """Create a Lox parser with debug enabled"""
    return LoxParser(debug=True)


def parse(tokens: Sequence[Token]) -> List[Stmt]:
    """Parse a token list into a program"""
    return LoxGrammar(tokens).parse_program()
