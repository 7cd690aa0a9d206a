"""
Lox Interpreter
Tree-walking evaluation of statements against a chain of mutable scopes
Output from print goes to the sink in the execution context
"""

from typing import Dict, Optional, Sequence, TextIO
import sys

from error_handling import LoxRuntimeError
from stdlib import (
  BUILTIN_OPERATORS,
  UNARY_BUILTINS,
  is_truthy,
  lox_print,
)
from syntax import (
  Assign, Binary, Block, Call, Expr, Expression, Grouping, If, Literal,
  Logical, Operator, Print, Stmt, Unary, Var, Variable, While,
)

NESTED_TOO_DEEPLY = "Program nested too deeply: maximum recursion depth exceeded"


# ============================================================================
# ENVIRONMENT OPERATIONS
# ============================================================================

def make_runtime_env(parent: Optional[Dict] = None) -> Dict:
  """Create a scope; the parent link is fixed for the scope's lifetime"""
  return {
      'parent': parent,
      'bindings': {}
  }


def env_define(env: Dict, name: str, value: Optional[Dict]) -> None:
  """Bind name in this scope; None marks a declared but uninitialized variable"""
  env['bindings'][name] = value


def env_lookup_value(env: Dict, name: str) -> Dict:
  """Look up a value in the environment chain"""
  scope = env
  while scope is not None:
    if name in scope['bindings']:
      value = scope['bindings'][name]
      if value is None:
        raise LoxRuntimeError(f"Uninitialized variable access: {name}")
      return value
    scope = scope['parent']
  raise LoxRuntimeError(f"Unknown variable access: {name}")


def env_assign(env: Dict, name: str, value: Dict) -> Dict:
  """Overwrite the binding in the nearest scope that declares name"""
  scope = env
  while scope is not None:
    if name in scope['bindings']:
      scope['bindings'][name] = value
      return value
    scope = scope['parent']
  raise LoxRuntimeError(f"Assignment to unknown variable {name}")


def make_execution_context(out: Optional[TextIO] = None, debug: bool = False) -> Dict:
  """Create an execution context carrying the print sink and debug flag"""
  return {
      'out': out if out is not None else sys.stdout,
      'debug': debug
  }


# ============================================================================
# STATEMENT EXECUTION
# ============================================================================

def execute_statements(stmts: Sequence[Stmt], env: Dict, context: Dict) -> None:
  """Run statements in order; the first runtime error stops the rest"""
  for stmt in stmts:
    execute_statement(stmt, env, context)


def execute_statement(stmt: Stmt, env: Dict, context: Dict) -> None:
  """Execute a single statement"""
  if context['debug']:
    print(f"Executing: {type(stmt).__name__}", file=sys.stderr)

  if isinstance(stmt, Expression):
    eval_ast(stmt.expression, env, context)
  elif isinstance(stmt, Print):
    exec_print(stmt, env, context)
  elif isinstance(stmt, Var):
    exec_var(stmt, env, context)
  elif isinstance(stmt, Block):
    exec_block(stmt, env, context)
  elif isinstance(stmt, If):
    exec_if(stmt, env, context)
  elif isinstance(stmt, While):
    exec_while(stmt, env, context)
  else:
    raise TypeError(f"Unknown statement type: {type(stmt).__name__}")


def exec_print(stmt: Print, env: Dict, context: Dict) -> None:
  value = eval_ast(stmt.expression, env, context)
  lox_print(value, context['out'])


def exec_var(stmt: Var, env: Dict, context: Dict) -> None:
  """Declare a variable in the current scope, shadowing any outer one"""
  if stmt.initializer is None:
    env_define(env, stmt.name, None)
  else:
    value = eval_ast(stmt.initializer, env, context)
    env_define(env, stmt.name, value)


def exec_block(stmt: Block, env: Dict, context: Dict) -> None:
  """One new child scope for the whole block, dropped when the block exits"""
  block_env = make_runtime_env(env)
  execute_statements(stmt.statements, block_env, context)


def exec_if(stmt: If, env: Dict, context: Dict) -> None:
  condition = eval_ast(stmt.condition, env, context)
  if is_truthy(condition):
    execute_statement(stmt.then_branch, env, context)
  elif stmt.else_branch is not None:
    execute_statement(stmt.else_branch, env, context)


def exec_while(stmt: While, env: Dict, context: Dict) -> None:
  while is_truthy(eval_ast(stmt.condition, env, context)):
    execute_statements(stmt.body, env, context)


# ============================================================================
# EXPRESSION EVALUATION
# ============================================================================

def eval_ast(ast_node: Expr, env: Dict, context: Dict) -> Dict:
  """Evaluate an expression node and return its value"""
  if context['debug']:
    print(f"Evaluating: {type(ast_node).__name__}", file=sys.stderr)

  if isinstance(ast_node, Literal):
    return ast_node.value
  elif isinstance(ast_node, Variable):
    return env_lookup_value(env, ast_node.name)
  elif isinstance(ast_node, Assign):
    return eval_assign(ast_node, env, context)
  elif isinstance(ast_node, Unary):
    return eval_unary(ast_node, env, context)
  elif isinstance(ast_node, Binary):
    return eval_binary(ast_node, env, context)
  elif isinstance(ast_node, Logical):
    return eval_logical(ast_node, env, context)
  elif isinstance(ast_node, Grouping):
    return eval_ast(ast_node.expression, env, context)
  elif isinstance(ast_node, Call):
    return eval_call(ast_node, env, context)
  else:
    raise TypeError(f"Unknown expression type: {type(ast_node).__name__}")


def eval_assign(ast_node: Assign, env: Dict, context: Dict) -> Dict:
  """Evaluate the right side, then mutate the nearest existing binding"""
  value = eval_ast(ast_node.value, env, context)
  return env_assign(env, ast_node.name, value)


def eval_unary(ast_node: Unary, env: Dict, context: Dict) -> Dict:
  right = eval_ast(ast_node.right, env, context)
  op_func = UNARY_BUILTINS.get(ast_node.operator)
  if op_func is None:
    raise LoxRuntimeError(f"Unary inappropriate for {ast_node.operator}")
  return op_func(right)


def eval_binary(ast_node: Binary, env: Dict, context: Dict) -> Dict:
  """Evaluate both operands left to right, then apply the operator"""
  left = eval_ast(ast_node.left, env, context)
  right = eval_ast(ast_node.right, env, context)
  op_func = BUILTIN_OPERATORS.get(ast_node.operator)
  if op_func is None:
    raise LoxRuntimeError(f"Unknown operation: {ast_node.operator}")
  return op_func(left, right)


def eval_logical(ast_node: Logical, env: Dict, context: Dict) -> Dict:
  """Short-circuit and/or; the result is the deciding operand itself"""
  left = eval_ast(ast_node.left, env, context)
  if ast_node.operator == Operator.AND:
    if not is_truthy(left):
      return left
  elif ast_node.operator == Operator.OR:
    if is_truthy(left):
      return left
  else:
    raise LoxRuntimeError(f"Unexpected logical operator: {ast_node.operator}")
  return eval_ast(ast_node.right, env, context)


def eval_call(ast_node: Call, env: Dict, context: Dict) -> Dict:
  # TODO: evaluate callee and arguments once `fun` declarations are parsed
  raise LoxRuntimeError(f"Function calls are not yet supported: {ast_node}")


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def eval_program(stmts: Sequence[Stmt], out: Optional[TextIO] = None, debug: bool = False) -> Dict:
  """
  Run a program in a fresh global scope and return that scope.
  """
  env = make_runtime_env()
  execute_statements(stmts, env, make_execution_context(out, debug))
  return env


class LoxInterpreter:
  """Interpreter holding one global scope that persists across calls"""

  def __init__(self, out: Optional[TextIO] = None, debug: bool = False):
    self.global_env = make_runtime_env()
    self.context = make_execution_context(out, debug)

  def interpret(self, stmts: Sequence[Stmt]) -> None:
    """Execute statements in the global scope"""
    self.execute(stmts, self.global_env)

  def execute(self, stmts: Sequence[Stmt], env: Dict) -> None:
    """Execute statements in the given scope"""
    try:
      execute_statements(stmts, env, self.context)
    except RecursionError as e:
      raise LoxRuntimeError(NESTED_TOO_DEEPLY) from e

  def evaluate(self, expr: Expr) -> Dict:
    """Evaluate a bare expression in the global scope"""
    try:
      return eval_ast(expr, self.global_env, self.context)
    except RecursionError as e:
      raise LoxRuntimeError(NESTED_TOO_DEEPLY) from e

  def bindings(self) -> Dict[str, Optional[Dict]]:
    """Snapshot of the global bindings"""
    return dict(self.global_env['bindings'])


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False, out: Optional[TextIO] = None) -> LoxInterpreter:
  """Create an interpreter with a fresh global scope"""
  return LoxInterpreter(out=out, debug=debug)


def create_debug_interpreter(out: Optional[TextIO] = None) -> LoxInterpreter:
  """Create an interpreter that traces every node it evaluates"""
  return LoxInterpreter(out=out, debug=True)
