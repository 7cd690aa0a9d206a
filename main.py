"""
Lox Programming Language - Main Entry Point
Runs scripts, dumps tokens and syntax trees, and hosts the interactive REPL
"""

import sys
import argparse
from pathlib import Path
from typing import Optional, List, TextIO
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import LoxErrorHandler, LoxParseError, LoxRuntimeError, LoxScanError
from interpreter import create_interpreter, create_debug_interpreter, LoxInterpreter
from parsing import create_parser, create_debug_parser, LoxParser
from syntax import to_sexpr
from utilities import format_value

VERSION = "pylox 0.1.0"

# sysexits.h codes used by the reference Lox tooling
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70

HISTORY_FILE = os.path.expanduser("~/.pylox_history")


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='pylox',
      description='Lox Programming Language - tree-walking interpreter',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.lox              # Run a Lox script
  %(prog)s -i                      # Interactive mode
  %(prog)s -s script.lox           # Show tokens, then run
  %(prog)s -p --no-eval script.lox # Show the parsed AST only
  %(prog)s --debug script.lox      # Run with debug tracing on stderr
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Lox script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '-s', '--show-scan',
      action='store_true',
      help='Print the token list before parsing'
  )

  parser.add_argument(
      '-p', '--show-parse',
      action='store_true',
      help='Print the parsed statements before evaluating'
  )

  parser.add_argument(
      '--no-eval',
      action='store_true',
      help='Stop after scanning and parsing'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


# ============================================================================
# SCRIPT MODE
# ============================================================================

def run_source(source: str, filename: str, parser: LoxParser, interpreter: LoxInterpreter,
               show_scan: bool = False, show_parse: bool = False, evaluate: bool = True,
               out: Optional[TextIO] = None) -> None:
  """Scan, parse and run one source text"""
  out = out if out is not None else sys.stdout

  tokens = parser.tokenize(source, filename)
  if show_scan:
    print("Tokens:", file=out)
    for token in tokens:
      print(f"\t{token.describe()}", file=out)

  try:
    statements = parser.parse(tokens)
  except LoxParseError as e:
    raise LoxErrorHandler(source, filename).enhance_parse_error(e) from e

  if show_parse:
    print("\nParsed AST:\n", file=out)
    for statement in statements:
      print(f"\t{to_sexpr(statement)}", file=out)

  if evaluate:
    interpreter.interpret(statements)


def run_script_file(script_path: str, show_scan: bool = False, show_parse: bool = False,
                    evaluate: bool = True, debug: bool = False) -> int:
  """Run a Lox script file, returning the process exit status"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      source = f.read()
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found", file=sys.stderr)
    print(f"  Hint: Check the file path and make sure the file exists", file=sys.stderr)
    return EX_NOINPUT
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'", file=sys.stderr)
    return EX_NOINPUT
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}", file=sys.stderr)
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding", file=sys.stderr)
    return EX_NOINPUT

  parser = create_debug_parser() if debug else create_parser()
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  try:
    run_source(source, script_path, parser, interpreter, show_scan, show_parse, evaluate)
  except (LoxScanError, LoxParseError) as e:
    print(f"Error in '{script_path}':\n{e}", file=sys.stderr)
    return EX_DATAERR
  except LoxRuntimeError as e:
    print(f"\n{'='*70}", file=sys.stderr)
    print(f"Runtime Error in '{script_path}'", file=sys.stderr)
    print(f"{'='*70}", file=sys.stderr)
    print(f"\nError: {e.message}", file=sys.stderr)
    print(f"\n{'='*70}\n", file=sys.stderr)
    return EX_SOFTWARE

  return 0


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

REPL_HELP = """REPL Commands:
  :tokens <src>     - Show the tokens of <src>
  :ast <src>        - Show the parsed statements of <src>
  :env              - Show global variables
  :help             - Show this help
  exit              - Exit REPL

Input that is a single expression is evaluated and echoed, anything else
runs as statements:
  var a = 1;        - Declare a variable
  a = a + 1         - Echoes => 2.0
  print a;          - Prints 2.0"""


def setup_readline() -> None:
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  try:
    readline.read_history_file(HISTORY_FILE)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  completions = [
      # Keywords
      "and", "else", "false", "for", "if", "nil", "or", "print",
      "true", "var", "while",
      # REPL commands
      ":tokens", ":ast", ":env", ":help", "exit"
  ]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")


def save_readline_history() -> None:
  if not READLINE_AVAILABLE:
    return
  try:
    readline.write_history_file(HISTORY_FILE)
  except OSError as e:
    print(f"Could not save history: {e}", file=sys.stderr)


def eval_repl_line(code: str, parser: LoxParser, interpreter: LoxInterpreter,
                   out: Optional[TextIO] = None) -> None:
  """
  Handle one REPL input against the session's interpreter.

  A line that parses as a single expression is evaluated and echoed;
  otherwise it is parsed and run as a program. Errors propagate to the caller.
  """
  out = out if out is not None else sys.stdout
  tokens = parser.tokenize(code)

  try:
    expr = parser.parse_expression(tokens)
  except LoxParseError:
    expr = None

  if expr is not None:
    value = interpreter.evaluate(expr)
    print(f"=> {format_value(value)}", file=out)
    return

  try:
    statements = parser.parse(tokens)
  except LoxParseError as e:
    raise LoxErrorHandler(code).enhance_parse_error(e) from e
  interpreter.interpret(statements)


def run_repl_command(code: str, parser: LoxParser, interpreter: LoxInterpreter,
                     out: TextIO) -> None:
  """Handle a ':' command"""
  if code.startswith(":tokens "):
    for token in parser.tokenize(code[len(":tokens "):]):
      print(f"  {token.describe()}", file=out)
  elif code.startswith(":ast "):
    for statement in parser.parse_string(code[len(":ast "):]):
      print(f"  {to_sexpr(statement)}", file=out)
  elif code.strip() == ":env":
    bindings = interpreter.bindings()
    if not bindings:
      print("  (no global variables)", file=out)
    for name, value in bindings.items():
      val_str = "<uninitialized>" if value is None else format_value(value)
      if len(val_str) > 60:
        val_str = val_str[:57] + "..."
      print(f"  {name} = {val_str}", file=out)
  elif code.strip() == ":help":
    print(REPL_HELP, file=out)
  else:
    print(f"Unknown command: {code.split()[0]} (try :help)", file=out)


def run_interactive_mode(debug: bool = False, input_func=input, out: Optional[TextIO] = None) -> None:
  """Run Lox in interactive mode with one persistent global scope"""
  out = out if out is not None else sys.stdout
  print(f"{VERSION} - Interactive Mode", file=out)
  print("Type 'exit' to quit, ':help' for commands", file=out)
  if debug:
    print("Debug mode enabled", file=out)
  print(file=out)

  parser = create_debug_parser() if debug else create_parser()
  interpreter = create_debug_interpreter(out=out) if debug else create_interpreter(out=out)

  while True:
    try:
      code = input_func(">> ")
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!", file=out)
      break

    if code.strip() == "exit":
      break

    if not code.strip():
      continue

    try:
      if code.startswith(":"):
        run_repl_command(code, parser, interpreter, out)
      else:
        eval_repl_line(code, parser, interpreter, out)
    except (LoxScanError, LoxParseError) as e:
      print(f"{e}", file=out)
    except LoxRuntimeError as e:
      # The session keeps every binding made before the error
      print(f"Runtime Error: {e.message}", file=out)


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for pylox"""
  argv = sys.argv[1:] if argv is None else argv
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist", file=sys.stderr)
      sys.exit(EX_NOINPUT)
    status = run_script_file(
        args.script,
        show_scan=args.show_scan,
        show_parse=args.show_parse,
        evaluate=not args.no_eval,
        debug=args.debug
    )
    sys.exit(status)

  if not (args.interactive or len(argv) == 0 or args.debug):
    arg_parser.print_help()
    return

  setup_readline()
  try:
    run_interactive_mode(debug=args.debug)
  finally:
    save_readline_history()


if __name__ == "__main__":
  main()
