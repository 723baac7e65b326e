#!/usr/bin/env python3
"""
symcalc Command-Line Interface

Provides interactive REPL, script execution, and pipe/filter modes.

Usage:
    symcalc                              # Start REPL
    symcalc script.sym                   # Run script
    symcalc -e "(+ x x)"                 # Simplify expression
    symcalc -d x -e "(^ x 3)"            # Differentiate expression
    symcalc -d x -n 2 -e "(^ x 3)"       # Second derivative
    echo "(* a a)" | symcalc             # Filter mode

REPL Commands:
    :help              Show help
    :trace on|off      Toggle tracing
    :diff VAR [ORDER]  Differentiate inputs with respect to VAR
    :simplify          Simplify inputs (default)
    :infix on|off      Toggle infix output
    :quit              Exit
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .differentiation import differentiate
from .errors import SimplifyError
from .sexpr import format_sexpr, parse_sexpr
from .simplify import simplify
from .trace import LoggingObserver

# Try to import readline for better REPL experience
try:
    import readline
    HAS_READLINE = True
except ImportError:
    HAS_READLINE = False

logger = logging.getLogger(__name__)

TRACE_STYLES = ["verbose", "compact", "rules", "chain", "explain"]


class SymcalcCompleter:
    """Tab completer for the symcalc REPL."""

    COMMANDS = [
        ":help", ":quit", ":exit", ":q",
        ":trace", ":diff", ":simplify", ":infix",
    ]

    TOGGLE_OPTIONS = ["on", "off"]

    def __init__(self, repl: 'SymcalcREPL'):
        self.repl = repl

    def complete(self, text: str, state: int) -> Optional[str]:
        """Return the next possible completion for 'text'."""
        if state == 0:
            line = readline.get_line_buffer() if HAS_READLINE else ""
            self.matches = self._get_matches(text, line)

        try:
            return self.matches[state]
        except IndexError:
            return None

    def _get_matches(self, text: str, line: str) -> list:
        """Get list of matches for the current input."""
        line = line.lstrip()

        if line.startswith(":trace ") or line.startswith(":infix "):
            return [t for t in self.TOGGLE_OPTIONS if t.startswith(text)]

        if text.startswith(":") or (line.startswith(":") and " " not in line):
            return [c for c in self.COMMANDS if c.startswith(text)]

        return []


def count_parens(text: str) -> int:
    """Count unbalanced parentheses. Returns >0 if more open than close."""
    depth = 0
    for c in text:
        if c == '(':
            depth += 1
        elif c == ')':
            depth -= 1
    return depth


def _toggle(arg: str, current: bool) -> bool:
    if arg.lower() in ("on", "true", "1"):
        return True
    if arg.lower() in ("off", "false", "0"):
        return False
    return not current


class SymcalcREPL:
    """Interactive REPL for symcalc."""

    def __init__(self):
        self.trace = False
        self.trace_style = "rules"
        self.infix = False
        self.variable: Optional[str] = None
        self.order = 1
        self.observer = None
        self.running = True
        self.multi_line_buffer = ""

        if HAS_READLINE:
            self.history_file = Path.home() / ".symcalc_history"
            try:
                readline.read_history_file(self.history_file)
            except FileNotFoundError:
                pass
            readline.set_history_length(1000)

            self.completer = SymcalcCompleter(self)
            readline.set_completer(self.completer.complete)
            readline.parse_and_bind("tab: complete")
            readline.set_completer_delims(" \t\n")

    def save_history(self):
        """Save readline history."""
        if HAS_READLINE:
            try:
                readline.write_history_file(self.history_file)
            except OSError as e:
                logger.debug("Could not save history: %s", e)

    def handle_command(self, line: str) -> Optional[str]:
        """
        Handle a REPL command (starts with :).

        Returns a message to print, or None.
        """
        parts = line[1:].split()
        if not parts:
            return "Unknown command. Type :help for help."

        cmd = parts[0].lower()
        args = parts[1:]

        if cmd == "help":
            return self.help_text()

        elif cmd in ("quit", "exit", "q"):
            self.running = False
            return None

        elif cmd == "trace":
            self.trace = _toggle(args[0] if args else "", self.trace)
            return f"Tracing {'enabled' if self.trace else 'disabled'}"

        elif cmd == "infix":
            self.infix = _toggle(args[0] if args else "", self.infix)
            return f"Infix output {'enabled' if self.infix else 'disabled'}"

        elif cmd == "diff":
            if not args or len(args) > 2:
                return "Usage: :diff VAR [ORDER]"
            order = 1
            if len(args) == 2:
                if not args[1].isdigit():
                    return f"Invalid order: {args[1]}"
                order = int(args[1])
            self.variable = args[0]
            self.order = order
            return f"Differentiating with respect to {self.variable} (order {self.order})"

        elif cmd == "simplify":
            self.variable = None
            self.order = 1
            return "Simplifying"

        else:
            return f"Unknown command: {cmd}. Type :help for help."

    def help_text(self) -> str:
        """Return help text."""
        return """symcalc REPL Commands:
  :help              Show this help
  :trace on|off      Toggle tracing
  :diff VAR [ORDER]  Differentiate inputs with respect to VAR
  :simplify          Simplify inputs (default)
  :infix on|off      Toggle infix output
  :quit              Exit

Syntax:
  (+ a b) (* a b) (- a b) (- a) (/ a b) (^ a b) (= a b)
  (complex re im) (sin x) (log b x) (d f x [order])
  Atoms: 42 3/4 pi e tau i x
"""

    def evaluate(self, line: str) -> str:
        """
        Simplify or differentiate one s-expression and format the result.

        Raises:
            ValueError: If the expression is malformed
            SimplifyError: If the engine fails
        """
        expr = parse_sexpr(line)
        if self.variable is not None:
            outcome = differentiate(expr, self.variable, self.order,
                                    trace=self.trace, observer=self.observer)
        else:
            outcome = simplify(expr, trace=self.trace, observer=self.observer)

        if self.trace:
            result, trace = outcome
        else:
            result, trace = outcome, None

        output = str(result) if self.infix else format_sexpr(result)
        if trace:
            return f"{output}\n{trace.format(self.trace_style)}"
        return output

    def process_line(self, line: str) -> Optional[str]:
        """
        Process a single line of input.

        Returns the result to print, or None.
        """
        line = line.strip()

        if not line or line.startswith("#"):
            return None

        if line.startswith(":"):
            return self.handle_command(line)

        try:
            return self.evaluate(line)
        except (ValueError, SimplifyError) as e:
            return f"Error: {e}"

    def run(self):
        """Run the REPL loop."""
        print("symcalc - symbolic simplification and differentiation")
        print("Type :help for help, :quit to exit")
        print()

        while self.running:
            try:
                prompt = "...... " if self.multi_line_buffer else "symcalc> "
                line = input(prompt)

                if self.multi_line_buffer:
                    self.multi_line_buffer += "\n" + line
                else:
                    self.multi_line_buffer = line

                paren_count = count_parens(self.multi_line_buffer)
                if paren_count > 0:
                    continue
                elif paren_count < 0:
                    print("Error: Unbalanced parentheses (too many closing)")
                    self.multi_line_buffer = ""
                    continue

                complete_input = self.multi_line_buffer
                self.multi_line_buffer = ""

                result = self.process_line(complete_input)
                if result:
                    print(result)

            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                if self.multi_line_buffer:
                    print("\nInput cancelled")
                    self.multi_line_buffer = ""
                else:
                    print()
                continue

        self.save_history()


class ScriptRunner:
    """Runs symcalc scripts, one-shot expressions and filters."""

    def __init__(self):
        self.repl = SymcalcREPL()

    def _run_one(self, line: str, where: str = "") -> int:
        try:
            print(self.repl.evaluate(line))
        except (ValueError, SimplifyError) as e:
            print(f"{where}error: {e}", file=sys.stderr)
            return 1
        return 0

    def run_script(self, path: Path) -> int:
        """
        Run a script file: commands and expressions, one per line.

        Returns:
            Exit code (0 for success)
        """
        try:
            lines = path.read_text().splitlines()
        except OSError as e:
            print(f"error: cannot read {path}: {e}", file=sys.stderr)
            return 1

        for lineno, line in enumerate(lines, 1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith(":"):
                result = self.repl.handle_command(line)
                if result and ("Unknown" in result or "Usage" in result or "Invalid" in result):
                    print(f"{path}:{lineno}: error: {result}", file=sys.stderr)
                    return 1
                continue
            if self._run_one(line, f"{path}:{lineno}: "):
                return 1
        return 0

    def run_expression(self, expr_str: str) -> int:
        """
        Evaluate a single expression.

        Returns:
            Exit code (0 for success)
        """
        return self._run_one(expr_str)

    def run_stdin(self) -> int:
        """
        Read expressions from stdin and evaluate them.

        Returns:
            Exit code (0 for success)
        """
        for line in sys.stdin:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if self._run_one(line):
                return 1
        return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="symcalc",
        description="symcalc - symbolic simplification and differentiation",
        epilog="Examples:\n"
               "  symcalc                          Start REPL\n"
               "  symcalc script.sym               Run script\n"
               "  symcalc -e '(+ x x)'             Simplify expression\n"
               "  symcalc -d x -e '(^ x 3)'        Differentiate expression\n"
               "  echo '(* a a)' | symcalc         Filter mode\n",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "script",
        nargs="?",
        help="Script file to run"
    )

    parser.add_argument(
        "-e", "--expr",
        help="Evaluate a single expression"
    )

    parser.add_argument(
        "-d", "--diff",
        metavar="VAR",
        help="Differentiate with respect to VAR instead of simplifying"
    )

    parser.add_argument(
        "-n", "--order",
        type=int,
        default=1,
        help="Derivative order (default: 1)"
    )

    parser.add_argument(
        "-t", "--trace",
        action="store_true",
        help="Enable tracing"
    )

    parser.add_argument(
        "--trace-style",
        default="rules",
        choices=TRACE_STYLES,
        help="Trace output style"
    )

    parser.add_argument(
        "--infix",
        action="store_true",
        help="Print results in infix notation"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every rule applied"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.order < 0:
        parser.error("order must be non-negative")

    runner = ScriptRunner()
    runner.repl.trace = args.trace
    runner.repl.trace_style = args.trace_style
    runner.repl.infix = args.infix
    runner.repl.variable = args.diff
    runner.repl.order = args.order
    if args.verbose:
        runner.repl.observer = LoggingObserver()

    if args.script:
        sys.exit(runner.run_script(Path(args.script)))

    elif args.expr:
        sys.exit(runner.run_expression(args.expr))

    elif not sys.stdin.isatty():
        sys.exit(runner.run_stdin())

    else:
        runner.repl.run()


if __name__ == "__main__":
    main()
