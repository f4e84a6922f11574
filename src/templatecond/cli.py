"""
Command-line interface for templatecond.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .errors import ConditionError
from .models import Context, VariableLookup, is_truthy, to_text
from .parser import parse_condition, parse_expression


def parse_assignment(assignment: str):
    """Split NAME=VALUE, reading VALUE as a template literal when possible."""
    name, sep, raw = assignment.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got '{assignment}'")

    try:
        value = parse_expression(raw)
    except ConditionError:
        value = raw
    if isinstance(value, VariableLookup):
        value = raw

    return name.strip(), value


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Evaluate a template condition against a set of variables"
    )

    parser.add_argument("markup", help="Condition markup, e.g. 'user.age >= 18 and admin'")

    parser.add_argument(
        "--var",
        dest="variables",
        action="append",
        type=parse_assignment,
        default=[],
        metavar="NAME=VALUE",
        help="Set a variable (repeatable)",
    )

    parser.add_argument(
        "--vars-file",
        help="JSON file with an object of variables",
        default=None,
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Report undefined variables on stderr and exit 1",
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate the condition without evaluating it",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.vars_file and not Path(args.vars_file).exists():
        print(f"Error: File '{args.vars_file}' not found", file=sys.stderr)
        sys.exit(1)

    try:
        condition = parse_condition(args.markup)

        if args.validate_only:
            from .validation import Severity, validate

            diagnostics = validate(condition)

            errors = [d for d in diagnostics if d.severity == Severity.ERROR]
            warnings = [d for d in diagnostics if d.severity == Severity.WARNING]

            if errors:
                print(f"{len(errors)} error(s):")
                for diag in errors:
                    print(f"  [ERROR] {diag.rule}: {diag.message}")
                sys.exit(1)

            if warnings:
                print(f"{len(warnings)} warning(s):")
                for diag in warnings:
                    print(f"  [WARN] {diag.rule}: {diag.message}")

            if not errors and not warnings:
                print("✓ Condition is valid")

            sys.exit(0)

        context = Context(strict_variables=args.strict)
        if args.vars_file:
            with open(args.vars_file, 'r') as f:
                values = json.load(f)
            if not isinstance(values, dict):
                print(f"Error: '{args.vars_file}' must contain a JSON object", file=sys.stderr)
                sys.exit(1)
            context.update(values)
        context.update(dict(args.variables))

        result = condition.evaluate(context)
        print(to_text(result))

        if context.undefined_variables:
            for name in dict.fromkeys(context.undefined_variables):
                print(f"Error: Undefined variable '{name}'", file=sys.stderr)
            sys.exit(1)

        sys.exit(0 if is_truthy(result) else 1)

    except (ConditionError, json.JSONDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
