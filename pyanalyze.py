import argparse
import json
import os
import sys

from analysis import analyze_source
from analyzer.config import CONFIG_FILE, load_config, write_default_config
from analyzer.errors import AnalyzerError
from analyzer.report import (
    build_report,
    diagnostic_lines,
    format_symbol_table,
    format_token_table,
)
from analyzer.trace import log, set_verbose
from analyzer.tree import render_text, to_lark_tree


def read_source(filepath):
    """Return ``(source, display_name)``; ``-`` or None reads stdin."""
    if filepath is None or filepath == "-":
        return sys.stdin.read(), "<stdin>"
    if not os.path.exists(filepath):
        raise AnalyzerError(f"File '{filepath}' not found.",
                            suggestion="Pass an existing file, or '-' to read stdin")
    with open(filepath, 'r') as f:
        return f.read(), filepath


def run(args):
    set_verbose(args.verbose)
    try:
        config = load_config(args.config)
        source, name = read_source(args.filename)
    except AnalyzerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    log(f"Analyzing {name}...")
    return analyze_source(source, config), name


def print_diagnostics(result):
    for line in diagnostic_lines(result.lexical_errors, result.source):
        print(line)
    for line in diagnostic_lines(result.syntax_errors, result.source):
        print(line)


def cmd_tokens(args):
    result, _ = run(args)
    print(format_token_table(result.tokens))
    print_diagnostics(result)


def cmd_symbols(args):
    result, _ = run(args)
    print(format_symbol_table(result.symbol_table))


def cmd_tree(args):
    result, _ = run(args)
    if not result.tree_displayable:
        print_diagnostics(result)
        print(result.status_message())
        return
    if args.style == "lark":
        print(to_lark_tree(result.tree).pretty(), end="")
    else:
        print(render_text(result.tree))


def cmd_check(args):
    result, _ = run(args)
    print_diagnostics(result)
    print(result.status_message())
    if result.has_errors:
        sys.exit(1)


def cmd_analyse(args):
    """Print every view of one analysis and optionally save it as JSON."""
    result, name = run(args)

    print("\n" + "=" * 60)
    print("           PYANALYZE ANALYSIS REPORT")
    print("=" * 60 + "\n")

    print(f"📋 TOKENS: {len(result.tokens)}\n")

    if result.lexical_errors or result.syntax_errors:
        print(f"❌ LEXICAL ERRORS: {len(result.lexical_errors)}")
        print(f"❌ SYNTAX ERRORS: {len(result.syntax_errors)}\n")
        print_diagnostics(result)
        print()

    print("SYMBOL TABLE:")
    print(format_symbol_table(result.symbol_table) + "\n")

    if result.tree_displayable:
        print("PARSE TREE:")
        print(render_text(result.tree) + "\n")

    print(f"✨ {result.status_message()}\n")

    if args.save_report:
        with open(args.save_report, 'w') as f:
            json.dump(build_report(result, name), f, indent=2)
        log(f"📁 Report saved to {args.save_report}")


def cmd_init(args):
    if os.path.exists(CONFIG_FILE):
        log(f"{CONFIG_FILE} already exists; leaving it unchanged.")
        return
    write_default_config(CONFIG_FILE)
    log(f"Created {CONFIG_FILE} with the default settings.")


def main():
    parser = argparse.ArgumentParser(description="Python-subset lexical and syntax analyzer")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    parser.add_argument("--config", help=f"Config file (default: {CONFIG_FILE} or ~/.pyanalyze/config.json)")
    subparsers = parser.add_subparsers(dest="command")

    def add_source_command(name, help_text):
        command = subparsers.add_parser(name, help=help_text)
        command.add_argument("filename", nargs="?", default="-", help="File to analyze (default: read from stdin)")
        return command

    add_source_command("tokens", "List tokens and lexical errors")
    add_source_command("symbols", "Show the symbol table")
    tree = add_source_command("tree", "Show the parse tree")
    tree.add_argument("--style", choices=["text", "lark"], default="text", help="Tree rendering")
    add_source_command("check", "Report diagnostics; exit status 1 if any")
    analyse = add_source_command("analyse", "Full analysis report")
    analyse.add_argument("--save-report", help="Save analysis report as JSON to file")
    subparsers.add_parser("init", help=f"Write a default {CONFIG_FILE}")

    args = parser.parse_args()

    if args.command == "tokens": cmd_tokens(args)
    elif args.command == "symbols": cmd_symbols(args)
    elif args.command == "tree": cmd_tree(args)
    elif args.command == "check": cmd_check(args)
    elif args.command == "analyse": cmd_analyse(args)
    elif args.command == "init": cmd_init(args)
    else: parser.print_help()


if __name__ == "__main__":
    main()
