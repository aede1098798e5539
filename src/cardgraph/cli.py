"""
cardgraph.cli - Command-line interface.

Main entry point for the cardgraph CLI tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cardgraph import __version__
from cardgraph.commands import analyze, config_cmd, layout_cmd
from cardgraph.exceptions import CardGraphError

OUTPUT_FORMATS = ["text", "json", "markdown", "csv"]


def non_negative_int(value: str) -> int:
    """argparse type for counts such as --limit."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {number}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cardgraph",
        description="Knowledge graph analytics and layout for linked note cards",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cardgraph analyze rank cards.json --limit 10    # Most important cards
  cardgraph analyze clusters cards.json           # Strongly connected clusters
  cardgraph analyze clusters cards.json --mode weak
  cardgraph analyze backlinks cards.json card-42  # Who links to card-42
  cardgraph analyze orphans cards.json            # Cards with no links
  cardgraph layout cards.json --seed 7 --output graph.json

Card files hold a JSON list of records:
  [{"id": "a", "title": "A", "aliases": [], "type": "permanent", "links": ["B"]}]

Configuration:
  cardgraph config path     # Show config file location
  cardgraph config show     # View all settings

For detailed command help: cardgraph <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"cardgraph {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (debug logging, tracebacks on error)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error log output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # analyze command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Rank, cluster and inspect links between cards",
    )
    analyze_sub = analyze_parser.add_subparsers(dest="analyze_action")

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("cards", type=Path, help="JSON file with card records")
        sub.add_argument(
            "--format",
            choices=OUTPUT_FORMATS,
            default="text",
            help="Output format (default: text)",
        )

    rank_parser = analyze_sub.add_parser("rank", help="Importance ranking by PageRank")
    add_common(rank_parser)
    rank_parser.add_argument(
        "--limit",
        type=non_negative_int,
        default=20,
        help="Number of cards to show (default: 20)",
    )

    clusters_parser = analyze_sub.add_parser("clusters", help="Knowledge clusters")
    add_common(clusters_parser)
    clusters_parser.add_argument(
        "--mode",
        choices=["strong", "weak"],
        default=None,
        help="Connectivity used for clustering (default: from config)",
    )

    orphans_parser = analyze_sub.add_parser("orphans", help="Cards with no links")
    add_common(orphans_parser)

    backlinks_parser = analyze_sub.add_parser("backlinks", help="Cards linking to a card")
    add_common(backlinks_parser)
    backlinks_parser.add_argument("card_id", help="Target card id")

    unresolved_parser = analyze_sub.add_parser(
        "unresolved", help="Link references that matched no card"
    )
    add_common(unresolved_parser)

    # layout command
    layout_parser = subparsers.add_parser(
        "layout",
        help="Compute the force-directed graph layout as JSON",
    )
    layout_parser.add_argument("cards", type=Path, help="JSON file with card records")
    layout_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible positions",
    )
    layout_parser.add_argument(
        "--mode",
        choices=["strong", "weak"],
        default=None,
        help="Connectivity used for cluster ids (default: from config)",
    )
    layout_parser.add_argument(
        "--output",
        type=Path,
        help="Output file path (default: stdout)",
        metavar="PATH",
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Inspect configuration",
    )
    config_sub = config_parser.add_subparsers(dest="config_action")
    config_sub.add_parser("show", help="Print the effective configuration")
    config_sub.add_parser("path", help="Print the config file location")

    return parser


def configure_logging(args: argparse.Namespace) -> None:
    """Set up root logging from -v/-q or the [logging] config table."""
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        from cardgraph.config import get_config

        name = str(get_config(args.config)["logging"].get("level", "WARNING")).upper()
        level = getattr(logging, name, logging.WARNING)

    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    # Install with: pip install cardgraph[completion]
    # Then activate: eval "$(register-python-argcomplete cardgraph)"
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        configure_logging(args)

        if args.command == "analyze":
            return analyze.run(args)
        elif args.command == "layout":
            return layout_cmd.run(args)
        elif args.command == "config":
            return config_cmd.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except (CardGraphError, OSError) as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
