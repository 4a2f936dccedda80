"""Main CLI entry point for the tolerant-sax command-line tool.

Prints the callback stream of markup files, or the readable text they
contain.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from tolerant_sax_parser import __version__
from tolerant_sax_parser.api import extract_text, parse_file
from tolerant_sax_parser.shared.config import ConfigError, ParserConfig
from tolerant_sax_parser.shared.logging import get_logger
from tolerant_sax_parser.shared.result import EventType, ParseEvent

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT

OUTPUT_FORMATS = ("json", "text")


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.parser_config = ParserConfig.default()
        self.output_format = "json"
        self.separator = "\n"

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        The file may hold parser settings under ``"parser"`` plus
        ``"output_format"`` and ``"separator"``.

        Raises:
            ConfigError: If the file is unreadable or holds invalid settings
        """
        config = cls()
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not load config file {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must hold a JSON object")

        if "parser" in data:
            config.parser_config = ParserConfig.from_dict(data["parser"])
        config.output_format = data.get("output_format", config.output_format)
        if config.output_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"Unknown output_format {config.output_format!r}; "
                f"expected one of {', '.join(OUTPUT_FORMATS)}"
            )
        config.separator = data.get("separator", config.separator)
        return config


class MarkupProcessor:
    """Runs the parser over files for the CLI commands."""

    def __init__(self, config: CLIConfig) -> None:
        self.config = config
        self.logger = get_logger(__name__, config.parser_config.correlation_id, "cli_processor")

    def events_for_file(self, file_path: Path) -> Dict[str, Any]:
        """Parse one file and return its events and metrics as plain data."""
        try:
            result = parse_file(file_path, self.config.parser_config)
        except OSError as e:
            self.logger.warning("Failed to read file", extra={"file": str(file_path)})
            return {"file": str(file_path), "success": False, "error": str(e)}
        except UnicodeDecodeError as e:
            self.logger.warning("Invalid UTF-8 in file", extra={"file": str(file_path)})
            return {"file": str(file_path), "success": False, "error": str(e)}

        data = result.to_dict()
        data["file"] = str(file_path)
        data["success"] = True
        return data

    def text_for_file(self, file_path: Path) -> Dict[str, Any]:
        """Extract the readable text of one file."""
        try:
            markup = file_path.read_bytes()
        except OSError as e:
            self.logger.warning("Failed to read file", extra={"file": str(file_path)})
            return {"file": str(file_path), "success": False, "error": str(e)}

        try:
            text = extract_text(markup, self.config.parser_config, self.config.separator)
        except UnicodeDecodeError as e:
            self.logger.warning("Invalid UTF-8 in file", extra={"file": str(file_path)})
            return {"file": str(file_path), "success": False, "error": str(e)}

        return {"file": str(file_path), "success": True, "text": text}


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="tolerant-sax",
        description="Fault-tolerant SAX-style tokenizer for XML and loose HTML"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Events command
    events_parser = subparsers.add_parser("events", help="Print the parse event stream")
    events_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markup files to parse"
    )
    events_parser.add_argument(
        "--format", "-f",
        choices=OUTPUT_FORMATS,
        help="Output format (default: json)"
    )
    events_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    # Text command
    text_parser = subparsers.add_parser("text", help="Print the readable text of files")
    text_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markup files to extract text from"
    )
    text_parser.add_argument(
        "--separator", "-s",
        help="Separator between text blocks (default: newline)"
    )

    return parser


def format_event(event: ParseEvent) -> str:
    """One-line rendering of an event for the text format."""
    if event.type is EventType.TEXT:
        return f"text {json.dumps(event.text, ensure_ascii=False)}"
    if event.type is EventType.END_TAG:
        return f"end {event.name}"
    attributes = " ".join(
        f"{name}={json.dumps(value, ensure_ascii=False)}" for name, value in event.attributes
    )
    return f"start {event.name} {attributes}".rstrip()


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format event results for output."""
    if format_type != "text":
        return json.dumps(results, indent=2, ensure_ascii=False)

    lines = []
    for result in results:
        lines.append(f"== {result['file']}")
        if not result.get("success", False):
            lines.append(f"error: {result.get('error', '')}")
            continue
        for event in result["events"]:
            lines.append(format_event(_event_from_dict(event)))
    return "\n".join(lines)


def _event_from_dict(data: Dict[str, Any]) -> ParseEvent:
    return ParseEvent(
        EventType(data["type"]),
        name=data.get("name"),
        attributes=tuple((name, value) for name, value in data.get("attributes", [])),
        text=data.get("text"),
    )


def _load_config(args: argparse.Namespace) -> CLIConfig:
    if args.config:
        return CLIConfig.from_file(args.config)
    return CLIConfig()


def cmd_events(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle events command."""
    if args.format:
        config.output_format = args.format

    processor = MarkupProcessor(config)
    results = [processor.events_for_file(path) for path in args.paths]
    formatted_output = format_results(results, config.output_format)

    if args.output:
        try:
            args.output.write_text(formatted_output + "\n", encoding="utf-8")
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return EXIT_FAILURE
        print(f"Results written to {args.output}", file=sys.stderr)
    else:
        print(formatted_output)

    successful = sum(1 for r in results if r.get("success", False))
    return EXIT_OK if successful == len(results) else EXIT_FAILURE


def cmd_text(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle text command."""
    if args.separator is not None:
        config.separator = args.separator

    processor = MarkupProcessor(config)
    exit_code = EXIT_OK
    for path in args.paths:
        result = processor.text_for_file(path)
        if not result["success"]:
            print(f"Error reading {path}: {result['error']}", file=sys.stderr)
            exit_code = EXIT_FAILURE
            continue
        print(result["text"])
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILURE

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        config = _load_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    # Route to appropriate command handler
    try:
        if args.command == "events":
            return cmd_events(args, config)
        if args.command == "text":
            return cmd_text(args, config)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return EXIT_FAILURE

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
