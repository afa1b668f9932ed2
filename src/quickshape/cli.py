"""
Command-line interface for QuickShape.

Provides commands for recognizing stroke files and managing configuration.
"""

import argparse
import json
import sys

from quickshape.config import load_config, save_default_config
from quickshape.tracer import configure_tracer, get_tracer


STRATEGIES = ["heuristic", "hull", "template"]


def _add_trace_arguments(parser):
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    parser.add_argument(
        "--trace-level",
        default=None,
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="QuickShape: Recognize freehand strokes as clean geometric shapes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Recognize command
    recognize_parser = subparsers.add_parser("recognize", help="Classify strokes from a JSON file")
    recognize_parser.add_argument(
        "--input", "-i",
        required=True,
        help="Strokes JSON file",
    )
    recognize_parser.add_argument(
        "--strategy", "-s",
        default=None,
        choices=STRATEGIES,
        help="Classifier strategy (overrides the configured one)",
    )
    recognize_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    recognize_parser.add_argument(
        "--out", "-o",
        default=None,
        help="Path to write recognitions JSON",
    )
    recognize_parser.add_argument(
        "--svg",
        default=None,
        help="Path to write an SVG preview",
    )
    _add_trace_arguments(recognize_parser)

    # Templates command
    templates_parser = subparsers.add_parser("templates", help="Show template library counts")
    templates_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )

    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="quickshape_config.yaml",
        help="Output path for config file",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    # Handle commands
    if args.command == "recognize":
        return handle_recognize(args)
    elif args.command == "templates":
        return handle_templates(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def handle_recognize(args):
    """Handle the recognize command."""
    tracer = get_tracer()

    try:
        config = load_config(args.config)

        # Configure tracing; command-line flags win over the config file
        configure_tracer(
            enabled=args.trace or config.tracing.enabled,
            level=args.trace_level or config.tracing.level,
            file_path=args.trace_file or config.tracing.file_path,
            json_output=args.trace_json or config.tracing.json_output,
        )

        from quickshape.pipeline import run_recognition

        with tracer.span("cli_recognize", module="cli"):
            recognitions = run_recognition(
                input_path=args.input,
                out_path=args.out,
                svg_path=args.svg,
                config=config,
                strategy=args.strategy,
            )

        strategy = args.strategy or config.session.strategy
        print(f"Recognized {len(recognitions)} strokes with the {strategy} strategy.")
        for index, recognition in enumerate(recognitions):
            result = recognition.result
            print(f"  [{index}] {result.kind.value:<10} confidence={result.confidence:.3f}")

        if args.out:
            print(f"\nRecognitions saved to: {args.out}")
        if args.svg:
            print(f"Preview saved to: {args.svg}")

        return 0

    except Exception as e:
        tracer.event(f"Recognition failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    finally:
        tracer.config.close()


def handle_templates(args):
    """Handle the templates command."""
    try:
        from quickshape.templates.store import TemplateStore

        store = TemplateStore(load_config(args.config))
        print(json.dumps(store.all_template_counts(), indent=2))
        return 0

    except Exception as e:
        get_tracer().event(f"Template listing failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
