"""
Command-line interface for tracepage.

Provides commands for building a tracing page and writing a config file.
"""

import argparse
import os
import sys

from tracepage.config import load_config, save_default_config
from tracepage.tracer import configure_tracer, get_tracer


def build_parser():
    parser = argparse.ArgumentParser(
        prog="tracepage",
        description="tracepage: turn an image into a dotted outline page for hand tracing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Build a tracing page from an image")
    run_parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input image file",
    )
    run_parser.add_argument(
        "--out", "-o",
        default=None,
        help="Output PNG path (default: <input stem>-tracing-page.png)",
    )
    run_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Write per-stage debug artifacts",
    )
    run_parser.add_argument(
        "--summary",
        action="store_true",
        help="Write a JSON run summary next to the output",
    )
    run_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    run_parser.add_argument(
        "--trace-level",
        default=None,
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level (default: from config, INFO)",
    )
    run_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    run_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )

    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="tracepage_config.yaml",
        help="Output path for config file",
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return handle_run(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def default_output_path(input_path):
    stem = os.path.splitext(input_path)[0]
    return f"{stem}-tracing-page.png"


def handle_run(args):
    """Handle the run command."""
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    # flags override the tracing section of the config file
    tracing = config.tracing
    configure_tracer(
        enabled=args.trace or tracing.enabled,
        level=args.trace_level or tracing.level,
        file_path=args.trace_file or tracing.file_path,
        json_output=args.trace_json or tracing.json_output,
    )

    tracer = get_tracer()
    out_path = args.out or default_output_path(args.input)

    try:
        from tracepage.pipeline import run_pipeline

        with tracer.span("cli_run", module="cli"):
            summary = run_pipeline(
                input_path=args.input,
                out_path=out_path,
                config=config,
                debug=args.debug,
                summary=args.summary,
            )

        print("\nTracing page created.")
        print(f"  Source: {summary.source.width}x{summary.source.height}")
        print(f"  Page: {summary.width}x{summary.height} (scale {summary.scale:.3f})")
        print(f"  Polylines: {summary.polylines_rendered}")
        print(f"  Dot size: {summary.dash.stroke_width}px, gap {summary.dash.gap_length:g}px")
        print(f"\nSaved to: {out_path}")

        return 0

    except Exception as e:
        tracer.event(f"Pipeline failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    finally:
        tracer.config.close()


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
