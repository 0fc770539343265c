"""
Entry point for the UK take-home pay and bills calculator.

Usage:
    python main.py          # serves the JSON API at localhost:5000
    python main.py --cli    # runs the terminal interface
"""

import argparse
import logging


def main() -> None:
    parser = argparse.ArgumentParser(
        description="UK Tax Calculator: take-home pay and the real cost of bills",
    )
    parser.add_argument(
        "--cli",
        action="store_true",
        help="Run in terminal mode instead of launching the web API",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5000,
        help="Port for the web API (default 5000)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default WARNING)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cli:
        from cli import run_cli
        run_cli()
    else:
        from app import run_web
        run_web(port=args.port)


if __name__ == "__main__":
    main()
