"""
Main entry point for the Grip Invest backend.

Runs the REST API server and exposes the bond and ETF calculators on the
command line with JSON output.
"""

import argparse
import json
import logging
import os
import sys

from gripinvest.calculators import LUMPSUM, SIP, calculate_bond, calculate_lumpsum, calculate_sip

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_PORT = 5000


def run_calculator(args) -> dict:
    """Run the calculator selected on the command line and return its dict."""
    if args.calculator == "bond":
        return calculate_bond(args.amount, args.coupon, args.years).to_dict()
    if args.mode == SIP:
        return calculate_sip(args.amount, args.rate, args.years).to_dict()
    return calculate_lumpsum(args.amount, args.rate, args.years).to_dict()


def serve(args):
    from gripinvest.webapp.routes import create_app

    app = create_app()
    logger.info(f"Starting Grip Invest API on {args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gripinvest",
        description="Grip Invest API server and investment calculators",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s serve --port 5000
  %(prog)s calc bond --amount 100000 --coupon 9.5 --years 5
  %(prog)s calc etf --mode sip --amount 5000 --rate 12 --years 10
        """,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    serve_parser = commands.add_parser("serve", help="Run the REST API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    serve_parser.add_argument(
        "--port", type=int,
        default=int(os.environ.get("PORT", DEFAULT_PORT)),
        help="Port to listen on (default: $PORT or 5000)",
    )
    serve_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")

    calc_parser = commands.add_parser("calc", help="Run an investment calculator")
    calculators = calc_parser.add_subparsers(dest="calculator", required=True)

    bond_parser = calculators.add_parser("bond", help="Coupon bond held to maturity")
    bond_parser.add_argument("--amount", type=float, required=True, help="Amount invested")
    bond_parser.add_argument("--coupon", type=float, required=True, help="Annual coupon rate (%%)")
    bond_parser.add_argument("--years", type=int, required=True, help="Tenure in years")

    etf_parser = calculators.add_parser("etf", help="ETF SIP or lumpsum growth")
    etf_parser.add_argument("--mode", choices=[SIP, LUMPSUM], default=SIP)
    etf_parser.add_argument("--amount", type=float, required=True,
                            help="Monthly amount (sip) or one time amount (lumpsum)")
    etf_parser.add_argument("--rate", type=float, required=True, help="Expected annual return (%%)")
    etf_parser.add_argument("--years", type=int, required=True, help="Tenure in years")

    return parser


def main(argv=None):
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    if args.command == "serve":
        serve(args)
        return

    try:
        result = run_calculator(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(result, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
