#!/usr/bin/env python3
"""
Identity provider wsapi - session, CSRF and sign-in API server.
"""

import argparse
import getpass
import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", stream=sys.stderr
)

#
# NOTE: Keep idp imports lazy (inside main) so `--help` works without the server extras.
#


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Identity provider wsapi server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve the wsapi on :8080 (configuration from IDP_* environment variables)
  python main.py --serve

  # Read-only replica: never registers operations that write the database
  IDP_API_MODE=read python main.py --serve --port 8081

  # Hash a password with the configured bcrypt work factor
  python main.py --hash-password
        """,
    )
    parser.add_argument("--serve", action="store_true", help="Run the wsapi HTTP server")
    parser.add_argument("--host", default="0.0.0.0", help="Server bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8080, help="Server listen port (default: 8080)")
    parser.add_argument(
        "--hash-password",
        action="store_true",
        help="Read a password (prompt, or stdin when not a tty) and print its bcrypt hash",
    )

    args = parser.parse_args()

    try:
        if args.serve:
            from idp.api.server import run as run_server

            run_server(host=args.host, port=args.port)
            return

        if args.hash_password:
            from idp.auth.config import load_config
            from idp.auth.passwords import hash_password

            password = getpass.getpass("Password: ") if sys.stdin.isatty() else sys.stdin.readline().rstrip("\n")
            if not password:
                parser.error("empty password")
            print(hash_password(password, load_config().bcrypt_work_factor))
            return

        # No arguments provided
        parser.print_help()

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        raise


if __name__ == "__main__":
    main()
