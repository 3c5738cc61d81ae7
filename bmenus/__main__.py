"""Entry point for running the bmenus server."""

import argparse
import asyncio
import logging

from .core.server import run_server
from .query.protocol import RemoteServer


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="bmenus menu server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run on default port (8000) with menus in ./data
  python -m bmenus

  # Ask a game server on localhost for its player list
  python -m bmenus --remote-host 127.0.0.1 --remote-port 25565

  # Run with SSL (WSS) on custom port
  python -m bmenus --port 8443 --ssl-cert cert.pem --ssl-key key.pem
""",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host address to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port number to listen on (default: 8000)",
    )
    parser.add_argument(
        "--ssl-cert",
        dest="ssl_cert",
        help="Path to SSL certificate file (enables WSS)",
    )
    parser.add_argument(
        "--ssl-key",
        dest="ssl_key",
        help="Path to SSL private key file",
    )
    parser.add_argument(
        "--data-dir",
        dest="data_dir",
        default="data",
        help="Directory for menus.yml and usage.yml (default: data)",
    )
    parser.add_argument(
        "--remote-host",
        dest="remote_host",
        help="Game server host to query for online players",
    )
    parser.add_argument(
        "--remote-port",
        dest="remote_port",
        type=int,
        default=25565,
        help="Game server port (default: 25565)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args()

    # Validate SSL arguments
    if (args.ssl_cert and not args.ssl_key) or (args.ssl_key and not args.ssl_cert):
        parser.error("Both --ssl-cert and --ssl-key must be provided together")

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    remote_server = None
    if args.remote_host:
        remote_server = RemoteServer(args.remote_host, args.remote_port)

    asyncio.run(
        run_server(
            host=args.host,
            port=args.port,
            data_dir=args.data_dir,
            remote_server=remote_server,
            ssl_cert=args.ssl_cert,
            ssl_key=args.ssl_key,
        )
    )


if __name__ == "__main__":
    main()
