"""Command-line interface for s3lite.

Provides argument parsing and main entry point for signing URLs and
running object operations from the command line.
"""

import argparse
import json
import logging
import sys
from typing import Optional

import httpx
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from s3lite.client import S3Client, S3Object
from s3lite.config import DEFAULT_CONFIG_PATH, load_config
from s3lite.errors import ConfigError, PolicyError, S3Error
from s3lite.models import ACL

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="s3lite",
        description="Sign URLs and access objects in an S3-compatible store",
    )

    parser.add_argument(
        "-c", "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
    )

    parser.add_argument(
        "--profile",
        help="Profile name in the configuration file (default: default)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log signing and request details",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    presign = commands.add_parser("presign", help="Print a pre-signed URL")
    presign.add_argument("key")
    presign.add_argument("--method", default="GET", help="HTTP method (default: GET)")
    presign.add_argument(
        "--expires",
        type=int,
        default=3600,
        metavar="SECONDS",
        help="Lifetime of the URL in seconds (default: 3600)",
    )
    presign.add_argument("--insecure", action="store_true", help="Use http")

    form = commands.add_parser("form-upload", help="Print a signed form-upload URL")
    form.add_argument("key")
    form.add_argument(
        "--policy",
        required=True,
        metavar="PATH",
        help="Path to the JSON policy document",
    )
    form.add_argument(
        "--acl",
        default=ACL.PRIVATE.value,
        choices=[acl.value for acl in ACL],
        help="Canned ACL (default: private)",
    )
    form.add_argument(
        "--field",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Extra form field, may be repeated",
    )

    for name, help_text in (
        ("exists", "Check whether an object exists"),
        ("head", "Show object metadata"),
        ("delete", "Delete an object"),
    ):
        commands.add_parser(name, help=help_text).add_argument("key")

    get = commands.add_parser("get", help="Download an object")
    get.add_argument("key")
    get.add_argument("-o", "--output", metavar="PATH", help="Write to file instead of stdout")

    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def parse_fields(fields: list[str]) -> dict[str, list[str]]:
    """Group NAME=VALUE pairs by name, keeping repeated names.

    Raises:
        ValueError: If an entry has no ``=``.
    """
    grouped: dict[str, list[str]] = {}
    for entry in fields:
        name, sep, value = entry.partition("=")
        if not sep or not name:
            raise ValueError(f"Invalid field {entry!r}, expected NAME=VALUE")
        grouped.setdefault(name, []).append(value)
    return grouped


def show_head(obj: S3Object, console: Console) -> None:
    head = obj.head()

    table = Table(title=f"{obj.client.config.bucket_name}/{obj.key}", box=box.ROUNDED)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Content-Type", head.content_type())
    table.add_row("Content-Length", str(head.content_length()))
    table.add_row("ETag", head.etag())
    table.add_row("Last-Modified", head.last_modified().isoformat())
    console.print(table)


def download(obj: S3Object, output: Optional[str]) -> None:
    response, _ = obj.reader()
    try:
        if output:
            with open(output, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
        else:
            for chunk in response.iter_bytes():
                sys.stdout.buffer.write(chunk)
            sys.stdout.buffer.flush()
    finally:
        response.close()


def run_command(args: argparse.Namespace, client: S3Client, console: Console) -> int:
    """Execute the selected command.

    Returns:
        Exit code for the command
    """
    obj = client.object(args.key)

    if args.command == "presign":
        url = obj.authenticated_url(
            secure=not args.insecure,
            method=args.method.upper(),
            expires_in=args.expires,
        )
        print(url)
    elif args.command == "form-upload":
        with open(args.policy, encoding="utf-8") as f:
            policy = json.load(f)
        print(obj.form_upload_url(args.acl, policy, parse_fields(args.field)))
    elif args.command == "exists":
        found = obj.exists()
        print("true" if found else "false")
        return 0 if found else 1
    elif args.command == "head":
        show_head(obj, console)
    elif args.command == "delete":
        obj.delete()
    elif args.command == "get":
        download(obj, args.output)

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 1 for store or network errors,
        2 for configuration or usage errors
    """
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config, args.profile)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    console = Console()
    with S3Client(config) as client:
        try:
            return run_command(args, client, console)
        except (PolicyError, ValueError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        except S3Error as e:
            print(f"Store error: {e}", file=sys.stderr)
            return 1
        except httpx.TransportError as e:
            print(f"Network error: {e}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
