"""CLI entry point for bucketkit: fetch and store single objects."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from bucketkit.client import BucketClient, ObjectStatus
from bucketkit.config import ClientConfig, load_config
from bucketkit.errors import BucketKitError
from bucketkit.logging_config import configure_logging
from bucketkit.transport import Transport

logger = logging.getLogger("bucketkit")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 3


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="bucketkit",
        description="bucketkit - get and put objects in S3-compatible buckets",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("bucketkit.yaml"),
        help="Path to YAML configuration file (default: bucketkit.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config, default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=["text", "json"],
        help="Log format: 'text' (human-readable) or 'json' (structured)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get", help="Download an object")
    get_parser.add_argument("bucket", help="Bucket name (must be listed in the config)")
    get_parser.add_argument("key", help="Object key")
    get_parser.add_argument(
        "--output", type=Path, default=None,
        help="Write the object to this file (default: stdout)",
    )
    get_parser.add_argument(
        "--etag", type=str, default=None,
        help="Only download if the object's ETag differs",
    )

    put_parser = subparsers.add_parser("put", help="Upload an object")
    put_parser.add_argument("bucket", help="Bucket name (must be listed in the config)")
    put_parser.add_argument("key", help="Object key")
    put_parser.add_argument("path", type=Path, help="File to upload")

    return parser.parse_args(argv)


async def run_command(
    args: argparse.Namespace,
    config: ClientConfig,
    transport: Transport | None = None,
) -> int:
    """Open the bucket named on the command line and run one operation.

    Args:
        args: Parsed arguments.
        config: Loaded configuration.
        transport: Transport override, used by tests.

    Returns:
        The process exit status.
    """
    options = config.buckets.get(args.bucket)
    if options is None:
        logger.error("Bucket %s is not configured in %s", args.bucket, args.config)
        return EXIT_ERROR

    data = b""
    if args.command == "put":
        try:
            data = args.path.read_bytes()
        except OSError as exc:
            logger.error("Cannot read %s: %s", args.path, exc.strerror)
            return EXIT_ERROR

    async with BucketClient(transport=transport, scheme=config.client.scheme) as client:
        await client.open(args.bucket, **options)

        if args.command == "put":
            properties = await client.put(args.bucket, args.key, data)
            print(json.dumps(properties.to_dict()))
            return EXIT_OK

        result = await client.get(args.bucket, args.key, etag=args.etag)
        if result.status is ObjectStatus.NOT_FOUND:
            logger.error("No such key: %s/%s", args.bucket, args.key)
            return EXIT_NOT_FOUND
        if result.status is ObjectStatus.FOUND:
            if args.output is None:
                sys.stdout.buffer.write(result.data)
                sys.stdout.buffer.flush()
            else:
                args.output.write_bytes(result.data)
                print(json.dumps(result.properties.to_dict()))
        else:
            logger.info("%s/%s not modified", args.bucket, args.key)
            print(json.dumps(result.properties.to_dict()))
        return EXIT_OK


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the bucketkit CLI.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].
    """
    args = parse_args(argv)

    # Use a basic stderr logger for config-loading errors
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    try:
        config = load_config(args.config)
    except FileNotFoundError:
        logger.error("Config file not found: %s", args.config)
        sys.exit(EXIT_ERROR)
    except Exception as exc:
        logger.error("Failed to load config: %s", exc)
        sys.exit(EXIT_ERROR)

    configure_logging(
        level=args.log_level or config.logging.level,
        fmt=args.log_format or config.logging.format,
    )

    try:
        status = asyncio.run(run_command(args, config))
    except BucketKitError as exc:
        logger.error("%s: %s", exc.code, exc.message)
        status = EXIT_ERROR
    except OSError as exc:
        logger.error("%s", exc)
        status = EXIT_ERROR
    sys.exit(status)


if __name__ == "__main__":
    main()
