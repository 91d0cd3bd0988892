"""Configuration loading and Pydantic models for bucketkit."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from bucketkit.addressing import AddressingStyle, resolve_address
from bucketkit.errors import InvalidOption, MissingOption

DEFAULT_REGION = "us-standard"
DEFAULT_CONNECTION_TIMEOUT = 5000
DEFAULT_MAX_CONNECTIONS = 20
POOL_PREFIX = "bucketkit_"

REQUIRED_OPTIONS = ("access_key", "secret_access_key")


class BucketOptions(BaseModel):
    """Options accepted when opening a bucket."""

    access_key: str = Field(repr=False)
    secret_access_key: str = Field(repr=False)
    region: str = DEFAULT_REGION
    host: str | None = None
    endpoint: str | None = None
    style: AddressingStyle = AddressingStyle.VIRTUAL
    connection_timeout: int = Field(default=DEFAULT_CONNECTION_TIMEOUT, gt=0)
    max_connections: int = Field(default=DEFAULT_MAX_CONNECTIONS, gt=0)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "BucketOptions":
        """Validate raw open-time options.

        Args:
            options: Option names mapped to values.

        Returns:
            The validated options.

        Raises:
            MissingOption: If a mandatory option is absent.
            InvalidOption: If an option has an unusable value.
        """
        for name in REQUIRED_OPTIONS:
            if options.get(name) is None:
                raise MissingOption(name)
        try:
            return cls(**options)
        except ValidationError as exc:
            # Input values are left out of the message; they may be secrets.
            raise InvalidOption(_describe_validation_error(exc)) from None


@dataclass(frozen=True)
class BucketConfig:
    """Resolved configuration of one open bucket.

    Attributes:
        access_key: Access key ID.
        secret_access_key: Secret access key.
        endpoint: Host used to build the request URI.
        host: Value of the Host header.
        path: Path segments prefixed to every request.
        region: Region of the signing scope.
        pool: Name of the connection pool owned by the transport.
        connection_timeout: Transport timeout in milliseconds.
        max_connections: Transport connection limit.
    """

    access_key: str = field(repr=False)
    secret_access_key: str = field(repr=False)
    endpoint: str
    host: str
    path: tuple[str, ...]
    region: str
    pool: str
    connection_timeout: int = DEFAULT_CONNECTION_TIMEOUT
    max_connections: int = DEFAULT_MAX_CONNECTIONS


def pool_name(bucket: str) -> str:
    return POOL_PREFIX + bucket


def build_bucket_config(bucket: str, options: BucketOptions) -> BucketConfig:
    """Resolve the address of a bucket and build its configuration.

    The region only affects addressing when it was given explicitly.
    """
    explicit_region = options.region if "region" in options.model_fields_set else None
    address = resolve_address(
        bucket,
        endpoint=options.endpoint,
        region=explicit_region,
        style=options.style,
    )
    return BucketConfig(
        access_key=options.access_key,
        secret_access_key=options.secret_access_key,
        endpoint=address.host,
        host=options.host or address.host,
        path=address.path,
        region=options.region,
        pool=pool_name(bucket),
        connection_timeout=options.connection_timeout,
        max_connections=options.max_connections,
    )


# -- Client configuration file -------------------------------------------------


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "text"


class ClientSettings(BaseModel):
    """Client-wide settings."""

    scheme: str = Field(default="https", pattern=r"^https?$")


class ClientConfig(BaseModel):
    """Top-level bucketkit configuration.

    Bucket entries stay raw mappings; they are validated when the bucket is
    opened so that a missing credential surfaces as MissingOption.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    client: ClientSettings = Field(default_factory=ClientSettings)
    buckets: dict[str, dict[str, Any]] = Field(default_factory=dict)


def _parse_logging(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the logging section from YAML data."""
    if data is None:
        return {}
    return {
        "level": data.get("level", "INFO"),
        "format": data.get("format", "text"),
    }


def _parse_client(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the client section from YAML data."""
    if data is None:
        return {}
    return {"scheme": data.get("scheme", "https")}


def _parse_buckets(data: dict[str, Any] | None) -> dict[str, dict[str, Any]]:
    """Parse the buckets section: bucket name -> open options.

    A bucket listed without options gets an empty mapping.
    """
    if data is None:
        return {}
    return {str(name): dict(options or {}) for name, options in data.items()}


def load_config(path: Path) -> ClientConfig:
    """Load a ClientConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated ClientConfig validated by Pydantic.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    return ClientConfig(
        logging=LoggingConfig(**_parse_logging(raw.get("logging"))),
        client=ClientSettings(**_parse_client(raw.get("client"))),
        buckets=_parse_buckets(raw.get("buckets")),
    )


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"])
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)
