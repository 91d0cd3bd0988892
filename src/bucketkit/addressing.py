"""Bucket addressing: request host and resource path construction.

Virtual-hosted style puts the bucket in the host name
(``bucket.s3.amazonaws.com``); path style puts it in the first path
segment (``s3.amazonaws.com/bucket``). Resolution is a pure table lookup and
performs no DNS or connectivity checks.
"""

import urllib.parse
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from bucketkit.errors import InvalidOption

DEFAULT_ENDPOINT = "s3.amazonaws.com"


class AddressingStyle(str, Enum):
    """Where the bucket name appears in a request."""

    VIRTUAL = "virtual"
    PATH = "path"


@dataclass(frozen=True)
class BucketAddress:
    """Resolved request host and base path segments for a bucket."""

    host: str
    path: tuple[str, ...] = ()


def resolve_address(
    bucket: str,
    endpoint: str | None = None,
    region: str | None = None,
    style: AddressingStyle | str = AddressingStyle.VIRTUAL,
) -> BucketAddress:
    """Resolve the host and base path for a bucket.

    Args:
        bucket: The bucket name.
        endpoint: Custom endpoint host, or None for AWS.
        region: Region, only consulted for path style without an endpoint.
        style: Addressing style.

    Returns:
        The resolved BucketAddress.

    Raises:
        InvalidOption: If the style is unknown.
    """
    style = _parse_style(style)

    if style is AddressingStyle.VIRTUAL:
        return BucketAddress(host=f"{bucket}.{endpoint or DEFAULT_ENDPOINT}")

    if endpoint:
        return BucketAddress(host=endpoint, path=(bucket,))
    if region:
        return BucketAddress(host=f"s3-{region}.amazonaws.com", path=(bucket,))
    return BucketAddress(host=DEFAULT_ENDPOINT, path=(bucket,))


def join_path(segments: Sequence[str]) -> str:
    """Join path segments with '/'. No leading slash; empty list gives ''."""
    return "/".join(segments)


def encode_key(key: str) -> str:
    """Percent-encode an object key for the request path.

    Each '/'-separated segment is encoded with the SigV4 unreserved set
    (A-Z a-z 0-9 '-' '_' '.' '~'); the slashes are kept. The result is used
    unchanged in both the canonical URI and the request URL.
    """
    return "/".join(urllib.parse.quote(segment, safe="-_.~") for segment in key.split("/"))


def resource_path(base: Sequence[str], key: str | None = None) -> str:
    """Build the resource path for a request: base segments, then the encoded key."""
    segments = list(base)
    if key is not None:
        segments.append(encode_key(key))
    return join_path(segments)


def _parse_style(style: AddressingStyle | str) -> AddressingStyle:
    try:
        return AddressingStyle(style)
    except ValueError:
        raise InvalidOption(f"Unknown addressing style: {style!r}") from None
