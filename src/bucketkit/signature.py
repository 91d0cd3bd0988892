"""AWS Signature Version 4 request signing for bucketkit.

Implements the client side of SigV4 header-based auth: canonical request
construction, the HMAC-SHA256 signing key chain and assembly of the
Authorization header. Every function here is pure; the request timestamp is
an explicit argument so the output is reproducible.

References:
    - https://docs.aws.amazon.com/AmazonS3/latest/API/sig-v4-header-based-auth.html
"""

import hashlib
import hmac
import urllib.parse
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from bucketkit.errors import UnsupportedMethod

# Constants
ALGORITHM = "AWS4-HMAC-SHA256"
KEY_PREFIX = "AWS4"
SCOPE_TERMINATOR = "aws4_request"
SERVICE_NAME = "s3"
EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
DATE_STAMP_FORMAT = "%Y%m%d"

CONTENT_SHA256_HEADER = "x-amz-content-sha256"
DATE_HEADER = "x-amz-date"
AUTHORIZATION_HEADER = "Authorization"

SUPPORTED_METHODS = ("GET", "PUT")

QueryValue = str | int


@dataclass(frozen=True)
class SignedRequest:
    """Result of signing a request.

    Attributes:
        headers: Headers to add to the outgoing request: the payload hash,
            the request timestamp and the Authorization header.
        query: The query parameters in the order they were signed.
        query_string: The canonical query string; the request URI must use it
            verbatim.
    """

    headers: list[tuple[str, str]] = field(default_factory=list)
    query: list[tuple[str, str]] = field(default_factory=list)
    query_string: str = ""


def sign_request(
    method: str,
    path: str,
    query: Iterable[tuple[str, QueryValue]],
    headers: Iterable[tuple[str, str]],
    payload: bytes,
    access_key: str,
    secret_access_key: str,
    region: str,
    service: str,
    timestamp: datetime,
) -> SignedRequest:
    """Sign a request with SigV4.

    Args:
        method: HTTP method, GET or PUT (any case).
        path: Resource path without the leading slash, already URL-safe.
        query: Query parameters as (name, value) pairs.
        headers: Headers to sign, typically Host and Content-Length.
        payload: The request body.
        access_key: Access key ID.
        secret_access_key: Secret access key.
        region: Region of the credential scope.
        service: Service of the credential scope.
        timestamp: The request time. Read once by the caller and used for
            both the x-amz-date header and the credential scope.

    Returns:
        The headers to add and the canonical query.

    Raises:
        UnsupportedMethod: If the method is not GET or PUT.
    """
    wire_method = normalize_method(method)
    amz_date = format_amz_date(timestamp)
    date_stamp = format_date_stamp(timestamp)
    payload_hash = hash_payload(payload)

    amz_headers = [(CONTENT_SHA256_HEADER, payload_hash), (DATE_HEADER, amz_date)]
    sorted_query = sort_query(query)
    canonical_request, signed_headers = build_canonical_request(
        method=wire_method,
        path=path,
        query=sorted_query,
        headers=amz_headers + list(headers),
        payload_hash=payload_hash,
    )

    scope = credential_scope(date_stamp, region, service)
    string_to_sign = build_string_to_sign(amz_date, scope, canonical_request)
    signing_key = derive_signing_key(secret_access_key, date_stamp, region, service)
    signature = compute_signature(signing_key, string_to_sign)

    authorization = (
        f"{ALGORITHM} Credential={access_key}/{scope},"
        f"SignedHeaders={signed_headers},Signature={signature}"
    )
    return SignedRequest(
        headers=amz_headers + [(AUTHORIZATION_HEADER, authorization)],
        query=sorted_query,
        query_string=canonical_query_string(sorted_query),
    )


# -- Canonical request construction --------------------------------------------


def build_canonical_request(
    method: str,
    path: str,
    query: Iterable[tuple[str, QueryValue]],
    headers: Iterable[tuple[str, str]],
    payload_hash: str,
) -> tuple[str, str]:
    """Build the canonical request string.

    Args:
        method: HTTP method (uppercase).
        path: Resource path without the leading slash.
        query: Query parameters.
        headers: Every header that takes part in the signature.
        payload_hash: SHA-256 hex digest of the body.

    Returns:
        A (canonical_request, signed_headers) tuple.
    """
    header_block, signed_headers = canonical_headers(headers)
    parts = [
        method,
        canonical_uri(path),
        canonical_query_string(query),
        header_block,
        signed_headers,
        payload_hash,
    ]
    return "\n".join(parts), signed_headers


def canonical_uri(path: str) -> str:
    """Prefix the resource path with '/'. No further encoding is applied."""
    return "/" + path


def sort_query(query: Iterable[tuple[str, QueryValue]]) -> list[tuple[str, str]]:
    """Stringify query parameters and sort them by name, then value."""
    return sorted((str(name), str(value)) for name, value in query)


def canonical_query_string(query: Iterable[tuple[str, QueryValue]]) -> str:
    """Build the canonical query string.

    Parameters are sorted by name (byte-order), then by value. Each name and
    value is URI-encoded.

    Args:
        query: Query parameters as (name, value) pairs.

    Returns:
        The canonical query string (empty when there are no parameters).
    """
    encoded = []
    for name, value in sort_query(query):
        encoded.append(f"{_uri_encode(name)}={_uri_encode(value)}")
    return "&".join(encoded)


def canonical_headers(headers: Iterable[tuple[str, str]]) -> tuple[str, str]:
    """Build the canonical header block and the signed header list.

    Names are lowercased, values trimmed, lines sorted by name. Repeated
    names are merged into one line with their values joined by ','.

    Args:
        headers: (name, value) pairs, names in any case.

    Returns:
        A (canonical_headers, signed_headers) tuple. Every canonical header
        line ends with a newline.
    """
    lower_headers: dict[str, str] = {}
    for name, value in headers:
        lower_name = name.lower()
        trimmed = _trim_header_value(value)
        if lower_name in lower_headers:
            lower_headers[lower_name] += "," + trimmed
        else:
            lower_headers[lower_name] = trimmed

    sorted_names = sorted(lower_headers)
    block = "".join(f"{name}:{lower_headers[name]}\n" for name in sorted_names)
    return block, ";".join(sorted_names)


# -- String to sign ------------------------------------------------------------


def credential_scope(date_stamp: str, region: str, service: str) -> str:
    """Build the credential scope (YYYYMMDD/region/service/aws4_request)."""
    return f"{date_stamp}/{region}/{service}/{SCOPE_TERMINATOR}"


def build_string_to_sign(timestamp: str, scope: str, canonical_request: str) -> str:
    """Build the string to sign.

    Args:
        timestamp: ISO 8601 basic timestamp (YYYYMMDDTHHMMSSZ).
        scope: Credential scope.
        canonical_request: The assembled canonical request string.

    Returns:
        The string to sign.
    """
    canonical_hash = hashlib.sha256(canonical_request.encode("utf-8")).hexdigest()
    return f"{ALGORITHM}\n{timestamp}\n{scope}\n{canonical_hash}"


# -- Signing key derivation ----------------------------------------------------


def derive_signing_key(secret_key: str, date: str, region: str, service: str) -> bytes:
    """Derive the SigV4 signing key via the HMAC-SHA256 chain.

    Args:
        secret_key: The secret access key.
        date: Date string (YYYYMMDD).
        region: AWS region.
        service: AWS service name.

    Returns:
        The 32-byte signing key.
    """
    k_date = hmac.new(
        (KEY_PREFIX + secret_key).encode("utf-8"),
        date.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    k_region = hmac.new(k_date, region.encode("utf-8"), hashlib.sha256).digest()
    k_service = hmac.new(k_region, service.encode("utf-8"), hashlib.sha256).digest()
    k_signing = hmac.new(k_service, SCOPE_TERMINATOR.encode("utf-8"), hashlib.sha256).digest()
    return k_signing


def compute_signature(signing_key: bytes, string_to_sign: str) -> str:
    """Compute the final HMAC-SHA256 hex signature (64 lowercase hex chars)."""
    return hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


# ---------------------------------------------------------------------------
# Module-level utility functions
# ---------------------------------------------------------------------------


def hash_payload(payload: bytes) -> str:
    """Lowercase hex SHA-256 of the payload."""
    return hashlib.sha256(payload).hexdigest()


def normalize_method(method: str) -> str:
    """Map a method to its uppercase wire form.

    Raises:
        UnsupportedMethod: If the method is not GET or PUT.
    """
    wire_method = method.upper() if isinstance(method, str) else ""
    if wire_method not in SUPPORTED_METHODS:
        raise UnsupportedMethod(method)
    return wire_method


def format_amz_date(timestamp: datetime) -> str:
    """Format a timestamp as YYYYMMDDTHHMMSSZ in UTC."""
    return _as_utc(timestamp).strftime(AMZ_DATE_FORMAT)


def format_date_stamp(timestamp: datetime) -> str:
    """Format the calendar day of a timestamp as YYYYMMDD in UTC."""
    return _as_utc(timestamp).strftime(DATE_STAMP_FORMAT)


def _as_utc(timestamp: datetime) -> datetime:
    # Naive datetimes are taken to be UTC already.
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone(timezone.utc)


def _uri_encode(s: str) -> str:
    """S3-compatible URI encoding.

    Characters A-Z, a-z, 0-9, '-', '_', '.', '~' are not encoded.
    All other characters are percent-encoded with uppercase hex.
    Spaces become %20 (not +).
    """
    return urllib.parse.quote(s, safe="-_.~")


def _trim_header_value(value: str) -> str:
    """Strip leading and trailing whitespace; internal whitespace is kept."""
    return value.strip()
