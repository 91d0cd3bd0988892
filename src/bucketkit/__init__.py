"""bucketkit - SigV4-signed single-object access to S3-compatible stores."""

__version__ = "0.1.0"

from bucketkit.addressing import AddressingStyle, BucketAddress, resolve_address
from bucketkit.client import BucketClient, ObjectResult, ObjectStatus
from bucketkit.config import BucketConfig, BucketOptions
from bucketkit.errors import (
    BucketAlreadyExists,
    BucketKitError,
    BucketNotFound,
    InvalidOption,
    MalformedExpirationHeader,
    MissingOption,
    NoSuchBucket,
    TransportError,
    UnknownResponse,
    UnsupportedMethod,
    WrongRegion,
)
from bucketkit.properties import Expiration, ObjectProperties
from bucketkit.registry import BucketRegistry
from bucketkit.signature import SignedRequest, sign_request
from bucketkit.transport import HttpxTransport, Response, Transport

__all__ = [
    "AddressingStyle",
    "BucketAddress",
    "BucketAlreadyExists",
    "BucketClient",
    "BucketConfig",
    "BucketKitError",
    "BucketNotFound",
    "BucketOptions",
    "BucketRegistry",
    "Expiration",
    "HttpxTransport",
    "InvalidOption",
    "MalformedExpirationHeader",
    "MissingOption",
    "NoSuchBucket",
    "ObjectProperties",
    "ObjectResult",
    "ObjectStatus",
    "Response",
    "SignedRequest",
    "Transport",
    "TransportError",
    "UnknownResponse",
    "UnsupportedMethod",
    "WrongRegion",
    "resolve_address",
    "sign_request",
]
