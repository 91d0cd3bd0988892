"""Error definitions for bucketkit."""

from typing import Any


class BucketKitError(Exception):
    """A bucketkit failure with a stable code and a message.

    Attributes:
        code: Machine-readable error code (e.g. "BucketNotFound").
        message: Human-readable error description.
    """

    def __init__(self, code: str, message: str) -> None:
        """Initialize the error.

        Args:
            code: Error code.
            message: Error description.
        """
        super().__init__(message)
        self.code = code
        self.message = message


# -- Configuration errors ------------------------------------------------------


class MissingOption(BucketKitError):
    """A mandatory open-time option was absent."""

    def __init__(self, option: str) -> None:
        super().__init__(code="MissingOption", message=f"Missing mandatory option: {option}")
        self.option = option


class InvalidOption(BucketKitError):
    """An open-time option was present but not valid."""

    def __init__(self, message: str = "Invalid option") -> None:
        super().__init__(code="InvalidOption", message=message)


class UnsupportedMethod(BucketKitError, ValueError):
    """Only GET and PUT requests can be signed."""

    def __init__(self, method: str) -> None:
        super().__init__(code="UnsupportedMethod", message=f"Unsupported HTTP method: {method!r}")
        self.method = method


# -- Registry errors -----------------------------------------------------------


class BucketAlreadyExists(BucketKitError):
    """The bucket is already open."""

    def __init__(self, bucket: str) -> None:
        super().__init__(code="BucketAlreadyExists", message=f"Bucket already open: {bucket}")
        self.bucket = bucket


class BucketNotFound(BucketKitError):
    """The bucket was never opened or has been closed."""

    def __init__(self, bucket: str) -> None:
        super().__init__(code="BucketNotFound", message=f"Bucket not open: {bucket}")
        self.bucket = bucket


# -- Open-time probe diagnostics ----------------------------------------------


class WrongRegion(BucketKitError):
    """The store redirected the probe: the bucket lives in another region."""

    def __init__(self, bucket: str) -> None:
        super().__init__(
            code="WrongRegion",
            message=f"Bucket {bucket} is not in the configured region.",
        )
        self.bucket = bucket


class NoSuchBucket(BucketKitError):
    """The store does not know the bucket."""

    def __init__(self, bucket: str) -> None:
        super().__init__(code="NoSuchBucket", message=f"The bucket {bucket} does not exist.")
        self.bucket = bucket


# -- Response errors -----------------------------------------------------------


class UnknownResponse(BucketKitError):
    """The store answered with a status code the operation does not model.

    Attributes:
        status: The HTTP status code.
        headers: The response headers as (name, value) pairs.
        body: The raw response body.
    """

    def __init__(self, status: int, headers: list[tuple[str, str]], body: bytes) -> None:
        super().__init__(code="UnknownResponse", message=f"Unexpected response status: {status}")
        self.status = status
        self.headers = headers
        self.body = body


class MalformedExpirationHeader(BucketKitError):
    """The x-amz-expiration header did not match the expected layout."""

    def __init__(self, value: Any) -> None:
        super().__init__(
            code="MalformedExpirationHeader",
            message=f"Malformed expiration header: {value!r}",
        )
        self.value = value


class TransportError(BucketKitError):
    """The transport failed before an HTTP response was received."""

    def __init__(self, message: str = "Transport failure") -> None:
        super().__init__(code="TransportError", message=message)
