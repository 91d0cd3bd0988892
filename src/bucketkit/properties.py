"""Object properties extracted from S3 response headers."""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from bucketkit.errors import MalformedExpirationHeader

ETAG_HEADER = "etag"
EXPIRATION_HEADER = "x-amz-expiration"

MONTHS = {
    "Jan": 1,
    "Feb": 2,
    "Mar": 3,
    "Apr": 4,
    "May": 5,
    "Jun": 6,
    "Jul": 7,
    "Aug": 8,
    "Sep": 9,
    "Oct": 10,
    "Nov": 11,
    "Dec": 12,
}

# Example: expiry-date="Fri, 23 Dec 2012 00:00:00 GMT", rule-id="picture-deletion-rule"
EXPIRATION_RE = re.compile(
    r""".*?,\s
        (?P<day>\d+)\s
        (?P<month>\w{3})\s
        (?P<year>\d+)\s
        (?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})\s
        GMT",\s
        rule-id="(?P<rule_id>.*?)"
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Expiration:
    """Lifecycle expiration of an object.

    Attributes:
        rule_id: Name of the lifecycle rule that applies.
        expiry_date: When the object expires (UTC).
    """

    rule_id: str
    expiry_date: datetime

    def as_tuple(self) -> tuple[str, tuple[int, int, int, int, int, int]]:
        d = self.expiry_date
        return self.rule_id, (d.year, d.month, d.day, d.hour, d.minute, d.second)


@dataclass(frozen=True)
class ObjectProperties:
    """Properties reported by the store for an object."""

    etag: str | None = None
    expiration: Expiration | None = None

    def to_dict(self) -> dict[str, object]:
        result: dict[str, object] = {}
        if self.etag is not None:
            result["etag"] = self.etag
        if self.expiration is not None:
            result["expires"] = {
                "rule_id": self.expiration.rule_id,
                "expiry_date": self.expiration.expiry_date.isoformat(),
            }
        return result


def extract_properties(headers: Iterable[tuple[str, str]]) -> ObjectProperties:
    """Pick the ETag and expiration out of response headers.

    Header names are matched case-insensitively; the first occurrence wins.

    Raises:
        MalformedExpirationHeader: If x-amz-expiration is present but does
            not parse.
    """
    etag = None
    expiration_value = None
    for name, value in headers:
        lower_name = name.lower()
        if lower_name == ETAG_HEADER and etag is None:
            etag = value
        elif lower_name == EXPIRATION_HEADER and expiration_value is None:
            expiration_value = value

    expiration = parse_expiration(expiration_value) if expiration_value is not None else None
    return ObjectProperties(etag=etag, expiration=expiration)


def parse_expiration(value: str) -> Expiration:
    """Parse an x-amz-expiration header value.

    Args:
        value: The raw header value.

    Returns:
        The parsed Expiration.

    Raises:
        MalformedExpirationHeader: On any value that does not match the
            expected layout, an unknown month name or an impossible date.
    """
    match = EXPIRATION_RE.match(value)
    if not match:
        raise MalformedExpirationHeader(value)

    month = MONTHS.get(match.group("month"))
    if month is None:
        raise MalformedExpirationHeader(value)

    try:
        expiry_date = datetime(
            int(match.group("year")),
            month,
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
            tzinfo=timezone.utc,
        )
    except ValueError:
        raise MalformedExpirationHeader(value) from None

    return Expiration(rule_id=match.group("rule_id"), expiry_date=expiry_date)
