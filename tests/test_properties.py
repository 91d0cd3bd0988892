"""Tests for ETag and x-amz-expiration extraction."""

from datetime import datetime, timezone

import pytest

from bucketkit.errors import MalformedExpirationHeader
from bucketkit.properties import (
    MONTHS,
    Expiration,
    ObjectProperties,
    extract_properties,
    parse_expiration,
)

EXPIRATION = 'expiry-date="Fri, 23 Dec 2012 00:00:00 GMT", rule-id="picture-deletion-rule"'


class TestParseExpiration:
    def test_documented_example(self):
        expiration = parse_expiration(EXPIRATION)
        assert expiration.rule_id == "picture-deletion-rule"
        assert expiration.expiry_date == datetime(2012, 12, 23, tzinfo=timezone.utc)

    def test_as_tuple(self):
        value = 'expiry-date="Mon, 3 Mar 2025 14:05:09 GMT", rule-id="logs"'
        assert parse_expiration(value).as_tuple() == ("logs", (2025, 3, 3, 14, 5, 9))

    def test_all_months(self):
        assert list(MONTHS) == [
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        ]
        for name, number in MONTHS.items():
            value = f'expiry-date="Sat, 1 {name} 2022 00:00:00 GMT", rule-id="r"'
            assert parse_expiration(value).expiry_date.month == number

    def test_empty_rule_id(self):
        value = 'expiry-date="Fri, 23 Dec 2012 00:00:00 GMT", rule-id=""'
        assert parse_expiration(value).rule_id == ""

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "garbage",
            'expiry-date="Fri, 23 Foo 2012 00:00:00 GMT", rule-id="r"',
            'expiry-date="Fri, 23 Dec 2012 00:00:00 UTC", rule-id="r"',
            'expiry-date="Fri, 23 Dec 2012 0:00:00 GMT", rule-id="r"',
            'expiry-date="Fri, 23 Dec 2012 00:00:00 GMT"',
            'expiry-date="Fri, 31 Feb 2012 00:00:00 GMT", rule-id="r"',
            'expiry-date="Fri, 23 Dec 2012 25:00:00 GMT", rule-id="r"',
        ],
    )
    def test_rejects_non_conforming(self, value):
        with pytest.raises(MalformedExpirationHeader):
            parse_expiration(value)


class TestExtractProperties:
    def test_etag_and_expiration(self):
        props = extract_properties([("ETag", '"abc"'), ("x-amz-expiration", EXPIRATION)])
        assert props.etag == '"abc"'
        assert props.expiration == Expiration(
            rule_id="picture-deletion-rule",
            expiry_date=datetime(2012, 12, 23, tzinfo=timezone.utc),
        )

    def test_names_case_insensitive(self):
        props = extract_properties([("etag", '"x"'), ("X-Amz-Expiration", EXPIRATION)])
        assert props.etag == '"x"'
        assert props.expiration is not None

    def test_absent_headers(self):
        assert extract_properties([("Content-Type", "text/plain")]) == ObjectProperties()

    def test_malformed_expiration_propagates(self):
        with pytest.raises(MalformedExpirationHeader):
            extract_properties([("ETag", '"x"'), ("x-amz-expiration", "nonsense")])

    def test_to_dict(self):
        props = extract_properties([("ETag", '"abc"'), ("x-amz-expiration", EXPIRATION)])
        assert props.to_dict() == {
            "etag": '"abc"',
            "expires": {
                "rule_id": "picture-deletion-rule",
                "expiry_date": "2012-12-23T00:00:00+00:00",
            },
        }
        assert ObjectProperties().to_dict() == {}
