"""Unit tests for SAML ID generators and clocks."""

import re
from datetime import datetime, timedelta, timezone

import pytest

from saml_post_idp.utils.clock import (
    FixedClock,
    SystemClock,
    format_saml_instant,
    parse_saml_instant,
)
from saml_post_idp.utils.ids import SecureIdGenerator, SequenceIdGenerator


class TestSecureIdGenerator:
    """Test SecureIdGenerator."""

    def test_format(self):
        generated = SecureIdGenerator().generate()

        assert re.fullmatch(r"_[0-9a-f]{40}", generated)

    def test_unique(self):
        generator = SecureIdGenerator()

        assert len({generator.generate() for _ in range(1000)}) == 1000

    def test_custom_length(self):
        assert len(SecureIdGenerator(num_bytes=32).generate()) == 65

    def test_too_short_rejected(self):
        with pytest.raises(ValueError):
            SecureIdGenerator(num_bytes=8)


class TestSequenceIdGenerator:
    """Test SequenceIdGenerator."""

    def test_sequence(self):
        generator = SequenceIdGenerator(["_a", "_b"])

        assert [generator.generate(), generator.generate()] == ["_a", "_b"]

    def test_exhausted(self):
        generator = SequenceIdGenerator([])

        with pytest.raises(RuntimeError, match="exhausted"):
            generator.generate()


class TestClocks:
    """Test clock implementations and SAML instant formatting."""

    def test_system_clock_is_utc_whole_seconds(self):
        now = SystemClock().now()

        assert now.tzinfo == timezone.utc
        assert now.microsecond == 0

    def test_fixed_clock_normalises(self):
        offset = timezone(timedelta(hours=2))
        clock = FixedClock(datetime(2024, 5, 1, 14, 30, 45, 999, tzinfo=offset))

        assert clock.now() == datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)
        assert clock.now() is clock.now()

    def test_fixed_clock_naive_is_utc(self):
        assert FixedClock(datetime(2024, 1, 1)).now().tzinfo == timezone.utc

    def test_format_saml_instant(self):
        assert (
            format_saml_instant(datetime(2003, 4, 17, 0, 46, 2, tzinfo=timezone.utc))
            == "2003-04-17T00:46:02Z"
        )

    def test_format_converts_to_utc(self):
        value = datetime(2024, 5, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))

        assert format_saml_instant(value) == "2024-05-01T12:00:00Z"

    def test_parse_saml_instant(self):
        assert parse_saml_instant("2024-05-01T12:30:45Z") == datetime(
            2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc
        )
