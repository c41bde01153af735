"""Unit tests for webhook retry bookkeeping and signatures."""

import pytest

from buildit.webhooks import (
    ATTEMPT_HEADER,
    DISPATCHED_HEADER,
    MAX_ATTEMPTS,
    Drop,
    Retry,
    read_attempt,
    sign,
    update_retry,
    verify_signature,
)
from buildit.webhooks.retry import read_dispatched, retry_headers


@pytest.mark.unit
class TestUpdateRetry:
    """Tests for update_retry."""

    @pytest.mark.parametrize("attempt", [0, 1, 2, 3])
    def test_retries_below_limit(self, attempt: int) -> None:
        """Failures before the limit are retried with the count incremented."""
        outcome = update_retry(attempt, "GitHub unavailable")

        assert outcome == Retry(attempt=attempt + 1, reason="GitHub unavailable")

    def test_fifth_attempt_drops(self) -> None:
        """The fifth failed attempt drops the event."""
        outcome = update_retry(MAX_ATTEMPTS - 1, "GitHub unavailable")

        assert isinstance(outcome, Drop)
        assert "GitHub unavailable" in outcome.reason

    def test_carries_dispatched(self) -> None:
        """Retries after dispatch remember that jobs were published."""
        outcome = update_retry(0, "comment failed", dispatched=True)

        assert isinstance(outcome, Retry)
        assert outcome.dispatched is True


@pytest.mark.unit
class TestHeaders:
    """Tests for reading and writing retry headers."""

    def test_missing_attempt_is_zero(self) -> None:
        assert read_attempt({}) == 0
        assert read_attempt(None) == 0

    def test_reads_attempt(self) -> None:
        assert read_attempt({ATTEMPT_HEADER: 3}) == 3

    @pytest.mark.parametrize("value", ["three", None, -2])
    def test_invalid_attempt_is_zero(self, value: object) -> None:
        """Unreadable counts restart from zero."""
        assert read_attempt({ATTEMPT_HEADER: value}) == 0

    def test_retry_headers_round_trip(self) -> None:
        """Headers written for a retry are read back by the next delivery."""
        headers = retry_headers(Retry(attempt=2, reason="x", dispatched=True))

        assert headers == {ATTEMPT_HEADER: 2, DISPATCHED_HEADER: True}
        assert read_attempt(headers) == 2
        assert read_dispatched(headers) is True

    def test_not_dispatched_by_default(self) -> None:
        headers = retry_headers(Retry(attempt=1, reason="x"))

        assert DISPATCHED_HEADER not in headers
        assert read_dispatched(headers) is False


@pytest.mark.unit
class TestSignature:
    """Tests for webhook signature verification."""

    def test_valid_signature(self) -> None:
        body = b'{"action": "created"}'

        assert verify_signature("s3cret", body, sign("s3cret", body)) is True

    def test_known_digest(self) -> None:
        """Signatures are hex HMAC-SHA256 with a sha256= prefix."""
        assert sign("It's a Secret to Everybody", b"Hello, World!") == (
            "sha256=757107ea0eb2509fc211221cce984b8a37570b6d7586c22c46f4379c8b043e17"
        )

    def test_wrong_secret(self) -> None:
        body = b"{}"

        assert verify_signature("s3cret", body, sign("other", body)) is False

    def test_tampered_body(self) -> None:
        assert verify_signature("s3cret", b"{}", sign("s3cret", b"{ }")) is False

    @pytest.mark.parametrize("header", [None, "", "sha1=abc"])
    def test_missing_or_foreign_header(self, header: str | None) -> None:
        assert verify_signature("s3cret", b"{}", header) is False

    def test_no_secret(self) -> None:
        """An empty secret never verifies."""
        assert verify_signature("", b"{}", sign("", b"{}")) is False
