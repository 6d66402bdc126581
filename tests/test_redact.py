from __future__ import annotations

from pysofar._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "code": "0",
        "data": {"accessToken": "TOKEN", "userId": 42},
        "password": "pw",
        "headers": [{"authorization": "TOKEN"}],
    }

    redacted = redact_for_log(payload)
    assert redacted["code"] == "0"
    assert redacted["password"] == "<redacted>"
    assert redacted["data"]["accessToken"] == "<redacted>"
    assert redacted["data"]["userId"] == 42
    assert redacted["headers"][0]["authorization"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
