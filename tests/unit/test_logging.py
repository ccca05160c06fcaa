"""Unit tests for logging configuration, redaction and audit events."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from saml_post_idp.logging_audit import (
    IdentityRedactingFormatter,
    configure_logging,
    get_logger,
    log_audit_event,
)


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord(
        name="test", level=logging.INFO, pathname=__file__, lineno=1,
        msg=message, args=None, exc_info=None,
    )


@pytest.fixture
def restore_root_logger(monkeypatch):
    """Drop handlers added by configure_logging once the test is done."""
    monkeypatch.setattr("saml_post_idp.logging_audit.logger._logging_configured", False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


class TestIdentityRedactingFormatter:
    """Test the redacting formatter."""

    def test_redacts_email(self):
        formatter = IdentityRedactingFormatter(fmt="%(message)s", redact_identities=True)

        output = formatter.format(_record("issued for alice@example.org"))

        assert output == "issued for [EMAIL-REDACTED]"

    def test_redacts_signature_material(self):
        formatter = IdentityRedactingFormatter(fmt="%(message)s", redact_identities=True)
        xml = (
            "<ds:SignatureValue>QUJD</ds:SignatureValue>"
            "<ds:X509Certificate>TUlJ</ds:X509Certificate>"
        )

        output = formatter.format(_record(xml))

        assert "QUJD" not in output
        assert "TUlJ" not in output
        assert "<ds:SignatureValue>[REDACTED]</ds:SignatureValue>" in output

    def test_no_redaction_by_default(self):
        formatter = IdentityRedactingFormatter(fmt="%(message)s")

        assert formatter.format(_record("alice@example.org")) == "alice@example.org"


class TestConfigureLogging:
    """Test configure_logging()."""

    def test_creates_log_file(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "nested" / "idp.log"

        configure_logging(level="INFO", log_file=log_file)
        get_logger("saml_post_idp.test").debug("file only message")

        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "file only message" in log_file.read_text(encoding="utf-8")

    def test_idempotent(self, tmp_path, restore_root_logger):
        configure_logging(log_file=tmp_path / "a.log")
        configure_logging(log_file=tmp_path / "a.log")

        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1

    def test_reconfigure_keeps_foreign_handlers(self, tmp_path, restore_root_logger):
        foreign = logging.NullHandler()
        root = logging.getLogger()
        root.addHandler(foreign)

        configure_logging(log_file=tmp_path / "a.log")
        configure_logging(level="DEBUG", log_file=tmp_path / "b.log")

        assert foreign in root.handlers
        consoles = [h for h in root.handlers if h.get_name() == "saml_post_idp.console"]
        assert len(consoles) == 1
        assert consoles[0].level == logging.DEBUG

    def test_invalid_level(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="LOUD", log_file=tmp_path / "x.log")

    def test_env_log_file(self, tmp_path, monkeypatch, restore_root_logger):
        target = tmp_path / "env.log"
        monkeypatch.setenv("SAML_IDP_LOG_FILE", str(target))

        configure_logging()

        assert target.exists()


class TestAuditEvents:
    """Test log_audit_event()."""

    def test_success_event_at_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="saml_post_idp.logging_audit.audit"):
            log_audit_event(
                "RESPONSE_ISSUED",
                {"status": "success", "service_id": "svc", "response_id": "_r", "duration": 0.5},
            )

        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.getMessage() == (
            "AUDIT [RESPONSE_ISSUED] | status=success | service_id=svc | "
            "response_id=_r | duration=0.500s"
        )

    def test_failure_event_at_error(self, caplog):
        with caplog.at_level(logging.INFO, logger="saml_post_idp.logging_audit.audit"):
            log_audit_event("RESPONSE_FAILED", {"status": "failure", "error_type": "X"})

        assert caplog.records[-1].levelno == logging.ERROR

    def test_extra_fields_appended(self, caplog):
        with caplog.at_level(logging.INFO, logger="saml_post_idp.logging_audit.audit"):
            log_audit_event("BINDING_CREATED", {"status": "success", "delivery_url": "u"})

        assert caplog.records[-1].getMessage().endswith("delivery_url=u")
