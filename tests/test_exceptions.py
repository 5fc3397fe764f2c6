"""自定義異常測試"""

from src.qrcard.core.exceptions import (
    MalformedUrlError,
    QRCardException,
    QRRenderError,
    SlugExhaustedError,
    ValidationError,
    get_user_friendly_message,
)


class TestExceptions:

    def test_validation_error_lists_fields(self):
        error = ValidationError(["firstName", "email"])

        assert error.missing_fields == ["firstName", "email"]
        assert str(error) == "Contact data incomplete, missing: firstName, email"
        assert "✗ firstName" in error.user_message
        assert "✗ email" in error.user_message

    def test_slug_exhausted(self):
        error = SlugExhaustedError(5, details={"contact_id": 1})

        assert error.attempts == 5
        assert "5 attempts" in str(error)
        assert error.details == {"contact_id": 1}

    def test_hierarchy(self):
        for error in (ValidationError([]), SlugExhaustedError(1), MalformedUrlError("x"), QRRenderError()):
            assert isinstance(error, QRCardException)

    def test_render_error_message(self):
        assert str(QRRenderError("payload too large")) == "Failed to render QR code (payload too large)"
        assert str(QRRenderError()) == "Failed to render QR code"


class TestUserFriendlyMessage:

    def test_custom_exception(self):
        error = SlugExhaustedError(3)
        assert get_user_friendly_message(error) == error.user_message

    def test_verbose_adds_details(self):
        error = SlugExhaustedError(3, details={"contact_id": 9})
        message = get_user_friendly_message(error, verbose=True)

        assert "SlugExhaustedError" in message
        assert "contact_id" in message

    def test_generic_exception(self):
        assert get_user_friendly_message(RuntimeError("boom")) == "❌ 系統錯誤，請稍後重試"
        assert "RuntimeError: boom" in get_user_friendly_message(RuntimeError("boom"), verbose=True)
