"""
Unit tests for RequestValidator.

Tests presence rules, recipient overrides, and the exact image size ceiling.
"""

import base64

import pytest

from src.application.request_validator import RequestValidator, decoded_size
from src.domain.exceptions import ValidationError

FIVE_MIB = 5 * 1024 * 1024


@pytest.fixture
def validator() -> RequestValidator:
    return RequestValidator(max_image_bytes=FIVE_MIB, max_message_length=1000)


class TestDecodedSize:
    """Test the base64 size arithmetic."""

    @pytest.mark.parametrize("length", [0, 1, 2, 3, 4, 5, 1023, 1024, 1025])
    def test_matches_actual_decoded_length(self, length: int) -> None:
        encoded = base64.b64encode(b"x" * length).decode("ascii")

        assert decoded_size(encoded) == length


class TestRequiredFields:
    """Test presence rules."""

    def test_valid_request(self, validator: RequestValidator, front_image_b64: str, jpeg_bytes: bytes) -> None:
        request = validator.validate({"frontImage": front_image_b64, "message": "Feliz cumpleaños!"})

        assert request.front_image.data == jpeg_bytes
        assert request.front_image.media_type == "image/jpeg"
        assert request.message == "Feliz cumpleaños!"
        assert request.back_image is None
        assert request.recipient_override is None
        assert request.access_code is None

    def test_missing_front_image(self, validator: RequestValidator) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"message": "Hola"})

        assert exc_info.value.fields == ["frontImage"]

    def test_missing_message_and_back_image(self, validator: RequestValidator, front_image_b64: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"frontImage": front_image_b64})

        assert exc_info.value.fields == ["message"]

    def test_all_missing_fields_are_reported_together(self, validator: RequestValidator) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.validate({})

        assert exc_info.value.fields == ["frontImage", "message"]

    def test_blank_message_counts_as_missing(self, validator: RequestValidator, front_image_b64: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"frontImage": front_image_b64, "message": "   "})

        assert exc_info.value.fields == ["message"]

    def test_back_image_replaces_message(self, validator: RequestValidator, front_image_b64: str) -> None:
        back = base64.b64encode(b"\x89PNG fake").decode("ascii")

        request = validator.validate({"frontImage": front_image_b64, "backImage": back})

        assert request.message is None
        assert request.back_image is not None
        assert request.back_image.data == b"\x89PNG fake"
        assert request.back_image.media_type == "image/png"

    def test_pre_rendered_pdf_back_is_accepted(self, validator: RequestValidator, front_image_b64: str) -> None:
        back = "data:application/pdf;base64," + base64.b64encode(b"%PDF-1.4").decode("ascii")

        request = validator.validate({"frontImage": front_image_b64, "backImage": back})

        assert request.back_image is not None
        assert request.back_image.media_type == "application/pdf"

    def test_unknown_back_media_type_is_rejected(self, validator: RequestValidator, front_image_b64: str) -> None:
        back = "data:application/x-foo;base64," + base64.b64encode(b"payload").decode("ascii")

        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"frontImage": front_image_b64, "backImage": back})

        assert exc_info.value.errors == ["backImage: unsupported media type application/x-foo"]

    def test_front_must_be_an_image(self, validator: RequestValidator) -> None:
        front = "data:text/html;base64," + base64.b64encode(b"<p>hi</p>").decode("ascii")

        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"frontImage": front, "message": "Hola"})

        assert exc_info.value.fields == ["frontImage"]

    def test_message_must_be_a_string(self, validator: RequestValidator, front_image_b64: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"frontImage": front_image_b64, "message": 42})

        assert "message" in exc_info.value.fields

    def test_message_too_long(self, front_image_b64: str) -> None:
        validator = RequestValidator(max_message_length=10)

        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"frontImage": front_image_b64, "message": "x" * 11})

        assert exc_info.value.fields == ["message"]

    def test_body_must_be_an_object(self, validator: RequestValidator) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.validate(["frontImage"])

        assert exc_info.value.fields == ["body"]

    def test_access_code_is_stripped(self, validator: RequestValidator, front_image_b64: str) -> None:
        request = validator.validate(
            {"frontImage": front_image_b64, "message": "Hola", "accessCode": "  X1 "}
        )

        assert request.access_code == "X1"


class TestImageDecoding:
    """Test front image decoding and the size ceiling."""

    def test_data_url_prefix_is_stripped(self, validator: RequestValidator, front_image_b64: str, jpeg_bytes: bytes) -> None:
        request = validator.validate(
            {"frontImage": f"data:image/png;base64,{front_image_b64}", "message": "Hola"}
        )

        assert request.front_image.data == jpeg_bytes
        assert request.front_image.media_type == "image/png"

    def test_invalid_base64_is_rejected(self, validator: RequestValidator) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"frontImage": "not*base64!", "message": "Hola"})

        assert exc_info.value.fields == ["frontImage"]

    def test_exactly_five_mib_is_accepted(self, validator: RequestValidator) -> None:
        encoded = base64.b64encode(b"\x00" * FIVE_MIB).decode("ascii")

        request = validator.validate({"frontImage": encoded, "message": "Hola"})

        assert len(request.front_image.data) == FIVE_MIB

    def test_one_byte_over_five_mib_is_rejected(self, validator: RequestValidator) -> None:
        encoded = base64.b64encode(b"\x00" * (FIVE_MIB + 1)).decode("ascii")

        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"frontImage": encoded, "message": "Hola"})

        assert exc_info.value.fields == ["frontImage"]
        assert str(FIVE_MIB + 1) in exc_info.value.errors[0]

    def test_back_image_has_the_same_ceiling(self) -> None:
        validator = RequestValidator(max_image_bytes=4)
        back = base64.b64encode(b"12345").decode("ascii")

        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"frontImage": "AAAA", "backImage": back})

        assert exc_info.value.fields == ["backImage"]


class TestRecipientOverride:
    """Test recipient override rules."""

    def test_complete_override(self, validator: RequestValidator, front_image_b64: str, recipient_override: dict) -> None:
        request = validator.validate(
            {"frontImage": front_image_b64, "message": "Hola", "recipientOverride": recipient_override}
        )

        override = request.recipient_override
        assert override is not None
        assert override.name == "Ana Maria Lopez"
        assert override.postal_code == "46021"
        assert override.country == "ES"

    def test_partial_override_is_rejected(self, validator: RequestValidator, front_image_b64: str, recipient_override: dict) -> None:
        del recipient_override["city"]
        del recipient_override["postalCode"]

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(
                {"frontImage": front_image_b64, "message": "Hola", "recipientOverride": recipient_override}
            )

        assert set(exc_info.value.fields) == {"recipientOverride.city", "recipientOverride.postalCode"}

    def test_blank_override_field_is_rejected(self, validator: RequestValidator, front_image_b64: str, recipient_override: dict) -> None:
        recipient_override["street"] = "  "

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(
                {"frontImage": front_image_b64, "message": "Hola", "recipientOverride": recipient_override}
            )

        assert exc_info.value.fields == ["recipientOverride.street"]

    def test_override_rejected_when_not_accepted(self, front_image_b64: str, recipient_override: dict) -> None:
        validator = RequestValidator(accept_recipient_override=False)

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(
                {"frontImage": front_image_b64, "message": "Hola", "recipientOverride": recipient_override}
            )

        assert exc_info.value.fields == ["recipientOverride"]

    def test_override_required_without_default(self, front_image_b64: str) -> None:
        validator = RequestValidator(require_recipient_override=True)

        with pytest.raises(ValidationError) as exc_info:
            validator.validate({"frontImage": front_image_b64, "message": "Hola"})

        assert exc_info.value.fields == ["recipientOverride"]
