"""
Tests for the submission rules in validators.py. No store or HTTP involved.
"""

import pytest

from errors import UploadTooLarge
from schemas import ContactIn, EnquiryIn, FeedbackIn
from validators import (
    Accepted,
    Rejected,
    validate_contact,
    validate_enquiry,
    validate_feedback,
    validate_upload,
)

MAX = 2 * 1024 * 1024


class TestContactAndEnquiry:
    def test_empty_contact_is_accepted(self):
        result = validate_contact(ContactIn())
        assert isinstance(result, Accepted)
        assert result.value == {}

    def test_unknown_fields_are_dropped(self):
        payload = ContactIn.model_validate({"name": "Ravi", "isAdmin": True, "createdAt": "2001-01-01"})
        result = validate_contact(payload)
        assert result.value == {"name": "Ravi"}

    def test_numeric_phone_kept_as_text(self):
        payload = EnquiryIn.model_validate({"phone": 9876543210})
        result = validate_enquiry(payload)
        assert result.value == {"phone": "9876543210"}

    def test_boolean_field_kept_as_text(self):
        payload = ContactIn.model_validate({"name": True, "country": False})
        assert validate_contact(payload).value == {"name": "true", "country": "false"}


class TestUploadLimit:
    def test_limit_itself_is_allowed(self):
        assert isinstance(validate_upload(MAX, MAX), Accepted)

    def test_one_byte_over_is_rejected(self):
        assert isinstance(validate_upload(MAX + 1, MAX), Rejected)


class TestFeedback:
    def test_complete_payload_is_accepted(self, valid_feedback):
        result = validate_feedback(FeedbackIn.model_validate(valid_feedback))
        assert isinstance(result, Accepted)
        assert result.value["whatDidYouTry"] == ["Biryani", "Lassi"]

    @pytest.mark.parametrize(
        "field",
        ["name", "mobile", "overallExperience", "foodQuality", "serviceStaff", "whatsappUpdates"],
    )
    def test_missing_required_field(self, valid_feedback, field):
        del valid_feedback[field]
        assert isinstance(validate_feedback(FeedbackIn.model_validate(valid_feedback)), Rejected)

    def test_whitespace_counts_as_a_value(self, valid_feedback):
        valid_feedback["mobile"] = "   "
        valid_feedback["whatDidYouTry"] = ["Dosa", " "]
        assert isinstance(validate_feedback(FeedbackIn.model_validate(valid_feedback)), Accepted)

    def test_empty_string_is_missing(self, valid_feedback):
        valid_feedback["mobile"] = ""
        assert isinstance(validate_feedback(FeedbackIn.model_validate(valid_feedback)), Rejected)

    def test_scalar_values_become_text(self, valid_feedback):
        valid_feedback["mobile"] = 9876543210
        valid_feedback["whatDidYouTry"] = [7, True]
        result = validate_feedback(FeedbackIn.model_validate(valid_feedback))
        assert result.value["mobile"] == "9876543210"
        assert result.value["whatDidYouTry"] == ["7", "true"]

    @pytest.mark.parametrize("tried", [None, [], ["Dosa", ""]])
    def test_what_did_you_try_must_have_items(self, valid_feedback, tried):
        valid_feedback["whatDidYouTry"] = tried
        assert isinstance(validate_feedback(FeedbackIn.model_validate(valid_feedback)), Rejected)

    @pytest.mark.parametrize("number", ["", "12345", "12345678901", "98765x3210", "+919876543"])
    def test_whatsapp_number_checked_when_opted_in(self, valid_feedback, number):
        valid_feedback["whatsappNumber"] = number
        assert isinstance(validate_feedback(FeedbackIn.model_validate(valid_feedback)), Rejected)

    def test_whatsapp_number_ignored_when_not_opted_in(self, valid_feedback):
        valid_feedback["whatsappUpdates"] = "No"
        del valid_feedback["whatsappNumber"]
        result = validate_feedback(FeedbackIn.model_validate(valid_feedback))
        assert isinstance(result, Accepted)
        assert result.value["whatsappNumber"] == ""

    def test_all_problems_are_collected(self):
        result = validate_feedback(FeedbackIn(whatsappUpdates="Yes", whatsappNumber="1"))
        assert isinstance(result, Rejected)
        assert len(result.reasons) == 7

    def test_null_comments_stored_as_empty(self, valid_feedback):
        valid_feedback["comments"] = None
        result = validate_feedback(FeedbackIn.model_validate(valid_feedback))
        assert result.value["comments"] == ""


class TestUploadMessage:
    @pytest.mark.parametrize(
        "limit, text",
        [
            (2 * 1024 * 1024, "Max 2MB allowed."),
            (512 * 1024, "Max 512KB allowed."),
            (1000, "Max 1000 bytes allowed."),
        ],
    )
    def test_limit_is_rendered_in_readable_units(self, limit, text):
        assert UploadTooLarge(limit).reason == f"File too large. {text}"
