"""Unit tests for wizard forms: defaults, validation and payloads."""

from datetime import UTC, date, datetime, timedelta

import pytest
from pydantic import ValidationError

from app.models.promotion import DiscountType
from app.services.wizards import AlertForm, InfoForm, PromotionForm, SeasonalForm
from app.services.wizards.forms import form_from_entity, today

from tests.helpers.mock_factories import make_mock_announcement, make_mock_promotion


class TestDefaults:
    def test_window_defaults_to_today_plus_thirty_days(self):
        form = PromotionForm()
        assert form.start_date == today()
        assert form.end_date == today() + timedelta(days=30)
        assert form.show_on_homepage
        assert form.is_active
        assert form.priority == 0

    def test_seasonal_defaults_to_purple(self):
        assert SeasonalForm().background_color.value == "from-purple-500 to-purple-600"


class TestFieldValidation:
    def test_title_max_length(self):
        with pytest.raises(ValidationError):
            PromotionForm(title="x" * 61)

    def test_priority_range(self):
        with pytest.raises(ValidationError):
            PromotionForm().with_changes({"priority": 11})

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValidationError):
            SeasonalForm().with_changes({"urgency": "critical"})

    @pytest.mark.parametrize(
        ("form_type", "limit"),
        [(SeasonalForm, 200), (InfoForm, 300), (AlertForm, 250)],
    )
    def test_message_caps_per_type(self, form_type, limit):
        form_type(message="x" * limit)
        with pytest.raises(ValidationError):
            form_type(message="x" * (limit + 1))

    def test_contact_info_max_length(self):
        with pytest.raises(ValidationError):
            InfoForm(contact_info="x" * 201)


class TestSubmitErrors:
    def test_promotion_needs_title_and_positive_discount(self):
        errors = PromotionForm().submit_errors()
        assert "Title is required" in errors
        assert "Discount value must be greater than 0" in errors

    def test_percentage_over_100(self):
        form = PromotionForm(title="Sale", discount_value=120)
        assert form.submit_errors() == ["Percentage discount cannot exceed 100"]

    def test_fixed_amount_may_exceed_100(self):
        form = PromotionForm(title="Sale", discount_type="fixed_amount", discount_value=5000)
        assert form.submit_errors() == []

    def test_end_before_start(self):
        form = InfoForm(
            title="Hours",
            message="Open late",
            start_date=date(2026, 5, 10),
            end_date=date(2026, 5, 1),
        )
        assert form.submit_errors() == ["End date must be on or after the start date"]

    def test_same_day_window_is_allowed(self):
        form = InfoForm(
            title="Hours", message="Open late", start_date=date(2026, 5, 1), end_date=date(2026, 5, 1)
        )
        assert form.submit_errors() == []

    def test_announcement_needs_message(self):
        assert "Message is required" in SeasonalForm(title="Eid").submit_errors()


class TestPayloads:
    def test_promotion_payload(self):
        form = PromotionForm(
            title=" Sale ",
            discount_type="percentage",
            discount_value=15,
            code=" spring ",
            max_discount_amount=0,
            start_date=date(2026, 5, 1),
            end_date=date(2026, 5, 31),
        )

        payload = form.to_payload()

        assert payload["title"] == "Sale"
        assert payload["code"] == "SPRING"
        assert payload["description"] is None
        assert payload["max_discount_amount"] is None
        assert payload["start_date"] == datetime(2026, 5, 1, tzinfo=UTC)
        assert payload["end_date"] == datetime(2026, 5, 31, 23, 59, 59, tzinfo=UTC)

    def test_cap_only_applies_to_percentage(self):
        form = PromotionForm(
            title="Sale", discount_type="fixed_amount", discount_value=500, max_discount_amount=100
        )
        assert form.to_payload()["max_discount_amount"] is None

        form = form.with_changes({"discount_type": "percentage", "discount_value": 10})
        assert form.to_payload()["max_discount_amount"] == 100

    def test_alert_payload_keeps_details_separate(self):
        form = AlertForm(
            title="Outage",
            message="Checkout is down",
            urgency="critical",
            alert_category="service",
            contact_info=" 0788 000 000 ",
        )

        payload = form.to_payload()

        assert payload["announcement_type"] == "alert"
        assert payload["details"]["urgency"] == "critical"
        assert payload["details"]["contact_info"] == "0788 000 000"
        assert payload["details"]["affected_areas"] is None
        assert "title" not in payload["details"]

    def test_seasonal_details(self):
        details = SeasonalForm(subtitle="", background_color="from-red-500 to-red-600").details_payload()
        assert details == {"subtitle": None, "background_color": "from-red-500 to-red-600"}


class TestPrefill:
    def test_from_promotion(self):
        promotion = make_mock_promotion(
            discount_type="fixed_amount",
            discount_value=500,
            code="RWF500",
            start_date=datetime(2026, 5, 1, tzinfo=UTC),
            end_date=datetime(2026, 5, 31, 23, 59, 59, tzinfo=UTC),
        )

        form = form_from_entity(promotion)

        assert isinstance(form, PromotionForm)
        assert form.discount_type == DiscountType.FIXED_AMOUNT
        assert form.code == "RWF500"
        assert form.start_date == date(2026, 5, 1)
        assert form.end_date == date(2026, 5, 31)

    def test_from_announcement_uses_its_type(self):
        announcement = make_mock_announcement(
            announcement_type="alert",
            details={"urgency": "warning", "alert_category": "maintenance"},
        )

        form = form_from_entity(announcement)

        assert isinstance(form, AlertForm)
        assert form.urgency.value == "warning"
        assert form.message == announcement.message
