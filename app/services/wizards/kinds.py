"""Step tables for the four content wizards."""

from app.models.content_kind import ContentKind
from app.services.wizards.stepper import StepDescriptor


def _has_title(form) -> bool:
    return bool(form.title.strip())


def _has_positive_discount(form) -> bool:
    return form.discount_value > 0


def _has_message(form) -> bool:
    return bool(form.message.strip())


def _is_classified(form) -> bool:
    return form.urgency is not None and form.alert_category is not None


def _has_title_and_message(form) -> bool:
    return _has_title(form) and _has_message(form)


_SCHEDULE = ("start_date", "end_date", "priority", "show_on_homepage", "is_active")
_ANNOUNCEMENT_SCHEDULE = _SCHEDULE + ("dismissible",)

WIZARD_STEPS: dict[ContentKind, tuple[StepDescriptor, ...]] = {
    ContentKind.PROMOTION: (
        StepDescriptor("Basic Info", ("title", "description"), _has_title),
        StepDescriptor(
            "Discount",
            (
                "discount_type",
                "discount_value",
                "code",
                "min_purchase_amount",
                "max_discount_amount",
                "usage_limit",
            ),
            _has_positive_discount,
        ),
        StepDescriptor("Product Link", ("product_id",)),
        StepDescriptor("Schedule", _SCHEDULE),
    ),
    ContentKind.SEASONAL: (
        StepDescriptor("Basic Info", ("title", "subtitle", "icon"), _has_title),
        StepDescriptor("Message & Design", ("message", "background_color"), _has_message),
        StepDescriptor("Call to Action", ("link_text", "link_url")),
        StepDescriptor("Schedule", _ANNOUNCEMENT_SCHEDULE),
    ),
    ContentKind.INFO: (
        StepDescriptor("Information", ("title", "category", "importance"), _has_title),
        StepDescriptor("Content", ("message", "additional_details", "icon"), _has_message),
        StepDescriptor("Actions", ("link_text", "link_url", "contact_info")),
        StepDescriptor("Visibility", _ANNOUNCEMENT_SCHEDULE),
    ),
    ContentKind.ALERT: (
        StepDescriptor("Alert Type", ("urgency", "alert_category"), _is_classified),
        StepDescriptor(
            "Message", ("title", "message", "affected_areas", "icon"), _has_title_and_message
        ),
        StepDescriptor(
            "Action Required",
            ("action_required", "contact_info", "link_url", "link_text", "alternative_options"),
        ),
        StepDescriptor("Duration", _ANNOUNCEMENT_SCHEDULE),
    ),
}

KIND_LABELS: dict[ContentKind, str] = {
    ContentKind.PROMOTION: "Promotion",
    ContentKind.SEASONAL: "Seasonal",
    ContentKind.INFO: "Info",
    ContentKind.ALERT: "Alert",
}
