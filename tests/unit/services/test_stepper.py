"""Unit tests for the linear stepper and the per-kind step tables."""

import pytest

from app.models.content_kind import ContentKind
from app.services.wizards import (
    KIND_LABELS,
    WIZARD_STEPS,
    AlertForm,
    InfoForm,
    LinearStepper,
    PromotionForm,
    SeasonalForm,
    StepDescriptor,
    WizardStateError,
)


def _steps(*gates):
    return [StepDescriptor(f"Step {i}", (), gate) for i, gate in enumerate(gates, start=1)]


class TestLinearStepper:
    def test_starts_on_step_one(self):
        stepper = LinearStepper(_steps(*[lambda _f: True] * 4))
        assert stepper.current == 1
        assert stepper.is_first
        assert stepper.total == 4

    def test_next_respects_gate(self):
        stepper = LinearStepper(_steps(lambda f: f["ok"], lambda _f: True))

        assert not stepper.next({"ok": False})
        assert stepper.current == 1
        assert stepper.next({"ok": True})
        assert stepper.current == 2

    def test_next_on_last_step_does_not_move(self):
        stepper = LinearStepper(_steps(lambda _f: True, lambda _f: True), current=2)

        assert not stepper.next({})
        assert stepper.is_last

    def test_previous_on_first_step_reports_false(self):
        stepper = LinearStepper(_steps(lambda _f: True))
        assert not stepper.previous()

    def test_previous_moves_back(self):
        stepper = LinearStepper(_steps(lambda _f: True, lambda _f: True), current=2)
        assert stepper.previous()
        assert stepper.current == 1

    def test_go_to_skips_gates(self):
        stepper = LinearStepper(_steps(lambda _f: False, lambda _f: False, lambda _f: False))
        stepper.go_to(3)
        assert stepper.current == 3

    @pytest.mark.parametrize("step", [0, 5])
    def test_go_to_out_of_range(self, step):
        stepper = LinearStepper(_steps(*[lambda _f: True] * 4))
        with pytest.raises(WizardStateError):
            stepper.go_to(step)

    def test_needs_steps(self):
        with pytest.raises(ValueError):
            LinearStepper([])


class TestWizardSteps:
    def test_every_kind_has_four_titled_steps(self):
        expected = {
            ContentKind.PROMOTION: ["Basic Info", "Discount", "Product Link", "Schedule"],
            ContentKind.SEASONAL: ["Basic Info", "Message & Design", "Call to Action", "Schedule"],
            ContentKind.INFO: ["Information", "Content", "Actions", "Visibility"],
            ContentKind.ALERT: ["Alert Type", "Message", "Action Required", "Duration"],
        }
        for kind, titles in expected.items():
            assert [step.title for step in WIZARD_STEPS[kind]] == titles
        assert set(KIND_LABELS) == set(ContentKind)

    def test_promotion_gates(self):
        steps = WIZARD_STEPS[ContentKind.PROMOTION]
        form = PromotionForm()
        assert not steps[0].can_advance(form)
        assert steps[0].can_advance(form.with_changes({"title": "Sale"}))
        assert not steps[1].can_advance(form)
        assert steps[1].can_advance(form.with_changes({"discount_value": 10}))
        assert steps[2].can_advance(form)
        assert steps[3].can_advance(form)

    def test_seasonal_gates(self):
        steps = WIZARD_STEPS[ContentKind.SEASONAL]
        form = SeasonalForm(title="Eid", message="")
        assert steps[0].can_advance(form)
        assert not steps[1].can_advance(form)
        assert steps[1].can_advance(form.with_changes({"message": "Happy Eid"}))

    def test_info_gates(self):
        steps = WIZARD_STEPS[ContentKind.INFO]
        form = InfoForm()
        assert not steps[0].can_advance(form)
        assert not steps[1].can_advance(form)
        assert steps[2].can_advance(form)

    def test_alert_gates(self):
        steps = WIZARD_STEPS[ContentKind.ALERT]
        form = AlertForm(urgency="warning")
        assert not steps[0].can_advance(form)
        assert steps[0].can_advance(form.with_changes({"alert_category": "service"}))

        form = AlertForm(title="Outage")
        assert not steps[1].can_advance(form)
        assert steps[1].can_advance(form.with_changes({"message": "Checkout is down"}))
        assert steps[2].can_advance(form)
        assert steps[3].can_advance(form)
