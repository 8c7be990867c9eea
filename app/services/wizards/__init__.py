from app.services.wizards.forms import (
    FORM_TYPES,
    AlertForm,
    AnnouncementForm,
    ContentForm,
    InfoForm,
    PromotionForm,
    SeasonalForm,
)
from app.services.wizards.kinds import KIND_LABELS, WIZARD_STEPS
from app.services.wizards.session import (
    DraftNotFoundError,
    DraftRegistry,
    WizardSession,
    draft_registry,
)
from app.services.wizards.stepper import LinearStepper, StepDescriptor, WizardStateError
from app.services.wizards.submit import SubmitOutcome, submit_wizard

__all__ = [
    "FORM_TYPES",
    "ContentForm",
    "PromotionForm",
    "AnnouncementForm",
    "SeasonalForm",
    "InfoForm",
    "AlertForm",
    "KIND_LABELS",
    "WIZARD_STEPS",
    "WizardSession",
    "DraftRegistry",
    "DraftNotFoundError",
    "draft_registry",
    "LinearStepper",
    "StepDescriptor",
    "WizardStateError",
    "SubmitOutcome",
    "submit_wizard",
]
