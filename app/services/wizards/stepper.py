"""Linear multi-step form state machine.

Every content wizard has the same shape: a fixed list of steps, each with a
gate that must hold before Next leaves it. The per-kind differences live
entirely in the step descriptors.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any


class WizardStateError(Exception):
    """Raised when a wizard is driven in a way its current state does not allow."""

    pass


def always(_form: Any) -> bool:
    return True


@dataclass(frozen=True)
class StepDescriptor:
    title: str
    fields: tuple[str, ...]
    can_advance: Callable[[Any], bool] = always


class LinearStepper:
    """Tracks the current step (1-based) over an ordered set of descriptors."""

    def __init__(self, steps: Sequence[StepDescriptor], current: int = 1):
        if not steps:
            raise ValueError("A stepper needs at least one step")
        self.steps = tuple(steps)
        self.current = 1
        self.go_to(current)

    @property
    def total(self) -> int:
        return len(self.steps)

    @property
    def step(self) -> StepDescriptor:
        return self.steps[self.current - 1]

    @property
    def is_first(self) -> bool:
        return self.current == 1

    @property
    def is_last(self) -> bool:
        return self.current == self.total

    def can_advance(self, form: Any) -> bool:
        return self.step.can_advance(form)

    def next(self, form: Any) -> bool:
        """Advance one step if the current step's gate holds. Returns whether it moved."""
        if self.is_last or not self.can_advance(form):
            return False
        self.current += 1
        return True

    def previous(self) -> bool:
        """Go back one step. Returns False on the first step, where the caller decides."""
        if self.is_first:
            return False
        self.current -= 1
        return True

    def go_to(self, step: int) -> None:
        """Jump straight to a step, as the step indicator allows. Gates are not checked."""
        if not 1 <= step <= self.total:
            raise WizardStateError(f"Step {step} does not exist (1-{self.total})")
        self.current = step
