"""Deterministic Feynman progress computation.

Pure functions with no external dependencies. The four steps form a fixed
linear sequence: explain -> review -> simplify -> analogize. Steps never move
backward and a step recorded as complete is never un-marked.
"""
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from app.domain.enums import FeynmanStep

STEP_ORDER: tuple[FeynmanStep, ...] = (
    FeynmanStep.EXPLAIN,
    FeynmanStep.REVIEW,
    FeynmanStep.SIMPLIFY,
    FeynmanStep.ANALOGIZE,
)

STEP_LABELS: dict[FeynmanStep, str] = {
    FeynmanStep.EXPLAIN: "Explain",
    FeynmanStep.REVIEW: "Review",
    FeynmanStep.SIMPLIFY: "Simplify",
    FeynmanStep.ANALOGIZE: "Analogize",
}

STEP_DESCRIPTIONS: dict[FeynmanStep, str] = {
    FeynmanStep.EXPLAIN: "Explain the concept as if you're teaching it to someone else",
    FeynmanStep.REVIEW: "Review your explanation and identify gaps or confusions",
    FeynmanStep.SIMPLIFY: "Simplify the explanation with plain language",
    FeynmanStep.ANALOGIZE: "Create analogies to make the concept more relatable",
}


class TaggedMessage(Protocol):
    """Anything carrying a step tag and an ordering key (MessageRecord, ORM row)."""

    id: int
    created_at: object
    feynman_step: FeynmanStep | str | None


@dataclass(frozen=True)
class FeynmanProgress:
    """Immutable progress snapshot for one session."""

    current_step: FeynmanStep = FeynmanStep.EXPLAIN
    steps_completed: tuple[FeynmanStep, ...] = field(default_factory=tuple)

    @property
    def all_complete(self) -> bool:
        return len(self.steps_completed) == len(STEP_ORDER)

    @property
    def percent(self) -> int:
        return min(100, round(len(self.steps_completed) / len(STEP_ORDER) * 100))

    def is_complete(self, step: FeynmanStep) -> bool:
        return step in self.steps_completed


def canonical_steps(steps: Iterable[FeynmanStep | str]) -> tuple[FeynmanStep, ...]:
    """Deduplicate step identifiers and sort them into teaching order."""
    seen = {FeynmanStep(s) for s in steps}
    return tuple(s for s in STEP_ORDER if s in seen)


def make_progress(
    current_step: FeynmanStep | str | None,
    steps_completed: Iterable[FeynmanStep | str] | None,
) -> FeynmanProgress:
    """Build a snapshot from persisted session fields (None = defaults)."""
    return FeynmanProgress(
        current_step=FeynmanStep(current_step) if current_step else FeynmanStep.EXPLAIN,
        steps_completed=canonical_steps(steps_completed or ()),
    )


def next_step(step: FeynmanStep) -> FeynmanStep | None:
    """Return the step after ``step``, or None at the end of the sequence."""
    index = STEP_ORDER.index(step)
    if index + 1 < len(STEP_ORDER):
        return STEP_ORDER[index + 1]
    return None


def advance_progress(progress: FeynmanProgress) -> FeynmanProgress:
    """Mark the current step complete and move to the next one.

    At the last step the current step stays put and every step is marked
    complete ("all complete").
    """
    following = next_step(progress.current_step)
    if following is None:
        return FeynmanProgress(current_step=progress.current_step, steps_completed=STEP_ORDER)

    return FeynmanProgress(
        current_step=following,
        steps_completed=canonical_steps((*progress.steps_completed, progress.current_step)),
    )


def recompute_from_transcript(
    messages: Iterable[TaggedMessage],
    fallback: FeynmanProgress | None = None,
) -> FeynmanProgress:
    """Derive progress from step-tagged messages.

    The most recently created tagged message names the candidate step; ties on
    ``created_at`` go to the higher id (later insert). The current step is the
    later of that candidate and ``fallback.current_step``, so a session never
    moves backward. Every tag seen in the transcript is marked complete, on top
    of whatever ``fallback`` already had complete. With no tagged messages the
    fallback is returned unchanged.

    Pure and idempotent: the same transcript always yields the same snapshot.
    """
    fallback = fallback or FeynmanProgress()
    tagged = [m for m in messages if m.feynman_step]
    if not tagged:
        return fallback

    latest = max(tagged, key=lambda m: (m.created_at, m.id))
    current = max(FeynmanStep(latest.feynman_step), fallback.current_step, key=STEP_ORDER.index)
    return FeynmanProgress(
        current_step=current,
        steps_completed=canonical_steps(
            (*fallback.steps_completed, *(m.feynman_step for m in tagged))
        ),
    )


def describe_steps(progress: FeynmanProgress) -> list[dict]:
    """Per-step view for progress bars: id, label, description, complete."""
    return [
        {
            "id": step.value,
            "label": STEP_LABELS[step],
            "description": STEP_DESCRIPTIONS[step],
            "complete": progress.is_complete(step),
        }
        for step in STEP_ORDER
    ]
