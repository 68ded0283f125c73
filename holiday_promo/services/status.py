"""Enumerations describing the generation job lifecycle."""

from enum import Enum


class GenerationStatus(str, Enum):
    """Finite states of a generation job; terminal states never change again."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    def can_move_to(self, target: "GenerationStatus") -> bool:
        """Return ``True`` when ``target`` is a forward step from this status."""

        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: dict[GenerationStatus, frozenset[GenerationStatus]] = {
    GenerationStatus.PENDING: frozenset({GenerationStatus.PROCESSING}),
    GenerationStatus.PROCESSING: frozenset({GenerationStatus.COMPLETED, GenerationStatus.FAILED}),
    GenerationStatus.COMPLETED: frozenset(),
    GenerationStatus.FAILED: frozenset(),
}
