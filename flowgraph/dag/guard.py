"""
Iteration Guard

Bounded-loop counter for traversals over untrusted graph input.
Each guard is scoped to the single call that creates it.
"""

import logging

logger = logging.getLogger(__name__)


class IterationGuard:
    """
    Counts loop iterations and reports when a ceiling is surpassed.

    Example usage:
        guard = IterationGuard(1e4, label="regions")
        while frontier:
            if guard.tick():
                break
            ...

        if guard.exceeded:
            # result is partial
    """

    def __init__(self, max_iterations: float = 1e4, label: str = "traversal"):
        """
        Initialize guard.

        Args:
            max_iterations: Ceiling; tick() reports exceeded once count > ceiling
            label: Name used in the warning emitted on the first overrun
        """
        if max_iterations < 0:
            raise ValueError(f"max_iterations must be non-negative, got {max_iterations}")

        self.max_iterations = max_iterations
        self.label = label
        self.count = 0
        self.exceeded = False

    def tick(self) -> bool:
        """
        Count one iteration.

        Returns:
            True if the ceiling has been surpassed, False otherwise
        """
        self.count += 1
        if self.count > self.max_iterations:
            if not self.exceeded:
                logger.warning(
                    f"Iteration ceiling reached for {self.label}: "
                    f"{self.count} > {self.max_iterations:g}"
                )
            self.exceeded = True
            return True
        return False

    def __repr__(self) -> str:
        return (
            f"IterationGuard(label={self.label!r}, count={self.count}, "
            f"max_iterations={self.max_iterations:g}, exceeded={self.exceeded})"
        )
