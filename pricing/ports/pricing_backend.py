"""
Pricing ports (interfaces).

A PricingTaskQueue accepts tasks from the dispatcher; a PricingBackend
is what a queue worker hands each task to.
"""
from abc import ABC, abstractmethod

from pricing.domain.pricing_task import PricingTask


class PricingTaskQueue(ABC):
    """Abstract queue of pricing tasks with at-least-once delivery."""

    @abstractmethod
    async def enqueue(self, task: PricingTask) -> None:
        """
        Enqueue a pricing task.

        Raises:
            DispatchFailedError: If the task could not be enqueued
        """
        pass


class PricingBackend(ABC):
    """Abstract pricer that eventually produces a line sub-total."""

    name = "abstract"

    @abstractmethod
    def submit(self, task: PricingTask) -> None:
        """
        Submit a task for pricing.

        Raises:
            DispatchFailedError: If the pricer could not be reached
        """
        pass
