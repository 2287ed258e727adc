from abc import ABC, abstractmethod
from typing import Sequence, Tuple


class Metric(ABC):
    """
    A scalar validation score computed from predictions and ground truth labels.

    Higher is better for every metric; range() gives the bounds of the score.
    """

    @abstractmethod
    def score(self, predictions: Sequence, labels: Sequence) -> float:
        """
        Score index-aligned predictions against labels.

        Args:
            predictions: Predicted labels.
            labels: Ground truth labels, same length as predictions.

        Returns:
            The score.

        Raises:
            ValueError: If the sequences are empty or differ in length.
        """
        pass

    @abstractmethod
    def range(self) -> Tuple[float, float]:
        """Return the (min, max) possible score."""
        pass

    def __str__(self) -> str:
        return f"{self.__class__.__name__}"
