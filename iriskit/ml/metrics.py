from typing import Sequence

from iriskit.abstract_interfaces.metric import Metric
from iriskit.utils.conversion import to_python


def check_aligned(predictions: Sequence, labels: Sequence) -> None:
    """
    Raises:
        ValueError: If the sequences are empty or differ in length.
    """
    if len(predictions) != len(labels):
        raise ValueError(
            f"Number of predictions and labels must be equal. Got {len(predictions)} predictions "
            f"and {len(labels)} labels"
        )
    if len(labels) == 0:
        raise ValueError("Cannot score an empty set of predictions")


class Accuracy(Metric):
    """Fraction of predictions that equal the index-aligned ground truth label."""

    def score(self, predictions: Sequence, labels: Sequence) -> float:
        check_aligned(predictions, labels)
        correct = sum(
            1 for predicted, actual in zip(predictions, labels)
            if to_python(predicted) == to_python(actual)
        )
        return correct / len(labels)

    def range(self):
        return 0.0, 1.0


def accuracy(predictions: Sequence, labels: Sequence) -> float:
    return Accuracy().score(predictions, labels)
