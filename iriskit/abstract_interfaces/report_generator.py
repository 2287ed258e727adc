from abc import ABC, abstractmethod
from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from iriskit.ml.reports import Report


class ReportGenerator(ABC):
    """
    Produces a structured evaluation report from predictions and ground truth labels.
    """

    @abstractmethod
    def generate(self, predictions: Sequence, labels: Sequence) -> 'Report':
        """
        Build the report.

        Raises:
            ValueError: If the sequences are empty or differ in length.
        """
        pass
