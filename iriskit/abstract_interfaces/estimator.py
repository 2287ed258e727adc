from abc import ABC, abstractmethod
from typing import Any, List, TYPE_CHECKING

if TYPE_CHECKING:
    from iriskit.ml.dataset import LabeledDataset


class Estimator(ABC):
    """
    Abstract base class for supervised learners.

    The lifecycle is train() then predict(). Calling predict() on an
    untrained estimator raises StateError.
    """

    @abstractmethod
    def train(self, dataset: 'LabeledDataset') -> None:
        """Learn from a labeled dataset."""
        pass

    @abstractmethod
    def predict(self, samples) -> List[Any]:
        """
        Predict a label for every sample.

        Args:
            samples: A dataset or a 2-D array-like of feature vectors.

        Returns:
            Predicted labels, index-aligned with the samples.
        """
        pass

    @property
    @abstractmethod
    def trained(self) -> bool:
        pass

    def __str__(self) -> str:
        return f"{self.__class__.__name__}"
