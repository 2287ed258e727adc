import copy
from abc import ABC, abstractmethod
from typing import List, Optional, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from iriskit.ml.dataset import LabeledDataset


class Transformer(ABC):
    """
    Abstract base class for transforms applied to the samples of a LabeledDataset.

    Transformers never modify the dataset they are given: process() builds a
    new dataset with the transformed samples, the same labels in the same
    order, and the transform recorded in metadata["transforms"]. If the
    transform raises, the input dataset is untouched.
    """

    def process(self, dataset: 'LabeledDataset') -> 'LabeledDataset':
        """
        Template method that validates the output and records the transform.

        Args:
            dataset: The dataset to transform (not modified)

        Returns:
            A new dataset with transformed samples and unchanged labels.

        Raises:
            ValueError: If the transform changes the number of rows.
        """
        from iriskit.ml.dataset import LabeledDataset

        samples = self._do_transform(dataset)
        if len(samples) != len(dataset):
            raise ValueError(
                f"{self} returned {len(samples)} rows for a dataset of {len(dataset)} rows"
            )

        metadata = copy.deepcopy(dataset.metadata)
        self._record_transform(metadata, **self._transform_info())
        return LabeledDataset(
            X=samples,
            y=dataset.y,
            feature_names=self._feature_names(dataset, samples),
            metadata=metadata,
        )

    @abstractmethod
    def _do_transform(self, dataset: 'LabeledDataset') -> np.ndarray:
        """
        Actual transform logic - implement this method in subclasses.

        Args:
            dataset: The dataset to read samples from (must not be modified)

        Returns:
            The transformed samples, one row per input row.
        """
        pass

    def _feature_names(self, dataset: 'LabeledDataset', samples: np.ndarray) -> Optional[List[str]]:
        """Column names of the output. Defaults to the input names when the width is unchanged."""
        if np.ndim(samples) == 2 and np.shape(samples)[1] == dataset.num_features:
            return list(dataset.feature_names)
        return None

    def _transform_info(self) -> dict:
        """Extra key-value pairs stored with the transform record."""
        return {}

    def _record_transform(self, metadata: dict, **kwargs) -> None:
        """
        Record transform information in dataset metadata.

        Args:
            metadata: The metadata dict of the new dataset
            **kwargs: Key-value pairs to store in the record
        """
        metadata.setdefault("transforms", [])
        metadata["transforms"].append({
            "transform": str(self),
            "timestamp": str(np.datetime64("now")),
            **kwargs,
        })

    def __str__(self) -> str:
        """Return a string representation of the transformer."""
        return f"{self.__class__.__name__}"


class Stateful(Transformer):
    """
    A transformer that must be fitted to data before it can transform.

    Applying an unfitted stateful transformer fits it to the dataset being
    transformed first; later applications reuse the fitted state, so a
    transform fitted on a training set can be applied to a testing set.
    """

    @abstractmethod
    def fit(self, dataset: 'LabeledDataset') -> None:
        pass

    @property
    @abstractmethod
    def fitted(self) -> bool:
        pass

    def process(self, dataset: 'LabeledDataset') -> 'LabeledDataset':
        if not self.fitted:
            self.fit(dataset)
        return super().process(dataset)
