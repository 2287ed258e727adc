from __future__ import annotations

from abc import abstractmethod
from typing import List, Optional

import numpy as np
from sklearn import decomposition, discriminant_analysis, preprocessing

from iriskit.abstract_interfaces.transformer import Stateful, Transformer
from iriskit.ml.dataset import LabeledDataset


class NumericStringConverter(Transformer):
    """
    Convert numeric strings in the samples to ints or floats.

    Strings that do not parse as numbers are left as they are, so a column
    with any such value stays categorical. Strings that parse to NaN are
    converted and then rejected as missing values by the dataset.
    """

    def _do_transform(self, dataset: LabeledDataset) -> np.ndarray:
        samples = np.empty(dataset.X.shape, dtype=object)
        for index, value in np.ndenumerate(dataset.X):
            samples[index] = self._convert(value)
        return samples

    @staticmethod
    def _convert(value):
        if not isinstance(value, str) or "_" in value:
            return value
        try:
            return int(value)
        except ValueError:
            pass
        try:
            return float(value)
        except ValueError:
            return value


class _SklearnTransformer(Stateful):
    """
    Stateful transformer backed by a scikit-learn estimator.

    Subclasses build the estimator in _make_estimator(). Output columns are
    named {prefix}_0 .. {prefix}_{n-1} unless the width is unchanged.
    """
    prefix: Optional[str] = None
    supervised = False

    def __init__(self):
        self._estimator = self._make_estimator()
        self._fitted = False

    @abstractmethod
    def _make_estimator(self):
        pass

    @property
    def fitted(self) -> bool:
        return self._fitted

    def fit(self, dataset: LabeledDataset) -> None:
        """
        Fit the underlying estimator to the dataset's samples (and labels, when supervised).

        Raises:
            SchemaError: If the dataset has categorical columns.
            ValueError: If the estimator rejects the data (e.g. too many components).
        """
        if dataset.empty:
            raise ValueError(f"Cannot fit {self} to an empty dataset")
        if self.supervised:
            self._estimator.fit(dataset.numeric_X(), dataset.labels)
        else:
            self._estimator.fit(dataset.numeric_X())
        self._fitted = True

    def _do_transform(self, dataset: LabeledDataset) -> np.ndarray:
        return self._estimator.transform(dataset.numeric_X())

    def _feature_names(self, dataset: LabeledDataset, samples: np.ndarray) -> Optional[List[str]]:
        if self.prefix is None:
            return super()._feature_names(dataset, samples)
        return [f"{self.prefix}_{i}" for i in range(samples.shape[1])]


class ZScaleStandardizer(_SklearnTransformer):
    """Center each column on zero mean and scale it to unit variance."""

    def __init__(self, center: bool = True):
        self.center = center
        super().__init__()

    def _make_estimator(self):
        return preprocessing.StandardScaler(with_mean=self.center)


class PrincipalComponentAnalysis(_SklearnTransformer):
    """Project the samples onto their first n principal components."""
    prefix = "pca"

    def __init__(self, n_components: int = 2):
        self.n_components = n_components
        super().__init__()

    def _make_estimator(self):
        return decomposition.PCA(n_components=self.n_components)

    def _transform_info(self) -> dict:
        return {"explained_variance_ratio": self._estimator.explained_variance_ratio_.tolist()}

    def __str__(self) -> str:
        return f"PrincipalComponentAnalysis(n_components={self.n_components})"


class LinearDiscriminantAnalysis(_SklearnTransformer):
    """
    Project the samples onto the n directions that best separate the classes.

    n_components cannot exceed min(number of classes - 1, number of features).
    """
    prefix = "lda"
    supervised = True

    def __init__(self, n_components: int = 2):
        self.n_components = n_components
        super().__init__()

    def _make_estimator(self):
        return discriminant_analysis.LinearDiscriminantAnalysis(n_components=self.n_components)

    def _transform_info(self) -> dict:
        return {"explained_variance_ratio": self._estimator.explained_variance_ratio_.tolist()}

    def __str__(self) -> str:
        return f"LinearDiscriminantAnalysis(n_components={self.n_components})"


class TruncatedSVD(_SklearnTransformer):
    """Reduce the samples to n dimensions with a truncated singular value decomposition (no centering)."""
    prefix = "svd"

    def __init__(self, n_components: int = 2, seed: Optional[int] = 0):
        self.n_components = n_components
        self.seed = seed
        super().__init__()

    def _make_estimator(self):
        return decomposition.TruncatedSVD(n_components=self.n_components, random_state=self.seed)

    def _transform_info(self) -> dict:
        return {"explained_variance_ratio": self._estimator.explained_variance_ratio_.tolist()}

    def __str__(self) -> str:
        return f"TruncatedSVD(n_components={self.n_components})"
