import copy
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np

from iriskit.exceptions import FormatError, SchemaError
from iriskit.utils.conversion import is_missing, is_number, to_python

if TYPE_CHECKING:
    from iriskit.abstract_interfaces.transformer import Transformer
    from iriskit.ml.reports import Report

CONTINUOUS = "continuous"
CATEGORICAL = "categorical"


@dataclass
class LabeledDataset:
    """
    In-memory container pairing feature vectors with labels.

    Datasets are never modified after construction: X and y are stored
    read-only and every operation below returns new datasets. If an
    operation fails the receiver is left exactly as it was.

    Attributes:
        X (np.ndarray): 2-D array of samples. float64 when every value is numeric,
            object otherwise (unconverted strings are categorical).
        y (np.ndarray): 1-D array of labels, index-aligned with X.
        feature_names (List[str]): Column names. Defaults to feature_0 .. feature_{n-1}.
        metadata (Dict[str, Any]): Free-form metadata. Transforms applied to the
            dataset are recorded under "transforms".
    """
    X: np.ndarray
    y: np.ndarray
    feature_names: List[str] = None
    metadata: Dict[str, Any] = field(default_factory=lambda: {"transforms": []})

    def __post_init__(self):
        """Validate shapes, normalise dtypes and freeze the arrays."""
        self.X = _as_samples(self.X)
        self.y = _as_labels(self.y)

        if self.y.ndim != 1:
            raise SchemaError(f"Labels must be a 1-D sequence, got shape {self.y.shape}")
        if len(self.X) != len(self.y):
            raise SchemaError(f"X and y must have same length. Got X: {len(self.X)}, y: {len(self.y)}")
        if any(is_missing(label) for label in self.y):
            raise FormatError("Labels must not contain missing values")

        if self.feature_names is None:
            self.feature_names = [f"feature_{i}" for i in range(self.X.shape[1])]
        else:
            self.feature_names = [str(name) for name in self.feature_names]
        if len(self.feature_names) != self.X.shape[1]:
            raise SchemaError(
                f"Got {len(self.feature_names)} feature names for {self.X.shape[1]} feature columns"
            )

        if self.metadata is None:
            self.metadata = {}
        self.metadata.setdefault("transforms", [])

        self.X.flags.writeable = False
        self.y.flags.writeable = False

    @classmethod
    def from_iterator(cls,
                      records: Iterable,
                      features: Optional[Sequence] = None,
                      label: Optional[Any] = None) -> 'LabeledDataset':
        """Build a dataset from records yielded by an extractor. See iriskit.io.readers.read_labeled."""
        from iriskit.io.readers import read_labeled
        return read_labeled(records, features=features, label=label)

    def __len__(self) -> int:
        return len(self.y)

    def __iter__(self) -> Iterator[Tuple[np.ndarray, Any]]:
        """Iterate over (feature vector, label) pairs."""
        return zip(self.X, self.labels)

    @property
    def labels(self) -> list:
        return [to_python(label) for label in self.y]

    @property
    def num_features(self) -> int:
        return self.X.shape[1]

    @property
    def empty(self) -> bool:
        return len(self) == 0

    def possible_outcomes(self) -> list:
        """Distinct labels in the order they first appear."""
        return list(dict.fromkeys(self.labels))

    def feature_types(self) -> List[str]:
        """Return 'continuous' or 'categorical' for every feature column."""
        if self.X.dtype == np.float64:
            return [CONTINUOUS] * self.num_features
        return [
            CONTINUOUS if all(is_number(value) for value in self.X[:, i]) else CATEGORICAL
            for i in range(self.num_features)
        ]

    def numeric_X(self) -> np.ndarray:
        """
        Return the samples as a float64 array.

        Raises:
            SchemaError: If any column still holds categorical values.
        """
        if self.X.dtype == np.float64:
            return self.X
        categorical = [
            name for name, kind in zip(self.feature_names, self.feature_types())
            if kind == CATEGORICAL
        ]
        if categorical:
            raise SchemaError(
                f"Columns {categorical} are categorical. Apply a NumericStringConverter first."
            )
        return self.X.astype(np.float64)

    def head(self, n: int = 10) -> 'LabeledDataset':
        if n < 0:
            raise ValueError(f"n must be non-negative, got {n}")
        return self._subset(np.arange(min(n, len(self))))

    def take(self, n: int) -> Tuple['LabeledDataset', 'LabeledDataset']:
        """
        Partition off the first n rows.

        Returns:
            Tuple of (the first n rows, the remaining rows).
        """
        if n < 0 or n > len(self):
            raise ValueError(f"Cannot take {n} rows from a dataset of {len(self)} rows")
        indices = np.arange(len(self))
        return self._subset(indices[:n]), self._subset(indices[n:])

    def randomize(self, seed: Optional[int] = None) -> 'LabeledDataset':
        """Return the rows permuted uniformly at random. Deterministic for a fixed seed."""
        order = np.random.default_rng(seed).permutation(len(self))
        return self._subset(order)

    def split(self, ratio: float = 0.5) -> Tuple['LabeledDataset', 'LabeledDataset']:
        """
        Split the dataset in order: the first round(ratio * n) rows go left.

        Args:
            ratio: Fraction of rows for the left partition, strictly between 0 and 1.

        Returns:
            Tuple of (left, right) datasets.
        """
        _check_ratio(ratio)
        if self.empty:
            raise ValueError("Cannot split an empty dataset")
        return self.take(int(round(ratio * len(self))))

    def stratified_split(self, ratio: float = 0.5) -> Tuple['LabeledDataset', 'LabeledDataset']:
        """
        Split the dataset so both partitions keep the per-class proportions.

        Each class contributes round(ratio * class_size) rows to the left
        partition and the rest to the right, so every class is within one row
        of the exact ratio. Rows keep their original order within a class and
        classes appear in first-seen order.

        Raises:
            ValueError: If the ratio is out of range, the dataset is empty, or
                any class has fewer than 2 members.
        """
        _check_ratio(ratio)
        if self.empty:
            raise ValueError("Cannot split an empty dataset")

        strata = self._indices_by_label()
        singletons = [label for label, indices in strata.items() if len(indices) < 2]
        if singletons:
            raise ValueError(f"Cannot stratify classes with fewer than 2 samples: {singletons}")

        left, right = [], []
        for label, indices in strata.items():
            n_left = int(round(ratio * len(indices)))
            if n_left in (0, len(indices)):
                warnings.warn(f"Class '{label}' is absent from one side of the stratified split.")
            left.extend(indices[:n_left])
            right.extend(indices[n_left:])

        return self._subset(np.array(left, dtype=int)), self._subset(np.array(right, dtype=int))

    def stratify(self) -> Dict[Any, 'LabeledDataset']:
        """Group the rows by label, in first-seen label order."""
        return {
            label: self._subset(np.array(indices, dtype=int))
            for label, indices in self._indices_by_label().items()
        }

    def merge(self, other: 'LabeledDataset') -> 'LabeledDataset':
        """Concatenate another dataset with the same number of features below this one."""
        if other.num_features != self.num_features:
            raise SchemaError(
                f"Cannot merge a dataset with {other.num_features} features into one with {self.num_features}"
            )
        return LabeledDataset(
            X=np.concatenate([self.X, other.X], axis=0),
            y=np.concatenate([self.y, other.y], axis=0),
            feature_names=list(self.feature_names),
            metadata=copy.deepcopy(self.metadata),
        )

    def apply(self, transformer: 'Transformer') -> 'LabeledDataset':
        """Return a new dataset with the transformer applied to the samples."""
        return transformer.process(self)

    def describe(self) -> 'Report':
        """Summary statistics per feature column, keyed by feature name."""
        from iriskit.ml.statistics import describe_columns
        return describe_columns(self.X, self.feature_names, self.feature_types())

    def describe_by_label(self) -> 'Report':
        """describe() computed separately for the rows of each label."""
        from iriskit.ml.reports import Report
        return Report({label: subset.describe() for label, subset in self.stratify().items()})

    def _indices_by_label(self) -> Dict[Any, List[int]]:
        strata: Dict[Any, List[int]] = {}
        for i, label in enumerate(self.labels):
            strata.setdefault(label, []).append(i)
        return strata

    def _subset(self, indices: np.ndarray) -> 'LabeledDataset':
        return LabeledDataset(
            X=self.X[indices],
            y=self.y[indices],
            feature_names=list(self.feature_names),
            metadata=copy.deepcopy(self.metadata),
        )


def _check_ratio(ratio: float) -> None:
    if not 0 < ratio < 1:
        raise ValueError(f"Ratio must be strictly between 0 and 1, got {ratio}")


def _as_samples(X) -> np.ndarray:
    """Copy X into a 2-D array: float64 when every value is numeric, object otherwise."""
    if isinstance(X, np.ndarray) and X.dtype.kind in "iuf":
        samples = X.astype(np.float64)
    elif isinstance(X, np.ndarray) and X.ndim == 2:
        samples = X.astype(object)
        if all(is_number(value) for value in samples.flat):
            samples = samples.astype(np.float64)
    else:
        rows = []
        for row in X:
            if isinstance(row, str) or np.ndim(row) != 1:
                raise SchemaError(f"Each feature vector must be a 1-D sequence, got {row!r}")
            rows.append(list(row))
        if len({len(row) for row in rows}) > 1:
            raise SchemaError("All feature vectors must have the same number of features")
        samples = np.empty((len(rows), len(rows[0]) if rows else 0), dtype=object)
        for i, row in enumerate(rows):
            samples[i, :] = row
        if all(is_number(value) for value in samples.flat):
            samples = samples.astype(np.float64)

    if samples.ndim != 2:
        raise SchemaError(f"Samples must be a 2-D array of feature vectors, got shape {samples.shape}")

    if samples.dtype == np.float64:
        missing = bool(np.isnan(samples).any())
    else:
        missing = any(is_missing(value) for value in samples.flat)
    if missing:
        raise FormatError("Feature vectors must not contain missing values")
    return samples


def _as_labels(y) -> np.ndarray:
    """Copy y into a 1-D array. Lists become object arrays so mixed label types are kept as given."""
    if isinstance(y, np.ndarray) and y.dtype != object:
        return y.copy()
    values = list(y)
    if any(np.ndim(value) != 0 for value in values):
        raise SchemaError("Labels must be a 1-D sequence of scalars")
    labels = np.empty(len(values), dtype=object)
    labels[:] = values
    return labels
