import logging
from typing import Any, Dict, List, Optional

import numpy as np
from tqdm import tqdm

from iriskit.abstract_interfaces.distance import Distance
from iriskit.abstract_interfaces.estimator import Estimator
from iriskit.exceptions import SchemaError, StateError
from iriskit.ml.dataset import LabeledDataset
from iriskit.ml.distances import Euclidean

logger = logging.getLogger(__name__)


class KNearestNeighbors(Estimator):
    """
    Classifies a sample by a vote among the k closest training samples.

    Training only stores the dataset; all the work happens at prediction
    time, where the distance from each query to every training sample is
    computed.

    Tie-breaking is deterministic:
      - Neighbors at equal distance are ranked by their index in the
        training set (earliest first).
      - When several labels have the same number of votes (or the same total
        weight), the winner is the one that appears first among the k
        neighbors ordered by increasing distance.
    """

    def __init__(self,
                 k: int = 5,
                 weighted: bool = False,
                 distance: Optional[Distance] = None,
                 batch_size: int = 256,
                 show_progress: bool = False):
        """
        Args:
            k: Number of neighbors that vote. Must be a positive integer.
            weighted: If True each vote counts 1 / (1 + distance) instead of 1.
            distance: Distance between feature vectors. Defaults to Euclidean.
            batch_size: Number of queries whose distances are computed at once.
            show_progress: Show a tqdm progress bar over query batches.
        """
        if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
            raise ValueError(f"k must be a positive integer, got {k!r}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be a positive integer, got {batch_size!r}")
        self.k = int(k)
        self.weighted = weighted
        self.distance = distance if distance is not None else Euclidean()
        self.batch_size = batch_size
        self.show_progress = show_progress

        self._samples: Optional[np.ndarray] = None
        self._labels: Optional[list] = None

    @property
    def trained(self) -> bool:
        return self._samples is not None

    def train(self, dataset: LabeledDataset) -> None:
        """
        Store the training samples and labels.

        Raises:
            ValueError: If the dataset is empty or has fewer than k samples.
            SchemaError: If the dataset has categorical feature columns.
        """
        if dataset.empty:
            raise ValueError("Cannot train on an empty dataset")
        if self.k > len(dataset):
            raise ValueError(f"k ({self.k}) exceeds the number of training samples ({len(dataset)})")

        self._samples = dataset.numeric_X()
        self._labels = dataset.labels
        logger.info("Trained %s on %d samples with %d features", self, len(dataset), dataset.num_features)

    def predict(self, samples) -> List[Any]:
        return [self._vote(neighbors)[0] for neighbors in self._nearest(samples)]

    def proba(self, samples) -> List[Dict[Any, float]]:
        """
        Estimate the probability of every training label for each sample.

        Returns:
            One dict per sample mapping each label seen in training (in
            first-seen order) to the fraction of the vote it received.
        """
        outcomes = list(dict.fromkeys(self._labels or []))
        probabilities = []
        for neighbors in self._nearest(samples):
            _, votes = self._vote(neighbors)
            total = sum(votes.values())
            probabilities.append({label: votes.get(label, 0.0) / total for label in outcomes})
        return probabilities

    def _nearest(self, samples):
        """Yield, for each query, its k nearest (index, distance) pairs ordered by increasing distance."""
        if not self.trained:
            raise StateError(f"{self} must be trained before making predictions")

        queries = samples.numeric_X() if isinstance(samples, LabeledDataset) else np.asarray(samples, dtype=np.float64)
        if queries.ndim != 2 or queries.shape[1] != self._samples.shape[1]:
            raise SchemaError(
                f"Expected queries with {self._samples.shape[1]} features, got array of shape {queries.shape}"
            )

        starts = range(0, len(queries), self.batch_size)
        for start in tqdm(starts, desc="Predicting", disable=not self.show_progress):
            distances = self.distance.pairwise(queries[start:start + self.batch_size], self._samples)
            # stable sort keeps training order for equal distances
            order = np.argsort(distances, axis=1, kind="stable")[:, :self.k]
            for row, indices in zip(distances, order):
                yield [(int(i), float(row[i])) for i in indices]

    def _vote(self, neighbors):
        votes: Dict[Any, float] = {}
        for index, distance in neighbors:
            label = self._labels[index]
            votes[label] = votes.get(label, 0.0) + (1.0 / (1.0 + distance) if self.weighted else 1.0)
        # max() keeps the first maximal key, i.e. the label seen first by increasing distance
        return max(votes, key=votes.get), votes

    def __str__(self) -> str:
        return f"KNearestNeighbors(k={self.k}, weighted={self.weighted}, distance={self.distance})"
