import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from iriskit.ml.distances import get_distance
from iriskit.ml.knn import KNearestNeighbors
from iriskit.ml.splitting_strategies import (
    DatasetSplitter,
    HoldoutSplitter,
    RandomSplitter,
    StratifiedSplitter,
)
from iriskit.utils.paths import check_file_exists


@dataclass
class TrainingConfig:
    """
    Settings for a train-and-evaluate run.

    The testing set is either a fixed number of rows (test_size) or a
    fraction of the dataset (test_ratio, which takes precedence when set).
    Stratification needs a ratio.

    Attributes:
        k: Number of neighbors.
        weighted: Weight votes by inverse distance.
        distance: Distance name, see iriskit.ml.distances.DISTANCES.
        distance_params: Keyword arguments for the distance, e.g. {"p": 3}.
        test_size: Number of rows held out for testing.
        test_ratio: Fraction of rows held out for testing.
        stratified: Preserve class proportions in the split.
        seed: Seed for shuffling. None gives a different split every run.
        transforms: TransformPipeline configuration applied after numeric conversion.
    """
    k: int = 5
    weighted: bool = False
    distance: str = "euclidean"
    distance_params: Dict[str, Any] = field(default_factory=dict)
    test_size: int = 10
    test_ratio: Optional[float] = None
    stratified: bool = False
    seed: Optional[int] = None
    transforms: List[Dict[str, dict]] = field(default_factory=list)

    def __post_init__(self):
        if not _is_int(self.k) or self.k < 1:
            raise ValueError(f"k must be a positive integer, got {self.k!r}")
        if not isinstance(self.weighted, bool):
            raise ValueError(f"weighted must be true or false, got {self.weighted!r}")
        if not isinstance(self.distance, str):
            raise ValueError(f"distance must be a name, got {self.distance!r}")
        if not isinstance(self.distance_params, dict):
            raise ValueError(f"distance_params must be a dict, got {self.distance_params!r}")
        if not _is_int(self.test_size):
            raise ValueError(f"test_size must be a positive integer, got {self.test_size!r}")
        if self.test_ratio is not None:
            if isinstance(self.test_ratio, bool) or not isinstance(self.test_ratio, (int, float)):
                raise ValueError(f"test_ratio must be a number, got {self.test_ratio!r}")
            if not 0 < self.test_ratio < 1:
                raise ValueError(f"test_ratio must be strictly between 0 and 1, got {self.test_ratio}")
        elif self.test_size < 1:
            raise ValueError(f"test_size must be a positive integer, got {self.test_size}")
        if not isinstance(self.stratified, bool):
            raise ValueError(f"stratified must be true or false, got {self.stratified!r}")
        if self.stratified and self.test_ratio is None:
            raise ValueError("A stratified split needs test_ratio to be set")
        if self.seed is not None and not _is_int(self.seed):
            raise ValueError(f"seed must be an integer, got {self.seed!r}")
        if not isinstance(self.transforms, list):
            raise ValueError(f"transforms must be a list of {{name: params}} entries, got {self.transforms!r}")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'TrainingConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}. Known keys: {sorted(known)}")
        return cls(**config)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'TrainingConfig':
        check_file_exists(path)
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
        if not isinstance(config, dict):
            raise ValueError(f"Configuration file {path} must contain a JSON object")
        return cls.from_dict(config)

    def make_splitter(self) -> DatasetSplitter:
        if self.test_ratio is None:
            return HoldoutSplitter(test_size=self.test_size, seed=self.seed)
        if self.stratified:
            return StratifiedSplitter(train_ratio=1 - self.test_ratio, seed=self.seed)
        return RandomSplitter(train_ratio=1 - self.test_ratio, seed=self.seed)

    def make_estimator(self, show_progress: bool = False) -> KNearestNeighbors:
        return KNearestNeighbors(
            k=self.k,
            weighted=self.weighted,
            distance=get_distance(self.distance, **self.distance_params),
            show_progress=show_progress,
        )


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
