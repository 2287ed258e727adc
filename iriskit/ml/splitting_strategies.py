from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from iriskit.ml.dataset import LabeledDataset


@dataclass
class TrainTestSplit:
    """A container for disjoint train and test datasets."""
    train: LabeledDataset
    test: LabeledDataset


class DatasetSplitter(ABC):
    """
    Abstract base class for dataset splitting strategies.
    """
    @abstractmethod
    def split(self, dataset: LabeledDataset) -> TrainTestSplit:
        """
        Splits a dataset into training and testing sets.

        Args:
            dataset (LabeledDataset): The dataset to split.

        Returns:
            TrainTestSplit: An object containing the
            training and testing datasets.
        """
        pass


class RandomSplitter(DatasetSplitter):
    """
    Shuffles the rows, then puts the first train_ratio of them in the training set.
    """

    def __init__(self, train_ratio: float = 0.8, seed: Optional[int] = None):
        """
        Args:
            train_ratio: Proportion of rows for training, strictly between 0 and 1 (default 0.8)
            seed: Seed for the shuffle. None gives a different split every call.
        """
        if not 0 < train_ratio < 1:
            raise ValueError(f"train_ratio must be strictly between 0 and 1, got {train_ratio}")
        self.train_ratio = train_ratio
        self.seed = seed

    def split(self, dataset: LabeledDataset) -> TrainTestSplit:
        train, test = dataset.randomize(self.seed).split(self.train_ratio)
        return TrainTestSplit(train=train, test=test)


class StratifiedSplitter(RandomSplitter):
    """
    Shuffles the rows, then splits each class separately so both sets keep
    the class proportions of the full dataset (within one row per class).

    Every class needs at least 2 members.
    """

    def split(self, dataset: LabeledDataset) -> TrainTestSplit:
        train, test = dataset.randomize(self.seed).stratified_split(self.train_ratio)
        return TrainTestSplit(train=train, test=test)


class HoldoutSplitter(DatasetSplitter):
    """
    Shuffles the rows and holds out a fixed number of them for testing.
    """

    def __init__(self, test_size: int = 10, seed: Optional[int] = None):
        if test_size < 1:
            raise ValueError(f"test_size must be a positive integer, got {test_size}")
        self.test_size = test_size
        self.seed = seed

    def split(self, dataset: LabeledDataset) -> TrainTestSplit:
        if self.test_size >= len(dataset):
            raise ValueError(
                f"Cannot hold out {self.test_size} rows from a dataset of {len(dataset)} rows"
            )
        test, train = dataset.randomize(self.seed).take(self.test_size)
        return TrainTestSplit(train=train, test=test)
