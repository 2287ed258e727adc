import inspect
import logging
from typing import Dict, List, Optional

from tqdm import tqdm

from iriskit.abstract_interfaces.transformer import Stateful, Transformer
from iriskit.ml.dataset import LabeledDataset

logger = logging.getLogger(__name__)


class TransformPipeline:
    """
    A pipeline that applies a sequence of transformers to a dataset.

    The pipeline is configured from a list of single-entry dictionaries that
    name the transformer classes to apply, in order, and their parameters.
    """

    def __init__(self, config: Optional[List[Dict[str, dict]]] = None):
        """
        Initialize the pipeline with a configuration.

        Args:
            config: List of {class name: parameter dict} entries.
                   If None or empty, creates an empty pipeline.

        Example:
            config = [
                {"NumericStringConverter": {}},
                {"PrincipalComponentAnalysis": {"n_components": 2}},
            ]
        """
        self.steps: List[Transformer] = []

        if config:
            self._configure_from_list(config)

    def apply(self, dataset: LabeledDataset) -> LabeledDataset:
        """
        Apply every transformer in order.

        Stateful transformers are fitted on the first dataset they see and
        reuse that fit afterwards, so apply the pipeline to the training set
        before the testing set.

        Args:
            dataset: The dataset to transform (not modified)

        Returns:
            The transformed dataset.
        """
        for step in tqdm(self.steps, desc="Applying transforms", disable=not self.steps):
            dataset = dataset.apply(step)
            logger.debug("Applied %s", step)
        return dataset

    @property
    def fitted(self) -> bool:
        return all(step.fitted for step in self.steps if isinstance(step, Stateful))

    def _configure_from_list(self, config: List[Dict[str, dict]]) -> None:
        """
        Configure the pipeline from a list specification.

        Args:
            config: List of {class name: parameter dict} entries

        Raises:
            ValueError: If an entry is malformed or names an unknown transformer
        """
        self.steps = []

        for entry in config:
            if not isinstance(entry, dict) or len(entry) != 1:
                raise ValueError(f"Each pipeline entry must be a single {{name: params}} dict, got {entry!r}")
            (step_name, step_params), = entry.items()
            step_class = self._get_transformer_class(step_name)
            if step_params is not None and not isinstance(step_params, dict):
                raise ValueError(f"Parameters for {step_name} must be a dict, got {step_params!r}")
            try:
                self.steps.append(step_class(**(step_params or {})))
            except TypeError as e:
                raise ValueError(f"Invalid parameters for {step_name}: {e}") from e

    def _get_transformer_class(self, step_name: str):
        """
        Get a Transformer subclass by name.

        Args:
            step_name: Name of the transformer class

        Returns:
            The Transformer subclass

        Raises:
            ValueError: If the transformer is unknown
        """
        available_steps = self._get_available_transformers()
        matching_classes = [cls for cls in available_steps if cls.__name__ == step_name]

        if len(matching_classes) == 0:
            available_names = [cls.__name__ for cls in available_steps]
            raise ValueError(f"Unknown transformer: '{step_name}'. Available transformers: {available_names}")
        return matching_classes[0]

    def _get_available_transformers(self):
        """
        Get all public concrete Transformer subclasses from the transformers module.
        """
        from iriskit.processing import transformers

        return [
            obj for name, obj in inspect.getmembers(transformers, inspect.isclass)
            if issubclass(obj, Transformer)
            and not inspect.isabstract(obj)
            and not name.startswith("_")
            and obj.__module__ == transformers.__name__
        ]
