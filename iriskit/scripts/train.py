"""
Iris flower classifier using k nearest neighbors.

Loads a labeled CSV dataset (the bundled Iris dataset when none is given),
holds out a testing set, trains KNearestNeighbors on the rest, and prints
example predictions and the accuracy. Optionally writes a JSON evaluation
report and a CSV of the testing set with its predictions.

    iriskit-train --dataset dataset.csv --label class -k 5 --report report.json
"""
import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from iriskit.config import TrainingConfig
from iriskit.datasets import load_iris
from iriskit.io.extractors import CSV
from iriskit.ml.dataset import LabeledDataset
from iriskit.ml.metrics import Accuracy
from iriskit.ml.reports import ConfusionMatrix, MulticlassBreakdown, Report
from iriskit.processing.pipeline import TransformPipeline
from iriskit.processing.transformers import NumericStringConverter
from iriskit.utils.json_logging import setup_logging
from iriskit.utils.paths import check_parent_dir_exists, resolve_data_path

logger = logging.getLogger(__name__)

BANNER = "\n".join([
    "╔═══════════════════════════════════════════════════════════════╗",
    "║                                                               ║",
    "║ Iris Flower Classifier using K Nearest Neighbors              ║",
    "║                                                               ║",
    "╚═══════════════════════════════════════════════════════════════╝",
])

NUM_EXAMPLE_PREDICTIONS = 3


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Train and evaluate a k nearest neighbors classifier.")
    parser.add_argument("--dataset", help="CSV file with a header row. Defaults to the bundled Iris dataset.")
    parser.add_argument("--features", help="Comma separated feature column names. Defaults to every column but the label.")
    parser.add_argument("--label", default="class", help="Label column name (default: class).")
    parser.add_argument("--delimiter", default=",")
    parser.add_argument("--enclosure", default='"')
    parser.add_argument("--config", help="JSON file with TrainingConfig settings.")
    parser.add_argument("-k", type=int, help="Number of neighbors.")
    parser.add_argument("--weighted", action="store_true", default=None, help="Weight votes by inverse distance.")
    parser.add_argument("--distance", help="Distance name (euclidean, manhattan, chebyshev, minkowski, cosine).")
    parser.add_argument("--test-size", type=int, help="Number of rows held out for testing.")
    parser.add_argument("--test-ratio", type=float, help="Fraction of rows held out for testing.")
    parser.add_argument("--stratified", action="store_true", default=None, help="Preserve class proportions.")
    parser.add_argument("--seed", type=int, help="Seed for shuffling.")
    parser.add_argument("--report", help="Write the evaluation report to this JSON file.")
    parser.add_argument("--predictions", help="Write the testing set and its predictions to this CSV file.")
    parser.add_argument("--json-logs", action="store_true", help="Log JSON records instead of plain text.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> TrainingConfig:
    """Load the configuration file, if any, and apply command line overrides."""
    config = TrainingConfig.from_json(args.config) if args.config else TrainingConfig()
    overrides = {
        "k": args.k,
        "weighted": args.weighted,
        "distance": args.distance,
        "test_size": args.test_size,
        "test_ratio": args.test_ratio,
        "stratified": args.stratified,
        "seed": args.seed,
    }
    return dataclasses.replace(config, **{key: value for key, value in overrides.items() if value is not None})


def load_dataset(args: argparse.Namespace) -> LabeledDataset:
    if args.dataset is None:
        logger.info("No dataset given, using the bundled Iris dataset")
        return load_iris()
    extractor = CSV(resolve_data_path(args.dataset), delimiter=args.delimiter, enclosure=args.enclosure)
    features = [name.strip() for name in args.features.split(",")] if args.features else None
    return LabeledDataset.from_iterator(extractor, features=features, label=args.label)


def run(config: TrainingConfig,
        dataset: LabeledDataset,
        report_path: Optional[Path] = None,
        predictions_path: Optional[Path] = None,
        out: Optional[TextIO] = None) -> Report:
    """
    Split, train, predict and score.

    Returns:
        Report with the accuracy, the multiclass breakdown and the confusion matrix.
    """
    out = out or sys.stdout
    dataset = dataset.apply(NumericStringConverter())

    split = config.make_splitter().split(dataset)
    logger.info("Split dataset into %d training and %d testing rows", len(split.train), len(split.test))

    pipeline = TransformPipeline(config.transforms)
    training = pipeline.apply(split.train)
    testing = pipeline.apply(split.test)

    estimator = config.make_estimator(show_progress=True)
    logger.info("Training %s", estimator)
    estimator.train(training)

    logger.info("Making predictions")
    predictions = estimator.predict(testing)

    print("Example predictions:", file=out)
    print(predictions[:NUM_EXAMPLE_PREDICTIONS], file=out)

    score = Accuracy().score(predictions, testing.labels)
    print(f"Accuracy: {score}", file=out)

    report = Report({
        "accuracy": score,
        "breakdown": MulticlassBreakdown().generate(predictions, testing.labels),
        "confusion_matrix": ConfusionMatrix().generate(predictions, testing.labels),
    })

    if report_path is not None:
        report.save_to(report_path)
        logger.info("Report saved to %s", report_path)
    if predictions_path is not None:
        CSV(predictions_path).export(testing, extra_columns={"prediction": predictions})
        logger.info("Predictions saved to %s", predictions_path)

    return report


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, json_format=args.json_logs)

    print(BANNER + "\n")
    try:
        config = build_config(args)
        for path in (args.report, args.predictions):
            if path is not None:
                check_parent_dir_exists(path)
        logger.info("Loading data into memory")
        dataset = load_dataset(args)
        run(config, dataset, report_path=args.report, predictions_path=args.predictions)
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
