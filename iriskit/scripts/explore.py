"""
Describe a labeled dataset and save 2-D embeddings of it.

Loads an NDJSON dataset (the bundled Iris dataset when none is given),
prints per-column statistics and saves them to stats.json, then saves PCA,
LDA and truncated SVD embeddings to pca.csv, lda.csv and svd.csv.

    iriskit-explore --dataset dataset.ndjson --output-dir out/
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from iriskit.datasets import load_iris
from iriskit.io.extractors import CSV, NDJSON
from iriskit.ml.dataset import LabeledDataset
from iriskit.processing.transformers import (
    LinearDiscriminantAnalysis,
    NumericStringConverter,
    PrincipalComponentAnalysis,
    TruncatedSVD,
)
from iriskit.utils.json_logging import setup_logging
from iriskit.utils.paths import resolve_data_path

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Describe a dataset and save low dimensional embeddings of it.")
    parser.add_argument("--dataset", help="NDJSON file. Defaults to the bundled Iris dataset.")
    parser.add_argument("--label", help="Label column name. Defaults to the last column.")
    parser.add_argument("--output-dir", default=".", help="Directory for stats.json and the embedding CSVs.")
    parser.add_argument("--components", type=int, default=2, help="Number of dimensions of each embedding.")
    parser.add_argument("--by-label", action="store_true", help="Also describe each class separately.")
    parser.add_argument("--json-logs", action="store_true", help="Log JSON records instead of plain text.")
    return parser.parse_args(argv)


def load_dataset(path: Optional[str], label: Optional[str] = None) -> LabeledDataset:
    if path is None:
        logger.info("No dataset given, using the bundled Iris dataset")
        return load_iris()
    return LabeledDataset.from_iterator(NDJSON(resolve_data_path(path)), label=label)


def explore(dataset: LabeledDataset,
            output_dir: Path,
            n_components: int = 2,
            by_label: bool = False) -> Dict[str, Path]:
    """
    Print and save the dataset statistics, then save one embedding per transform.

    Returns:
        Mapping of output name to the file written.
    """
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        raise FileNotFoundError(f"Output directory does not exist: {output_dir}")

    dataset = dataset.apply(NumericStringConverter())

    stats = dataset.describe_by_label() if by_label else dataset.describe()
    print(stats)

    written = {"stats": stats.save_to(output_dir / "stats.json")}
    logger.info("Stats saved to %s", written["stats"])

    embeddings = {
        "pca": PrincipalComponentAnalysis(n_components),
        "lda": LinearDiscriminantAnalysis(n_components),
        "svd": TruncatedSVD(n_components),
    }
    for name, transformer in embeddings.items():
        written[name] = CSV(output_dir / f"{name}.csv").export(dataset.apply(transformer))

    logger.info("Embeddings saved to %s", ", ".join(str(written[name]) for name in embeddings))
    return written


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(json_format=args.json_logs)

    try:
        logger.info("Loading data into memory")
        dataset = load_dataset(args.dataset, args.label)
        explore(dataset, Path(args.output_dir), n_components=args.components, by_label=args.by_label)
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
