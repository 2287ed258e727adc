import json
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from iriskit.abstract_interfaces.report_generator import ReportGenerator
from iriskit.io.persisters import Filesystem
from iriskit.ml.metrics import check_aligned
from iriskit.utils.conversion import to_python


class Report(dict):
    """
    An insertion-ordered mapping of report entries that prints as indented JSON.

    Nested values may be plain dicts, lists, or other Reports.
    """

    def to_json(self, indent: int = 4) -> str:
        return json.dumps(self, indent=indent, default=to_python)

    def save_to(self, path: Union[str, Path], overwrite: bool = True) -> Path:
        """
        Write the report as JSON to path.

        Raises:
            FileExistsError: If overwrite is False and the file exists.
            OSError: If the file cannot be written.
        """
        return Filesystem(path, overwrite=overwrite).save(self.to_json())

    def __str__(self) -> str:
        return self.to_json()


def _label_order(predictions: Sequence, labels: Sequence) -> List[Any]:
    """Union of labels in first-seen order: ground truth first, then predictions."""
    return list(dict.fromkeys([to_python(label) for label in labels] + [to_python(p) for p in predictions]))


class ConfusionMatrix(ReportGenerator):
    """
    Counts of (true label, predicted label) pairs.

    The report is a square mapping {true_label: {predicted_label: count}} that
    covers every label seen in either sequence, so row sums give the support
    of each true label and column sums the number of times each label was predicted.
    """

    def generate(self, predictions: Sequence, labels: Sequence) -> Report:
        check_aligned(predictions, labels)
        classes = _label_order(predictions, labels)
        matrix = Report({actual: {predicted: 0 for predicted in classes} for actual in classes})
        for predicted, actual in zip(predictions, labels):
            matrix[to_python(actual)][to_python(predicted)] += 1
        return matrix


class MulticlassBreakdown(ReportGenerator):
    """
    Per-class precision, recall, F1 and support, with macro and micro averages.

    Any ratio with a zero denominator is reported as 0.0.
    """

    def generate(self, predictions: Sequence, labels: Sequence) -> Report:
        matrix = ConfusionMatrix().generate(predictions, labels)
        classes = list(matrix.keys())
        total = len(labels)

        predicted_counts = Counter(to_python(p) for p in predictions)

        per_class: Dict[Any, Dict[str, Any]] = {}
        tp_sum = fp_sum = fn_sum = 0
        for label in classes:
            tp = matrix[label][label]
            support = sum(matrix[label].values())
            fp = predicted_counts[label] - tp
            fn = support - tp
            tp_sum, fp_sum, fn_sum = tp_sum + tp, fp_sum + fp, fn_sum + fn

            precision = _safe_divide(tp, tp + fp)
            recall = _safe_divide(tp, tp + fn)
            per_class[label] = {
                "precision": precision,
                "recall": recall,
                "f1_score": _f1(precision, recall),
                "support": support,
                "true_positives": tp,
                "false_positives": fp,
                "false_negatives": fn,
                "true_negatives": total - tp - fp - fn,
            }

        macro = {
            metric: _safe_divide(sum(stats[metric] for stats in per_class.values()), len(per_class))
            for metric in ("precision", "recall", "f1_score")
        }
        micro_precision = _safe_divide(tp_sum, tp_sum + fp_sum)
        micro_recall = _safe_divide(tp_sum, tp_sum + fn_sum)
        micro = {
            "precision": micro_precision,
            "recall": micro_recall,
            "f1_score": _f1(micro_precision, micro_recall),
        }

        return Report({
            "overall": {
                "accuracy": _safe_divide(tp_sum, total),
                "macro": macro,
                "micro": micro,
                "support": total,
                "num_classes": len(classes),
            },
            "classes": per_class,
        })


def _safe_divide(numerator: float, denominator: float) -> float:
    return float(numerator) / denominator if denominator else 0.0


def _f1(precision: float, recall: float) -> float:
    return _safe_divide(2 * precision * recall, precision + recall)
