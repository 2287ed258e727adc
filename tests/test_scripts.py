import io
import json

import pytest

from iriskit.config import TrainingConfig
from iriskit.datasets import IRIS_FEATURES, load_iris
from iriskit.io.extractors import NDJSON
from iriskit.scripts import explore, train
from testing_utils import write_iris_csv


@pytest.fixture(autouse=True)
def restore_root_logger():
    import logging

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestTrain:
    """End-to-end tests of the train-and-evaluate run on the bundled Iris dataset."""

    def test_run_stratified(self, tmp_path):
        """Test that an 80/20 stratified run holds out 10 rows per class and writes its outputs."""
        out = io.StringIO()
        config = TrainingConfig(k=5, test_ratio=0.2, stratified=True, seed=0)
        report = train.run(config, load_iris(),
                           report_path=tmp_path / "report.json",
                           predictions_path=tmp_path / "predictions.csv",
                           out=out)

        matrix = report["confusion_matrix"]
        assert sum(sum(row.values()) for row in matrix.values()) == 30
        for label in ("setosa", "versicolor", "virginica"):
            assert sum(matrix[label].values()) == 10
        assert report["accuracy"] >= 0.85
        assert report["breakdown"]["overall"]["accuracy"] == report["accuracy"]

        printed = out.getvalue().splitlines()
        assert printed[0] == "Example predictions:"
        assert printed[2] == f"Accuracy: {report['accuracy']}"

        saved = json.loads((tmp_path / "report.json").read_text())
        assert saved["accuracy"] == report["accuracy"]

        lines = (tmp_path / "predictions.csv").read_text().splitlines()
        assert lines[0] == ",".join(IRIS_FEATURES + ["class", "prediction"])
        assert len(lines) == 31

    def test_run_is_deterministic_with_seed(self):
        """Test that a seeded run gives the same report twice."""
        config = TrainingConfig(test_size=10, seed=7)
        first = train.run(config, load_iris(), out=io.StringIO())
        second = train.run(config, load_iris(), out=io.StringIO())
        assert first == second
        assert first["breakdown"]["overall"]["support"] == 10

    def test_run_with_transforms(self):
        """Test that configured transforms run before training."""
        config = TrainingConfig(test_ratio=0.2, stratified=True, seed=0,
                                transforms=[{"ZScaleStandardizer": {}}, {"PrincipalComponentAnalysis": {}}])
        report = train.run(config, load_iris(), out=io.StringIO())
        assert report["accuracy"] >= 0.8

    def test_main_with_csv_dataset(self, tmp_path, capsys):
        """Test that main() trains on a CSV file and writes the report."""
        dataset_path = tmp_path / "dataset.csv"
        write_iris_csv(dataset_path, load_iris())

        exit_code = train.main(["--dataset", str(dataset_path), "-k", "3", "--test-size", "10", "--seed", "0",
                                "--report", str(tmp_path / "report.json")])

        assert exit_code == 0
        captured = capsys.readouterr()
        assert "Iris Flower Classifier using K Nearest Neighbors" in captured.out
        assert "Example predictions:" in captured.out
        assert "Accuracy: " in captured.out
        report = json.loads((tmp_path / "report.json").read_text())
        assert sum(sum(row.values()) for row in report["confusion_matrix"].values()) == 10

    def test_main_with_config_file(self, tmp_path, capsys):
        """Test that main() reads settings from a configuration file."""
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"k": 7, "distance": "manhattan", "test_ratio": 0.3, "seed": 1}))

        exit_code = train.main(["--config", str(config_path), "--stratified", "--report", str(tmp_path / "r.json")])

        assert exit_code == 0
        report = json.loads((tmp_path / "r.json").read_text())
        assert report["breakdown"]["overall"]["support"] == 45

    def test_main_missing_dataset(self, tmp_path):
        """Test that a missing dataset exits with status 1."""
        assert train.main(["--dataset", str(tmp_path / "missing.csv")]) == 1

    def test_main_bad_label_column(self, tmp_path):
        """Test that a missing label column exits with status 1."""
        dataset_path = tmp_path / "dataset.csv"
        write_iris_csv(dataset_path, load_iris(), label_column="species")
        assert train.main(["--dataset", str(dataset_path), "--label", "class"]) == 1

    def test_main_k_too_large(self, tmp_path):
        """Test that k larger than the training set exits with status 1."""
        dataset_path = tmp_path / "dataset.csv"
        write_iris_csv(dataset_path, load_iris().head(12))
        assert train.main(["--dataset", str(dataset_path), "-k", "5", "--test-size", "10"]) == 1

    @pytest.mark.parametrize("config", [
        {"transforms": [{"PrincipalComponentAnalysis": {"bogus": 1}}]},
        {"test_size": "ten"},
    ])
    def test_main_invalid_config(self, tmp_path, config):
        """Test that an invalid configuration file exits with status 1."""
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps(config))
        assert train.main(["--config", str(config_path)]) == 1

    def test_main_missing_report_directory(self, tmp_path):
        """Test that a report path in a missing directory exits with status 1."""
        assert train.main(["--report", str(tmp_path / "missing" / "report.json")]) == 1

    def test_build_config_overrides(self):
        """Test that command line options override the configuration."""
        args = train.parse_args(["-k", "3", "--weighted", "--test-ratio", "0.25"])
        config = train.build_config(args)
        assert config.k == 3
        assert config.weighted
        assert config.test_ratio == 0.25
        assert not config.stratified


class TestExplore:
    """End-to-end tests of the dataset exploration run."""

    def test_explore_writes_outputs(self, tmp_path, capsys):
        """Test that explore() writes the statistics and the three embeddings."""
        written = explore.explore(load_iris(), tmp_path)

        assert set(written) == {"stats", "pca", "lda", "svd"}
        stats = json.loads((tmp_path / "stats.json").read_text())
        assert list(stats.keys()) == IRIS_FEATURES
        assert stats["sepal-length"]["count"] == 150
        assert '"sepal-length"' in capsys.readouterr().out

        for name in ("pca", "lda", "svd"):
            lines = (tmp_path / f"{name}.csv").read_text().splitlines()
            assert lines[0] == f"{name}_0,{name}_1,class"
            assert len(lines) == 151

    def test_explore_by_label(self, tmp_path):
        """Test that explore() can describe each class separately."""
        explore.explore(load_iris(), tmp_path, by_label=True)
        stats = json.loads((tmp_path / "stats.json").read_text())
        assert list(stats.keys()) == ["setosa", "versicolor", "virginica"]
        assert stats["setosa"]["petal-length"]["count"] == 50

    def test_explore_missing_output_dir(self, tmp_path):
        """Test that a missing output directory raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            explore.explore(load_iris(), tmp_path / "missing")

    def test_main_with_ndjson_dataset(self, tmp_path):
        """Test that main() explores an NDJSON file."""
        dataset_path = tmp_path / "dataset.ndjson"
        NDJSON(dataset_path).export(load_iris())

        exit_code = explore.main(["--dataset", str(dataset_path), "--output-dir", str(tmp_path)])

        assert exit_code == 0
        for name in ("stats.json", "pca.csv", "lda.csv", "svd.csv"):
            assert (tmp_path / name).exists()

    def test_main_invalid_ndjson(self, tmp_path):
        """Test that an invalid NDJSON file exits with status 1."""
        dataset_path = tmp_path / "dataset.ndjson"
        dataset_path.write_text('{"a": 1.0, "class": "x"}\nnot json\n')
        assert explore.main(["--dataset", str(dataset_path), "--output-dir", str(tmp_path)]) == 1
