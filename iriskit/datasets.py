from sklearn import datasets as sk_datasets

from iriskit.ml.dataset import LabeledDataset

IRIS_FEATURES = ["sepal-length", "sepal-width", "petal-length", "petal-width"]


def load_iris() -> LabeledDataset:
    """
    The Iris flower dataset bundled with scikit-learn: 150 rows, 4 numeric
    features (cm), 3 classes of 50 rows each, labeled by species name.
    """
    iris = sk_datasets.load_iris()
    labels = [str(iris.target_names[target]) for target in iris.target]
    return LabeledDataset(X=iris.data, y=labels, feature_names=IRIS_FEATURES,
                          metadata={"source": "sklearn.datasets.load_iris"})
