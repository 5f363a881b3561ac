"""
scikit-learn совместимая обёртка над DCD солвером.
"""

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils.multiclass import unique_labels
from sklearn.utils.validation import check_array, check_is_fitted, check_X_y

from .config import DCDConfig
from .dataset import Dataset
from .dcd_solver import train
from .learners import LearnerType


class LinearDCDSVC(ClassifierMixin, BaseEstimator):
    """
    Линейный бинарный SVM, обучаемый методом Dual Coordinate Descent.

    Верхние границы двойственных переменных: Cp = C·w_pos, Cn = C·w_neg,
    где w_pos, w_neg берутся из class_weight.

    Args:
        C: Параметр регуляризации
        class_weight: None, "balanced" или словарь {метка: вес}
        regularization: "l1" (hinge loss) или "l2" (squared hinge loss)
        max_epochs: Максимальное количество эпох
        tol: Порог сходимости по проекционному градиенту
        shuffle: "uniform" или "swap"
        random_state: Seed перестановок
        verbose: Выводить информацию о процессе обучения
    """

    def __init__(self, C=1.0, class_weight=None, regularization="l1",
                 max_epochs=1000, tol=1e-3, shuffle="uniform",
                 random_state=0, verbose=False):
        self.C = C
        self.class_weight = class_weight
        self.regularization = regularization
        self.max_epochs = max_epochs
        self.tol = tol
        self.shuffle = shuffle
        self.random_state = random_state
        self.verbose = verbose

    def _class_weights(self, y):
        neg, pos = self.classes_
        if self.class_weight is None:
            return 1.0, 1.0
        if self.class_weight == "balanced":
            n = len(y)
            return n / (2.0 * np.sum(y == neg)), n / (2.0 * np.sum(y == pos))
        return float(self.class_weight.get(neg, 1.0)), float(self.class_weight.get(pos, 1.0))

    def fit(self, X, y):
        X, y = check_X_y(X, y, dtype=np.float64)
        self.classes_ = unique_labels(y)
        if len(self.classes_) != 2:
            raise ValueError(
                f"LinearDCDSVC поддерживает только 2 класса, получено {len(self.classes_)}"
            )
        self.n_features_in_ = X.shape[1]

        w_neg, w_pos = self._class_weights(y)
        config = DCDConfig(
            Cp=self.C * w_pos,
            Cn=self.C * w_neg,
            regularization=self.regularization,
            n_epochs=self.max_epochs,
            accuracy=self.tol,
            seed=self.random_state,
            shuffle=self.shuffle,
            report_objective=True,
            verbose=self.verbose,
        )

        y_pm = np.where(y == self.classes_[1], 1.0, -1.0)
        model = train(LearnerType.BINARY_CLASSIFICATION, Dataset.from_samples(X, y_pm), config)

        self.coef_ = model.weights.reshape(1, -1)
        self.intercept_ = np.array([model.bias])
        self.alpha_ = model.alpha
        self.n_iter_ = model.n_epochs
        self.converged_ = model.converged
        self.n_support_vectors_ = model.n_support_vectors
        self.objective_value_ = model.objective_value
        return self

    def decision_function(self, X):
        check_is_fitted(self, "coef_")
        X = check_array(X, dtype=np.float64)
        return X @ self.coef_[0] + self.intercept_[0]

    def predict(self, X):
        scores = self.decision_function(X)
        return self.classes_[(scores >= 0.0).astype(int)]
