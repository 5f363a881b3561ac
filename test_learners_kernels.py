"""
Тесты для вспомогательных модулей DCD солвера:
функции потерь, типы обучения, ядра, конфигурация, формат выборки.
"""

import math

import numpy as np

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dcdsvm import (
    BinaryClassification,
    Dataset,
    DCDConfig,
    DensityEstimation,
    GaussianKernel,
    InvalidConfiguration,
    LearnerType,
    LinearKernel,
    NotImplementedLearner,
    Regression,
    Regularization,
    ShuffleMode,
    hinge_loss,
    hinge_loss_gradient,
    resolve_learner,
)


# =============================================================================
# Функции потерь и типы обучения
# =============================================================================

def test_hinge_loss():
    assert hinge_loss(2.0) == 0.0
    assert hinge_loss(1.0) == 0.0
    assert hinge_loss(0.25) == 0.75
    assert hinge_loss(-1.0) == 2.0

    assert hinge_loss_gradient(0.999) == 1.0
    assert hinge_loss_gradient(1.0) == 0.0
    assert hinge_loss_gradient(5.0) == 0.0


def test_binary_classification_dispatch():
    learner = resolve_learner(LearnerType.BINARY_CLASSIFICATION)
    assert isinstance(learner, BinaryClassification)
    assert learner.supported
    assert learner.loss(-0.5) == 1.5
    assert learner.loss_gradient(-0.5) == 1.0


def test_unsupported_learners_fail_fast():
    """Регрессия и оценка плотности не возвращают вырожденных значений."""
    for learner in [Regression(epsilon=0.5), DensityEstimation()]:
        assert not learner.supported
        for method in (learner.loss, learner.loss_gradient):
            try:
                method(0.5)
                assert False, f"{learner} should raise NotImplementedLearner"
            except NotImplementedLearner:
                pass

    assert Regression(epsilon=0.5).epsilon == 0.5
    assert issubclass(NotImplementedLearner, NotImplementedError)


def test_resolve_learner_selectors():
    cases = {
        0: LearnerType.BINARY_CLASSIFICATION,
        1: LearnerType.REGRESSION,
        2: LearnerType.DENSITY_ESTIMATION,
        "svm_c": LearnerType.BINARY_CLASSIFICATION,
        "SVM_R": LearnerType.REGRESSION,
        "density_estimation": LearnerType.DENSITY_ESTIMATION,
        LearnerType.REGRESSION: LearnerType.REGRESSION,
    }
    for selector, expected in cases.items():
        learner = resolve_learner(selector)
        assert learner.learner_type == expected, f"{selector!r}: got {learner.learner_type}"

    instance = BinaryClassification()
    assert resolve_learner(instance) is instance

    for bad in [3, "svm_x"]:
        try:
            resolve_learner(bad)
            assert False, f"Should reject {bad!r}"
        except ValueError:
            pass


# =============================================================================
# Ядра
# =============================================================================

def test_linear_kernel():
    a = np.array([1.0, 2.0, 3.0, 100.0])
    b = np.array([4.0, -1.0, 0.5, 100.0])
    kernel = LinearKernel()

    assert kernel.is_linear
    # Учитываются только первые n_features компонент (строка меток отбрасывается)
    assert abs(kernel.eval(a, b, 3) - 3.5) < 1e-12
    assert kernel.eval(a, b, 0) == 0.0


def test_gaussian_kernel():
    kernel = GaussianKernel(sigma=2.0)
    a = np.array([1.0, 0.0, 7.0])
    b = np.array([0.0, 1.0, -7.0])

    assert not kernel.is_linear
    assert abs(kernel.eval(a, a, 2) - 1.0) < 1e-12
    assert abs(kernel.eval(a, b, 2) - math.exp(-2.0 / 8.0)) < 1e-9

    try:
        GaussianKernel(sigma=0.0)
        assert False, "sigma <= 0 should be rejected"
    except ValueError:
        pass


# =============================================================================
# Конфигурация
# =============================================================================

def test_config_defaults_and_bounds():
    config = DCDConfig()
    config.validate()
    assert config.regularization == Regularization.L1
    assert config.shuffle == ShuffleMode.UNIFORM
    assert config.bounds() == (0.0, 0.0, 1.0, 1.0)

    config = DCDConfig(Cp=4.0, Cn=0.25, regularization="L2")
    config.validate()
    assert config.regularization == Regularization.L2
    diag_p, diag_n, upper_p, upper_n = config.bounds()
    assert diag_p == 0.125 and diag_n == 2.0
    assert math.isinf(upper_p) and math.isinf(upper_n)


def test_config_from_dict():
    CONFIG = {
        "Cp": 3.0,
        "Cn": 1.5,
        "regularization": "l2",
        "n_epochs": 50,
        "accuracy": 1e-4,
        "shuffle": "swap",
        "experiment_name": "ignored",
    }
    config = DCDConfig.from_dict(CONFIG)
    assert config.Cp == 3.0 and config.Cn == 1.5
    assert config.regularization == Regularization.L2
    assert config.shuffle == ShuffleMode.SWAP
    assert config.n_epochs == 50

    try:
        DCDConfig.from_dict({"Cp": 0.0})
        assert False, "Cp = 0 should be rejected"
    except InvalidConfiguration:
        pass


# =============================================================================
# Формат выборки
# =============================================================================

def test_dataset_from_samples():
    X = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    y = np.array([1, 0, -2])
    dataset = Dataset.from_samples(X, y)

    assert dataset.matrix().shape == (3, 3)
    assert dataset.n_samples == 3
    assert dataset.n_features == 2
    assert np.array_equal(dataset.features, X)
    assert np.array_equal(dataset.labels, [1.0, -1.0, -1.0])
    # Столбец = пример, последняя строка = метка
    assert np.array_equal(dataset.matrix()[:, 1], [3.0, 4.0, 0.0])


def test_dataset_aliases_float64_matrix():
    matrix = np.array([[1.0, 2.0], [1.0, -1.0]])
    assert Dataset(matrix).matrix() is matrix


def test_dataset_validation():
    for bad in [np.zeros(3), np.zeros((0, 3)), np.zeros((2, 0))]:
        try:
            Dataset(bad)
            assert False, f"Should reject shape {bad.shape}"
        except ValueError:
            pass

    try:
        Dataset.from_samples(np.zeros((3, 2)), np.zeros(4))
        assert False, "Mismatched X and y should be rejected"
    except ValueError:
        pass

    # Только строка меток: модель из одного смещения
    assert Dataset(np.array([[1.0, -1.0]])).n_features == 0


if __name__ == "__main__":
    tests = [obj for name, obj in sorted(globals().items()) if name.startswith("test_")]
    for test_func in tests:
        test_func()
        print(f"[PASS] {test_func.__name__}")
    print(f"\nTotal: {len(tests)} passed")
