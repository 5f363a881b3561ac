"""
Типы обучения и диспетчеризация функций потерь.

Полностью реализована только бинарная классификация (hinge loss).
Регрессия и оценка плотности оставлены как явные "not supported" варианты:
любое обращение к их функциям потерь завершается NotImplementedLearner.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .exceptions import NotImplementedLearner


class LearnerType(Enum):
    """Тип задачи; значение enum равно числовому learner_typeid."""
    BINARY_CLASSIFICATION = 0   # SVM_C
    REGRESSION = 1              # SVM_R
    DENSITY_ESTIMATION = 2      # SVM_DE


def hinge_loss(yy_hat: float) -> float:
    """Hinge loss: max(0, 1 - y·ŷ)"""
    if yy_hat < 1.0:
        return 1.0 - yy_hat
    return 0.0


def hinge_loss_gradient(yy_hat: float) -> float:
    """Субградиент hinge loss по отступу: 1 если y·ŷ < 1, иначе 0."""
    if yy_hat < 1.0:
        return 1.0
    return 0.0


class Learner:
    """Базовый вариант типа обучения."""
    learner_type: LearnerType
    supported = False

    def loss(self, yy_hat: float) -> float:
        raise NotImplementedLearner(f"{self.learner_type.name} is not supported by the DCD solver")

    def loss_gradient(self, yy_hat: float) -> float:
        raise NotImplementedLearner(f"{self.learner_type.name} is not supported by the DCD solver")


@dataclass
class BinaryClassification(Learner):
    """Двухклассовый SVM (SVM_C), метки {-1, +1}."""
    learner_type = LearnerType.BINARY_CLASSIFICATION
    supported = True

    def loss(self, yy_hat: float) -> float:
        return hinge_loss(yy_hat)

    def loss_gradient(self, yy_hat: float) -> float:
        return hinge_loss_gradient(yy_hat)


@dataclass
class Regression(Learner):
    """SVM регрессия (SVM_R) с ε-нечувствительной зоной. Не реализована."""
    epsilon: float = 0.1
    learner_type = LearnerType.REGRESSION


@dataclass
class DensityEstimation(Learner):
    """Оценка плотности (SVM_DE). Не реализована."""
    learner_type = LearnerType.DENSITY_ESTIMATION


_VARIANTS = {
    LearnerType.BINARY_CLASSIFICATION: BinaryClassification,
    LearnerType.REGRESSION: Regression,
    LearnerType.DENSITY_ESTIMATION: DensityEstimation,
}

_ALIASES = {
    "svm_c": LearnerType.BINARY_CLASSIFICATION,
    "svm_r": LearnerType.REGRESSION,
    "svm_de": LearnerType.DENSITY_ESTIMATION,
}


def resolve_learner(selector: Union[Learner, LearnerType, int, str]) -> Learner:
    """
    Приводит селектор типа обучения к экземпляру варианта.

    Args:
        selector: Экземпляр Learner, LearnerType, числовой id (0/1/2)
            или имя ("svm_c", "binary_classification", ...)

    Returns:
        Learner
    """
    if isinstance(selector, Learner):
        return selector
    if isinstance(selector, LearnerType):
        return _VARIANTS[selector]()
    if isinstance(selector, str):
        key = selector.lower()
        if key in _ALIASES:
            return _VARIANTS[_ALIASES[key]]()
        try:
            return _VARIANTS[LearnerType[key.upper()]]()
        except KeyError:
            raise ValueError(f"Unknown learner type: {selector!r}") from None
    try:
        return _VARIANTS[LearnerType(selector)]()
    except ValueError:
        raise ValueError(f"Unknown learner type id: {selector!r}") from None
