"""
Конфигурация DCD солвера.

Параметры: границы Cp, Cn, вариант regularization, лимиты n_epochs и n_iter,
порог accuracy, а также seed и флаги диагностики.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping

from .exceptions import InvalidConfiguration


class Regularization(str, Enum):
    """Вариант SVM: L1 (box constraints) или L2 (диагональный сдвиг 1/(2C))."""
    L1 = "l1"
    L2 = "l2"


class ShuffleMode(str, Enum):
    """Способ перестановки индексов в начале каждой эпохи."""
    UNIFORM = "uniform"   # несмещённая перестановка (Fisher-Yates)
    SWAP = "swap"         # обмен order[i] <-> order[rand() % n] для каждого i


def _as_enum(enum_cls, value, what: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        raise InvalidConfiguration(f"Unknown {what}: {value!r}") from None


@dataclass
class DCDConfig:
    """
    Параметры обучения.

    Args:
        Cp: Верхняя граница α_i для положительного класса
        Cn: Верхняя граница α_i для отрицательного класса
        regularization: L1-SVM или L2-SVM
        n_epochs: Максимальное число эпох; если <= 0, используется n_iter
        n_iter: Число шагов единственного прохода (только при n_epochs <= 0)
        accuracy: Порог сходимости по разбросу проекционного градиента
        seed: Seed генератора перестановок
        shuffle: Режим перестановки ("uniform" или "swap")
        report_objective: Вычислить значение целевой функции и число SV
        verbose: Выводить информацию о процессе обучения
    """
    Cp: float = 1.0
    Cn: float = 1.0
    regularization: Regularization = Regularization.L1
    n_epochs: int = 100
    n_iter: int = 0
    accuracy: float = 1e-3
    seed: int = 0
    shuffle: ShuffleMode = ShuffleMode.UNIFORM
    report_objective: bool = False
    verbose: bool = False

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> "DCDConfig":
        """Создаёт конфигурацию из словаря вида CONFIG; лишние ключи игнорируются."""
        known = {f.name for f in fields(cls)}
        config = cls(**{k: v for k, v in params.items() if k in known})
        config.validate()
        return config

    def validate(self) -> None:
        """Проверяет параметры и приводит строковые режимы к Enum."""
        if not self.Cp > 0:
            raise InvalidConfiguration(f"Cp должно быть > 0, получено {self.Cp}")
        if not self.Cn > 0:
            raise InvalidConfiguration(f"Cn должно быть > 0, получено {self.Cn}")
        if self.accuracy < 0:
            raise InvalidConfiguration(f"accuracy должно быть >= 0, получено {self.accuracy}")
        if self.n_epochs <= 0 and self.n_iter <= 0:
            raise InvalidConfiguration("Нужно задать n_epochs > 0 или n_iter > 0")

        self.regularization = _as_enum(Regularization, self.regularization, "regularization")
        self.shuffle = _as_enum(ShuffleMode, self.shuffle, "shuffle mode")

    def bounds(self) -> tuple[float, float, float, float]:
        """
        Константы единого правила обновления.

        Returns:
            (diag_p, diag_n, upper_bound_p, upper_bound_n)
        """
        if self.regularization == Regularization.L1:
            return 0.0, 0.0, float(self.Cp), float(self.Cn)
        return 0.5 / self.Cp, 0.5 / self.Cn, float("inf"), float("inf")
