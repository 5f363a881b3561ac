"""
Исключения DCD солвера.
"""


class InvalidConfiguration(ValueError):
    """Некорректные параметры солвера (Cp, Cn <= 0, неизвестный режим и т.п.)."""


class NotImplementedLearner(NotImplementedError):
    """Запрошен тип обучения, отличный от бинарной классификации."""
