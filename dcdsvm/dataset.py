"""
Обучающая выборка в формате DCD солвера.

Матрица (F + 1, N): столбец i содержит вектор признаков примера i, последняя строка
содержит метки классов. Категориальные признаки должны быть уже переведены в числа.
"""

import numpy as np


class Dataset:
    """
    Обёртка над матрицей "примеры по столбцам + строка меток".

    Матрица не копируется, если уже имеет тип float64.
    """

    def __init__(self, matrix: np.ndarray):
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.ndim != 2:
            raise ValueError(f"Ожидается 2D матрица, получено ndim={matrix.ndim}")
        if matrix.shape[0] < 1:
            raise ValueError("Матрица должна содержать строку меток")
        if matrix.shape[1] < 1:
            raise ValueError("Выборка не содержит ни одного примера")
        self._matrix = matrix

    @classmethod
    def from_samples(cls, X: np.ndarray, y: np.ndarray) -> "Dataset":
        """
        Собирает матрицу из X (n_samples, n_features) и меток y (n_samples,).

        Метки > 0 считаются положительным классом.
        """
        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64).reshape(-1)
        if X.ndim != 2:
            raise ValueError(f"X должна быть 2D, получено ndim={X.ndim}")
        if X.shape[0] != y.shape[0]:
            raise ValueError(f"X и y не согласованы: {X.shape[0]} != {y.shape[0]}")
        return cls(np.vstack([X.T, y.reshape(1, -1)]))

    def matrix(self) -> np.ndarray:
        return self._matrix

    @property
    def n_samples(self) -> int:
        return self._matrix.shape[1]

    @property
    def n_features(self) -> int:
        return self._matrix.shape[0] - 1

    @property
    def features(self) -> np.ndarray:
        """Признаки в формате (n_samples, n_features), view без копирования."""
        return self._matrix[:-1].T

    @property
    def labels(self) -> np.ndarray:
        """Метки {-1, +1} по знаку последней строки."""
        return np.where(self._matrix[-1] > 0, 1.0, -1.0)

    def __repr__(self):
        return f"Dataset(n_samples={self.n_samples}, n_features={self.n_features})"
