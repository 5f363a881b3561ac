"""
Функции ядра для DCD солвера.

Ядро передаётся солверу как объект-capability с методом eval(a, b, n_features).
Инкрементальное обновление вектора весов в DCD корректно только для линейного
ядра, поэтому солвер принимает лишь ядра с is_linear = True; гауссово ядро
оставлено для расширения (kernelized coordinate descent).

Кэш значений ядра не используется: функции чистые и не хранят состояния.
"""

import numpy as np
from numba import njit


@njit(fastmath=True, cache=True)
def linear_kernel(a: np.ndarray, b: np.ndarray, n_features: int) -> float:
    """Линейное ядро по первым n_features компонентам: K(a, b) = a^T b"""
    s = 0.0
    for k in range(n_features):
        s += a[k] * b[k]
    return s


@njit(fastmath=True, cache=True)
def gaussian_kernel(a: np.ndarray, b: np.ndarray, n_features: int, sigma: float) -> float:
    """Гауссово ядро: K(a, b) = exp(-||a - b||² / (2σ²))"""
    d = 0.0
    for k in range(n_features):
        diff = a[k] - b[k]
        d += diff * diff
    return np.exp(-d / (2.0 * sigma * sigma))


class LinearKernel:
    """K(a, b) = a^T b"""
    is_linear = True

    def eval(self, a: np.ndarray, b: np.ndarray, n_features: int) -> float:
        return linear_kernel(
            np.ascontiguousarray(a, dtype=np.float64),
            np.ascontiguousarray(b, dtype=np.float64),
            n_features,
        )

    def __repr__(self):
        return "LinearKernel()"


class GaussianKernel:
    """
    K(a, b) = exp(-||a - b||² / (2σ²))

    Args:
        sigma: Ширина ядра, > 0
    """
    is_linear = False

    def __init__(self, sigma: float = 1.0):
        if sigma <= 0:
            raise ValueError(f"sigma должно быть > 0, получено {sigma}")
        self.sigma = float(sigma)

    def eval(self, a: np.ndarray, b: np.ndarray, n_features: int) -> float:
        return gaussian_kernel(
            np.ascontiguousarray(a, dtype=np.float64),
            np.ascontiguousarray(b, dtype=np.float64),
            n_features,
            self.sigma,
        )

    def __repr__(self):
        return f"GaussianKernel(sigma={self.sigma})"
