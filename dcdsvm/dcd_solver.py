"""
Dual Coordinate Descent (DCD) солвер для линейных L1-SVM и L2-SVM.

Реализация по статье:
- Hsieh, C.-J., Chang, K.-W., Lin, C.-J. (2008).
  "A Dual Coordinate Descent Method for Large-scale Linear SVM", ICML.

Двойственная задача (смещение включено в вектор весов, x̄_i = [x_i, 1]):
    min_α  1/2 α^T Q̄ α - e^T α
    s.t.   0 ≤ α_i ≤ U_i

    где Q̄ = Q + D,  Q_ij = y_i y_j x̄_i^T x̄_j
        L1-SVM: U_i = C_i,  D_ii = 0
        L2-SVM: U_i = ∞,    D_ii = 1/(2C_i)

За один шаг оптимизируется одна координата α_i:
    G     = y_i w^T x̄_i - 1 + D_ii α_i
    α_i  ← min(max(α_i - G / Q̄_ii, 0), U_i)
    w    ← w + (α_i_new - α_i_old) y_i x̄_i

Вектор w = Σ α_i y_i x̄_i поддерживается инкрементально и никогда не
пересчитывается целиком. Критерий остановки: max PG - min PG ≤ accuracy
по проекционному градиенту PG за эпоху.

Оптимизации:
- Numba JIT для внутреннего цикла по координатам
- Матрица Q не строится: нужна только диагональ Q̄_ii
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

import numpy as np
from numba import njit
from tqdm.auto import tqdm

from .config import DCDConfig, ShuffleMode
from .dataset import Dataset
from .exceptions import InvalidConfiguration, NotImplementedLearner
from .kernels import LinearKernel
from .learners import Learner, LearnerType, resolve_learner

# Порог, ниже которого α_i считается нулевым (и не опорным вектором)
ALPHA_ZERO = 1e-7
# Координата с |PG| не больше порога на этом проходе не обновляется
PGRAD_EPS = 1e-12


class StoppingCondition(Enum):
    """Состояние цикла оптимизации."""
    RUNNING = 0
    CONVERGED = 1      # достигнута точность accuracy
    EPOCH_LIMIT = 2    # исчерпан лимит эпох


@dataclass
class TrainedModel:
    """Результат работы DCD солвера."""
    weights: np.ndarray                       # w без компоненты смещения (n_features,)
    bias: float                               # последняя компонента расширенного w
    alpha: np.ndarray                         # Множители Лагранжа (n_samples,)
    stopping_condition: StoppingCondition
    n_epochs: int                             # Количество выполненных эпох
    gap_history: list = field(default_factory=list)  # max PG - min PG по эпохам
    n_support_vectors: int = 0
    objective_value: Optional[float] = None   # только при report_objective
    train_time: float = 0.0

    @property
    def converged(self) -> bool:
        return self.stopping_condition == StoppingCondition.CONVERGED

    @property
    def weight_vector(self) -> np.ndarray:
        """Расширенный вектор [w, b]."""
        return np.append(self.weights, self.bias)

    def decision_function(self, X: np.ndarray) -> np.ndarray:
        X = np.asarray(X, dtype=np.float64)
        return X @ self.weights + self.bias

    def predict(self, X: np.ndarray) -> np.ndarray:
        """Предсказание меток {-1, +1}."""
        return np.where(self.decision_function(X) >= 0.0, 1, -1)


# =============================================================================
# Numba-оптимизированные функции
# =============================================================================

@njit(cache=True)
def build_labels(data: np.ndarray) -> np.ndarray:
    """Метки {-1, +1} по знаку последней строки матрицы данных."""
    n_samples = data.shape[1]
    label_row = data.shape[0] - 1
    y = np.empty(n_samples, dtype=np.float64)
    for i in range(n_samples):
        y[i] = 1.0 if data[label_row, i] > 0 else -1.0
    return y


@njit(fastmath=True, cache=True)
def compute_qd(data: np.ndarray, y: np.ndarray, diag_p: float, diag_n: float) -> np.ndarray:
    """
    Диагональ Q̄: QD_i = D_ii + ||x_i||² + 1

    Слагаемое 1 соответствует константной компоненте x̄_i (смещение).
    """
    n_features = data.shape[0] - 1
    n_samples = data.shape[1]
    QD = np.empty(n_samples, dtype=np.float64)
    for i in range(n_samples):
        q = diag_p if y[i] > 0 else diag_n
        for j in range(n_features):
            q += data[j, i] * data[j, i]
        QD[i] = q + 1.0
    return QD


@njit(cache=True)
def swap_permutation(partners: np.ndarray) -> np.ndarray:
    """
    Перестановка обменом: для каждого i меняем местами order[i] и order[partners[i]].

    partners[i] равномерно распределены на [0, n). Распределение перестановок
    при этом не равномерное, но каждый индекс встречается ровно один раз.
    """
    n = partners.shape[0]
    order = np.arange(n)
    for i in range(n):
        j = partners[i]
        tmp = order[i]
        order[i] = order[j]
        order[j] = tmp
    return order


# Без fastmath: границы U_i = ∞ (L2-SVM) и сторожевые ±∞ значимы.
@njit(cache=True)
def dcd_epoch(
    data: np.ndarray,
    y: np.ndarray,
    alpha: np.ndarray,
    w: np.ndarray,
    QD: np.ndarray,
    order: np.ndarray,
    n_steps: int,
    diag_p: float,
    diag_n: float,
    upper_bound_p: float,
    upper_bound_n: float
):
    """
    Один проход покоординатного спуска (alpha и w меняются на месте).

    Args:
        data: Матрица (n_features + 1, n_samples), в последней строке метки
        y: Метки {-1, +1}
        alpha: Множители Лагранжа
        w: Расширенный вектор весов (n_features + 1,)
        QD: Диагональ Q̄
        order: Порядок обхода координат
        n_steps: Число шагов; индекс шага t -> order[t % n_samples]

    Returns:
        (pgrad_max, pgrad_min, n_updates)
    """
    n_samples = order.shape[0]
    n_features = data.shape[0] - 1

    pgrad_max = -np.inf
    pgrad_min = np.inf
    n_updates = 0

    for t in range(n_steps):
        i = order[t % n_samples]
        y_i = y[i]

        # G = y_i w^T x̄_i - 1
        G = w[n_features]
        for j in range(n_features):
            G += w[j] * data[j, i]
        G = G * y_i - 1.0

        if y_i > 0:
            C = upper_bound_p
            G += alpha[i] * diag_p
        else:
            C = upper_bound_n
            G += alpha[i] * diag_n

        # Проекционный градиент
        if alpha[i] <= ALPHA_ZERO:
            pgrad = min(G, 0.0)
        elif C - alpha[i] <= ALPHA_ZERO:
            pgrad = max(G, 0.0)
        else:
            pgrad = G

        if pgrad > pgrad_max:
            pgrad_max = pgrad
        if pgrad < pgrad_min:
            pgrad_min = pgrad

        if abs(pgrad) > PGRAD_EPS:
            alpha_old = alpha[i]
            alpha_new = min(max(alpha_old - G / QD[i], 0.0), C)
            delta = (alpha_new - alpha_old) * y_i
            for j in range(n_features):
                w[j] += delta * data[j, i]
            w[n_features] += delta
            alpha[i] = alpha_new
            n_updates += 1

    return pgrad_max, pgrad_min, n_updates


@njit(fastmath=True, cache=True)
def dual_objective(
    alpha: np.ndarray,
    y: np.ndarray,
    w: np.ndarray,
    diag_p: float,
    diag_n: float
):
    """
    Значение двойственной целевой функции и число опорных векторов.

    f(α) = 1/2 (||w||² + Σ_i D_ii α_i²) - Σ_i α_i

    Returns:
        (objective, n_support_vectors)
    """
    v = 0.0
    for j in range(w.shape[0]):
        v += w[j] * w[j]

    n_sv = 0
    for i in range(alpha.shape[0]):
        diag = diag_p if y[i] > 0 else diag_n
        v += alpha[i] * (alpha[i] * diag - 2.0)
        if alpha[i] > ALPHA_ZERO:
            n_sv += 1

    return 0.5 * v, n_sv


# =============================================================================
# Основной класс солвера
# =============================================================================

class DCDSolver:
    """
    Dual Coordinate Descent для линейного двухклассового SVM.

    Состояние (alpha, w, QD, метки) создаётся в initialize() и живёт до
    следующего вызова initialize()/train(). Выборка не копируется.

    Пример:
        solver = DCDSolver(DCDConfig(Cp=1.0, Cn=1.0, regularization="l2"))
        model = solver.train(LearnerType.BINARY_CLASSIFICATION, dataset)
    """

    def __init__(self, config: Optional[DCDConfig] = None, kernel=None):
        """
        Args:
            config: Параметры обучения (по умолчанию DCDConfig())
            kernel: Объект ядра с методом eval(a, b, n_features);
                допускается только линейное ядро
        """
        self.config = config if config is not None else DCDConfig()
        self.kernel = kernel if kernel is not None else LinearKernel()

        self.learner: Optional[Learner] = None
        self.alpha: Optional[np.ndarray] = None
        self.w: Optional[np.ndarray] = None
        self.y: Optional[np.ndarray] = None
        self.QD: Optional[np.ndarray] = None

        self.stopping_condition = StoppingCondition.RUNNING
        self.epoch = 0
        self.gap_history: list[float] = []

    def initialize(
        self,
        learner: Union[Learner, LearnerType, int, str],
        dataset: Union[Dataset, np.ndarray]
    ) -> None:
        """
        Проверяет параметры, связывает выборку и выделяет состояние солвера.

        Raises:
            InvalidConfiguration: Cp/Cn <= 0, прочие некорректные параметры
                или нелинейное ядро
            NotImplementedLearner: тип обучения, отличный от бинарной классификации
        """
        config = self.config
        config.validate()
        if not getattr(self.kernel, "is_linear", False):
            raise InvalidConfiguration(
                f"DCD поддерживает только линейное ядро, получено {self.kernel!r}"
            )

        self.learner = resolve_learner(learner)
        if not self.learner.supported:
            raise NotImplementedLearner(
                f"{self.learner.learner_type.name} is not supported by the DCD solver"
            )

        if not isinstance(dataset, Dataset):
            dataset = Dataset(dataset)
        self._data = dataset.matrix()
        self.n_samples = self._data.shape[1]
        self.n_features = self._data.shape[0] - 1
        self.n_features_bias = self.n_features + 1

        self.diag_p, self.diag_n, self.upper_bound_p, self.upper_bound_n = config.bounds()

        self.y = build_labels(self._data)
        self.alpha = np.zeros(self.n_samples, dtype=np.float64)
        self.w = np.zeros(self.n_features_bias, dtype=np.float64)
        self.QD = compute_qd(self._data, self.y, self.diag_p, self.diag_n)

        if config.n_epochs > 0:
            self.max_epochs = config.n_epochs
            self.n_steps = self.n_samples
        else:
            # Не эпоха в строгом смысле: один проход из n_iter шагов
            self.max_epochs = 1
            self.n_steps = config.n_iter

        self._rng = np.random.default_rng(config.seed)
        self.pgrad_max_old = np.inf
        self.pgrad_min_old = -np.inf
        self.stopping_condition = StoppingCondition.RUNNING
        self.epoch = 0
        self.gap_history = []

    def _permutation(self) -> np.ndarray:
        if self.config.shuffle == ShuffleMode.SWAP:
            partners = self._rng.integers(0, self.n_samples, size=self.n_samples)
            return swap_permutation(partners)
        return self._rng.permutation(self.n_samples)

    def run_epoch(self) -> float:
        """
        Выполняет одну эпоху и обновляет состояние остановки.

        Returns:
            Разброс проекционного градиента max PG - min PG за эпоху
        """
        if self.alpha is None:
            raise RuntimeError("Solver is not initialized, call `initialize` first")
        if self.stopping_condition != StoppingCondition.RUNNING:
            raise RuntimeError(f"Training already finished: {self.stopping_condition.name}")

        order = self._permutation()
        pgrad_max, pgrad_min, _ = dcd_epoch(
            self._data, self.y, self.alpha, self.w, self.QD, order, self.n_steps,
            self.diag_p, self.diag_n, self.upper_bound_p, self.upper_bound_n
        )
        self.epoch += 1

        gap = pgrad_max - pgrad_min
        self.gap_history.append(gap)

        if gap <= self.config.accuracy:
            self.stopping_condition = StoppingCondition.CONVERGED
            return gap

        self.pgrad_max_old = pgrad_max if pgrad_max > 0 else np.inf
        self.pgrad_min_old = pgrad_min if pgrad_min < 0 else -np.inf

        if self.epoch >= self.max_epochs:
            self.stopping_condition = StoppingCondition.EPOCH_LIMIT
        return gap

    def train(
        self,
        learner: Union[Learner, LearnerType, int, str],
        dataset: Union[Dataset, np.ndarray]
    ) -> TrainedModel:
        """
        Обучает SVM до сходимости или исчерпания лимита эпох.

        Args:
            learner: Тип обучения (только BINARY_CLASSIFICATION)
            dataset: Dataset или матрица (n_features + 1, n_samples)

        Returns:
            TrainedModel
        """
        self.initialize(learner, dataset)
        config = self.config
        verbose = config.verbose

        if verbose:
            print(f"DCD solver started: {self.n_samples} samples, {self.n_features} features")
            print(f"  {config.regularization.name}-SVM, Cp={config.Cp}, Cn={config.Cn}")
            print(f"  Epoch limit: {self.max_epochs}, steps per epoch: {self.n_steps}")

        start = time.time()
        with tqdm(total=self.max_epochs, desc="DCD epochs", disable=not verbose) as pbar:
            while self.stopping_condition == StoppingCondition.RUNNING:
                gap = self.run_epoch()
                pbar.update(1)
                pbar.set_postfix(gap=f"{gap:.2e}")
        train_time = time.time() - start

        if verbose:
            if self.stopping_condition == StoppingCondition.CONVERGED:
                print(f"DCD terminates since the accuracy {config.accuracy} reached! "
                      f"Number of epochs run: {self.epoch}")
            else:
                print(f"DCD terminates since the number of epochs {self.max_epochs} reached!")

        objective, n_sv = dual_objective(self.alpha, self.y, self.w, self.diag_p, self.diag_n)
        if config.report_objective:
            if verbose:
                print(f"  Objective value: {objective:.6f}")
                print(f"  Number of SVs: {n_sv}")
        else:
            objective = None

        return TrainedModel(
            weights=self.w[:self.n_features].copy(),
            bias=float(self.w[self.n_features]),
            alpha=self.alpha.copy(),
            stopping_condition=self.stopping_condition,
            n_epochs=self.epoch,
            gap_history=list(self.gap_history),
            n_support_vectors=int(n_sv),
            objective_value=objective,
            train_time=train_time
        )

    def kernel_value(self, i: int, j: int) -> float:
        """Значение ядра между примерами i и j выборки."""
        if self.alpha is None:
            raise RuntimeError("Solver is not initialized, call `initialize` first")
        return self.kernel.eval(self._data[:, i], self._data[:, j], self.n_features)

    @property
    def bias(self) -> float:
        if self.w is None:
            raise RuntimeError("Solver is not initialized, call `initialize` first")
        return float(self.w[self.n_features])

    @property
    def weights(self) -> np.ndarray:
        if self.w is None:
            raise RuntimeError("Solver is not initialized, call `initialize` first")
        return self.w[:self.n_features]


def train(
    learner: Union[Learner, LearnerType, int, str],
    dataset: Union[Dataset, np.ndarray],
    config: Optional[DCDConfig] = None,
    kernel=None
) -> TrainedModel:
    """
    Главная функция-обёртка: обучает линейный SVM методом DCD.

    Args:
        learner: Тип обучения (LearnerType.BINARY_CLASSIFICATION, 0 или "svm_c")
        dataset: Dataset или матрица (n_features + 1, n_samples) с метками в последней строке
        config: Параметры обучения
        kernel: Ядро (только линейное)

    Returns:
        TrainedModel с вектором весов и смещением
    """
    return DCDSolver(config, kernel=kernel).train(learner, dataset)
