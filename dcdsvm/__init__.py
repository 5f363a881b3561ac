from .exceptions import InvalidConfiguration, NotImplementedLearner

from .config import DCDConfig, Regularization, ShuffleMode

from .learners import (
    LearnerType,
    Learner,
    BinaryClassification,
    Regression,
    DensityEstimation,
    hinge_loss,
    hinge_loss_gradient,
    resolve_learner,
)

from .kernels import LinearKernel, GaussianKernel, linear_kernel, gaussian_kernel

from .dataset import Dataset

from .dcd_solver import (
    ALPHA_ZERO,
    DCDSolver,
    StoppingCondition,
    TrainedModel,
    train,
)

from .estimator import LinearDCDSVC

__all__ = [
    # Errors
    "InvalidConfiguration",
    "NotImplementedLearner",
    # Configuration
    "DCDConfig",
    "Regularization",
    "ShuffleMode",
    # Learners
    "LearnerType",
    "Learner",
    "BinaryClassification",
    "Regression",
    "DensityEstimation",
    "hinge_loss",
    "hinge_loss_gradient",
    "resolve_learner",
    # Kernels
    "LinearKernel",
    "GaussianKernel",
    "linear_kernel",
    "gaussian_kernel",
    # Solver
    "Dataset",
    "ALPHA_ZERO",
    "DCDSolver",
    "StoppingCondition",
    "TrainedModel",
    "train",
    "LinearDCDSVC",
]
