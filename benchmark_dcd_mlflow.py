"""
Бенчмарк DCD солвера линейного SVM против sklearn LinearSVC (liblinear).

Для каждого синтетического датасета и каждого значения C обучаются:
- LinearDCDSVC (L1-SVM, hinge loss)
- LinearDCDSVC (L2-SVM, squared hinge loss)
- sklearn LinearSVC с соответствующей функцией потерь

Параметры и метрики логируются в MLflow.
"""

import os
import time
import warnings

import mlflow
import numpy as np
from sklearn.datasets import make_classification
from sklearn.exceptions import ConvergenceWarning
from sklearn.metrics import accuracy_score, classification_report, f1_score
from sklearn.model_selection import train_test_split
from sklearn.preprocessing import StandardScaler
from sklearn.svm import LinearSVC
from tqdm.auto import tqdm

from dcdsvm import LinearDCDSVC

# --- КОНФИГУРАЦИЯ ---
CONFIG = {
    # Синтетические датасеты: имя -> параметры make_classification
    "datasets": {
        "easy_2d": dict(n_samples=2000, n_features=2, n_informative=2, n_redundant=0,
                        class_sep=2.0, random_state=0),
        "medium_20d": dict(n_samples=5000, n_features=20, n_informative=10, n_redundant=5,
                           class_sep=1.0, random_state=1),
        "imbalanced_50d": dict(n_samples=5000, n_features=50, n_informative=20,
                               weights=[0.9, 0.1], class_sep=1.0, random_state=2),
    },
    "test_size": 0.2,
    "use_scaler": True,

    # DCD параметры
    "C_values": [0.01, 0.1, 1.0, 10.0],
    "max_epochs": 1000,
    "tol": 1e-3,
    "shuffle": "uniform",
    "random_state": 42,

    # Baseline sklearn SVM
    "run_sklearn_baseline": True,

    # MLFLOW Settings
    "mlflow_tracking_uri": os.environ.get("MLFLOW_TRACKING_URI", "file:./mlruns"),
    "experiment_name": "DCD_Linear_SVM_Benchmark",
}

LOSSES = {"l1": "hinge", "l2": "squared_hinge"}


def load_data(params):
    """Генерирует датасет и делит его на train/test."""
    X, y = make_classification(**params)
    X_train, X_test, y_train, y_test = train_test_split(
        X, y, test_size=CONFIG["test_size"], random_state=CONFIG["random_state"], stratify=y
    )
    if CONFIG["use_scaler"]:
        scaler = StandardScaler()
        X_train = scaler.fit_transform(X_train)
        X_test = scaler.transform(X_test)
    return X_train, X_test, y_train, y_test


def evaluate(clf, X_test, y_test):
    y_pred = clf.predict(X_test)
    return {
        "accuracy": accuracy_score(y_test, y_pred),
        "f1": f1_score(y_test, y_pred, pos_label=1),
    }


def run_dcd(dataset_name, regularization, C, X_train, X_test, y_train, y_test):
    """Обучает LinearDCDSVC и логирует run в MLflow."""
    with mlflow.start_run(run_name=f"DCD_{regularization}_C{C}_on_{dataset_name}"):
        mlflow.log_param("dataset", dataset_name)
        mlflow.log_param("solver", "DCD")
        mlflow.log_param("regularization", regularization)
        mlflow.log_param("C", C)
        mlflow.log_param("max_epochs", CONFIG["max_epochs"])
        mlflow.log_param("tol", CONFIG["tol"])
        mlflow.log_param("shuffle", CONFIG["shuffle"])

        clf = LinearDCDSVC(
            C=C,
            regularization=regularization,
            max_epochs=CONFIG["max_epochs"],
            tol=CONFIG["tol"],
            shuffle=CONFIG["shuffle"],
            random_state=CONFIG["random_state"],
        )
        start = time.time()
        clf.fit(X_train, y_train)
        train_time = time.time() - start

        metrics = evaluate(clf, X_test, y_test)
        metrics.update({
            "train_time": train_time,
            "n_epochs": clf.n_iter_,
            "converged": float(clf.converged_),
            "n_support_vectors": clf.n_support_vectors_,
            "objective_value": clf.objective_value_,
            "w_norm": float(np.linalg.norm(clf.coef_)),
        })
        mlflow.log_metrics(metrics)

        np.savez("dcd_model.npz", w=clf.coef_[0], b=clf.intercept_[0], alpha=clf.alpha_)
        mlflow.log_artifact("dcd_model.npz")

        report = classification_report(y_test, clf.predict(X_test), zero_division=0)
        with open("classification_report.txt", "w", encoding="utf-8") as f:
            f.write(f"Dataset: {dataset_name}\n")
            f.write(f"Solver: Dual Coordinate Descent ({regularization.upper()}-SVM)\n")
            f.write(f"Paper: A Dual Coordinate Descent Method for Large-scale Linear SVM (ICML 2008)\n\n")
            f.write(f"Parameters:\n")
            f.write(f"  C = {C}\n")
            f.write(f"  tol = {CONFIG['tol']}\n")
            f.write(f"  epochs run = {clf.n_iter_} (converged={clf.converged_})\n\n")
            f.write(report)
        mlflow.log_artifact("classification_report.txt")

    return metrics


def run_sklearn_baseline(dataset_name, regularization, C, X_train, X_test, y_train, y_test):
    """sklearn LinearSVC (liblinear dual CD) с той же функцией потерь."""
    with mlflow.start_run(run_name=f"sklearn_LinearSVC_{regularization}_C{C}_on_{dataset_name}"):
        mlflow.log_param("dataset", dataset_name)
        mlflow.log_param("solver", "liblinear")
        mlflow.log_param("regularization", regularization)
        mlflow.log_param("C", C)

        clf = LinearSVC(C=C, loss=LOSSES[regularization], dual=True,
                        tol=CONFIG["tol"], max_iter=CONFIG["max_epochs"],
                        random_state=CONFIG["random_state"])
        start = time.time()
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            clf.fit(X_train, y_train)
        train_time = time.time() - start

        metrics = evaluate(clf, X_test, y_test)
        metrics["train_time"] = train_time
        metrics["n_epochs"] = int(np.max(clf.n_iter_))
        mlflow.log_metrics(metrics)

    return metrics


def main():
    """
    Главная функция бенчмарка.
    """
    print("=" * 60)
    print("DCD Linear SVM Benchmark")
    print(f"  C values: {CONFIG['C_values']}")
    print(f"  max_epochs = {CONFIG['max_epochs']}, tol = {CONFIG['tol']}")
    print("=" * 60)

    mlflow.set_tracking_uri(CONFIG["mlflow_tracking_uri"])
    mlflow.set_experiment(CONFIG["experiment_name"])
    all_results = {}

    for dataset_name, params in CONFIG["datasets"].items():
        print(f"\n{'='*40}")
        print(f"Processing: {dataset_name}")
        print(f"{'='*40}")

        X_train, X_test, y_train, y_test = load_data(params)
        print(f"  Train: {len(X_train)} samples, Test: {len(X_test)} samples, "
              f"{X_train.shape[1]} features")

        grid = [(reg, C) for reg in LOSSES for C in CONFIG["C_values"]]
        for regularization, C in tqdm(grid, desc=dataset_name):
            data = (X_train, X_test, y_train, y_test)
            try:
                m = run_dcd(dataset_name, regularization, C, *data)
                all_results[f"DCD_{regularization}_C{C}_{dataset_name}"] = m

                if CONFIG["run_sklearn_baseline"]:
                    m = run_sklearn_baseline(dataset_name, regularization, C, *data)
                    all_results[f"sklearn_{regularization}_C{C}_{dataset_name}"] = m
            except Exception as e:
                print(f"Error on {dataset_name} ({regularization}, C={C}): {e}")
                import traceback
                traceback.print_exc()
                continue

    print("\n" + "="*80)
    print("SUMMARY - All Results")
    print("="*80)
    print(f"{'Run':<45} {'Accuracy':<10} {'F1':<10} {'Epochs':<8} {'Time, s':<10}")
    print("-"*85)
    for name, m in all_results.items():
        print(f"{name:<45} {m['accuracy']:<10.4f} {m['f1']:<10.4f} "
              f"{m['n_epochs']:<8} {m['train_time']:<10.3f}")


if __name__ == "__main__":
    main()
