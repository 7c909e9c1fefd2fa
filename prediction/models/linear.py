"""
Ordinary least squares multivariate linear regression.

Fits `target ≈ coefficients · features + intercept` by minimising the
sum of squared residuals. Near-collinear or constant columns are
accepted as-is: the least-squares solve returns the minimum-norm
solution and no regularisation is applied.
"""

import logging
from dataclasses import dataclass

import numpy as np

from app.domain.forecasting.errors import TrainingError
from prediction.utils.metrics import FitMetrics, evaluate_fit

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class LinearModel:
    """A fitted coefficient vector and intercept. Immutable after fit."""

    coefficients: np.ndarray
    intercept: float

    @property
    def n_features(self) -> int:
        return int(self.coefficients.shape[0])

    def predict(self, feature_vector) -> float:
        """Dot product plus intercept for a single feature vector."""
        x = np.asarray(feature_vector, dtype=float)
        if x.shape != (self.n_features,):
            raise TrainingError(
                f"expected {self.n_features} features, got shape {x.shape}"
            )
        return float(x @ self.coefficients + self.intercept)

    def predict_many(self, features) -> np.ndarray:
        X = np.asarray(features, dtype=float)
        if X.ndim != 2 or X.shape[1] != self.n_features:
            raise TrainingError(
                f"expected a matrix with {self.n_features} columns, got shape {X.shape}"
            )
        return X @ self.coefficients + self.intercept


class LinearRegressionEngine:
    """Fits and applies LinearModel instances.

    Holds no state between calls; each fit returns a new model.
    """

    def fit(self, features, targets) -> LinearModel:
        """Fit an OLS model.

        Args:
            features: Matrix of shape (n_rows, n_features).
            targets: Vector of length n_rows.

        Returns:
            The fitted LinearModel.

        Raises:
            TrainingError: If the matrix is empty, not 2-D, contains
                non-finite values, or its row count differs from targets.
        """
        X = np.asarray(features, dtype=float)
        y = np.asarray(targets, dtype=float).reshape(-1)

        if X.size == 0 or X.ndim != 2:
            raise TrainingError("feature matrix is empty")
        if X.shape[0] != y.shape[0]:
            raise TrainingError(
                f"{X.shape[0]} feature rows but {y.shape[0]} targets"
            )
        if not (np.isfinite(X).all() and np.isfinite(y).all()):
            raise TrainingError("features or targets contain NaN or infinity")

        design = np.column_stack([np.ones(X.shape[0]), X])
        solution, _, rank, _ = np.linalg.lstsq(design, y, rcond=None)
        if rank < design.shape[1]:
            logger.debug(
                "Design matrix is rank deficient (%d < %d); using minimum-norm solution.",
                rank,
                design.shape[1],
            )

        coefficients = solution[1:].copy()
        coefficients.setflags(write=False)
        return LinearModel(coefficients=coefficients, intercept=float(solution[0]))

    def predict(self, model: LinearModel, feature_vector) -> float:
        return model.predict(feature_vector)

    def evaluate(self, model: LinearModel, features, targets) -> FitMetrics:
        """Score the model on a partition (R² clamped to [0, 1], plus MAE)."""
        y = np.asarray(targets, dtype=float).reshape(-1)
        if y.size == 0:
            raise TrainingError("cannot evaluate on an empty partition")
        return evaluate_fit(y, model.predict_many(features))
