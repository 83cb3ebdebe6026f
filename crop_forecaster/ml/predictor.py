"""
Feed-forward neural price predictor for one commodity series.

Architecture
------------
scikit-learn ``MLPRegressor``: ``window_size`` inputs → 64 → 32 → 16 ReLU
units → 1 linear output, L2 weight decay (``alpha``), Adam optimizer, squared
error loss. Input and output live in the normalized [0, 1] price domain.

Training strategy
-----------------
Training is an explicit epoch loop of ``partial_fit`` passes rather than a
single ``fit()`` call, so that:
  - the async path can yield control between epochs, and a cancelled caller
    leaves nothing half-published;
  - divergence (non-finite loss, weights or validation error) is detected
    per epoch and raised as ``ComputationFault``;
  - the estimator snapshot with the lowest validation MSE is kept, instead
    of trusting whatever the last pass produced.

Validation split
----------------
Always time-based: the LAST ``validation_fraction`` of sequences (at least
one) is held out. Never random — shuffled splits on a price series let the
model peek at the future.

Rollout
-------
``forecast_steps`` is autoregressive: each prediction is appended to the
window and the oldest value dropped. Errors compound with the horizon and
nothing corrects them; downstream confidence reflects volatility, not step
distance.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

import numpy as np

from crop_forecaster.exceptions import ComputationFault
from crop_forecaster.ml.sequences import DEFAULT_WINDOW_SIZE, TrainingSequences

if TYPE_CHECKING:
    from crop_forecaster.config import ModelConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EpochResult:
    """Loss summary for one training epoch.

    Attributes:
        epoch:      1-based epoch number.
        train_loss: Training loss reported by the estimator (MSE/2 + L2 term).
        val_mse:    Mean squared error on the held-out validation sequences.
    """

    epoch: int
    train_loss: float
    val_mse: float


class MLPPricePredictor:
    """Trainable window → next-value regressor.

    Attributes:
        window_size: Fixed input width.
        epochs: Number of training passes per ``fit``.
        MODEL_VERSION: Version string reported in ``describe()``.
    """

    MODEL_VERSION = "mlp-v0.3.0"

    def __init__(
        self,
        window_size: int = DEFAULT_WINDOW_SIZE,
        hidden_layers: Sequence[int] = (64, 32, 16),
        l2_penalty: float = 0.001,
        learning_rate: float = 0.01,
        max_batch_size: int = 16,
        epochs: int = 30,
        validation_fraction: float = 0.2,
        random_state: Optional[int] = None,
    ) -> None:
        self.window_size = window_size
        self.epochs = epochs
        self._hyperparams: dict[str, Any] = {
            "hidden_layer_sizes": tuple(hidden_layers),
            "alpha":              l2_penalty,
            "learning_rate_init": learning_rate,
            "max_batch_size":     max_batch_size,
            "random_state":       random_state,
        }
        self._validation_fraction = validation_fraction
        self._estimator = None      # MLPRegressor; None until a full fit completes
        self._val_metrics: dict[str, float] = {}
        self._training_rows: int = 0
        self._trained_at: str = ""

    @classmethod
    def from_config(cls, config: "ModelConfig") -> "MLPPricePredictor":
        return cls(
            window_size=config.window_size,
            hidden_layers=config.hidden_layers,
            l2_penalty=config.l2_penalty,
            learning_rate=config.learning_rate,
            max_batch_size=config.max_batch_size,
            epochs=config.epochs,
            validation_fraction=config.validation_fraction,
            random_state=config.random_state,
        )

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def is_fitted(self) -> bool:
        """True after a training run has completed and until ``dispose()``."""
        return self._estimator is not None

    @property
    def val_metrics(self) -> dict[str, float]:
        """Validation metrics from the most recent completed training run."""
        return dict(self._val_metrics)

    def describe(self) -> dict[str, Any]:
        return {
            "model_version": self.MODEL_VERSION,
            "window_size":   self.window_size,
            "epochs":        self.epochs,
            "hyperparams":   dict(self._hyperparams),
            "training_rows": self._training_rows,
            "trained_at":    self._trained_at,
            "val_metrics":   self.val_metrics,
        }

    # ── Training ──────────────────────────────────────────────────────────────

    def iter_fit(self, sequences: TrainingSequences) -> Iterator[EpochResult]:
        """Train epoch by epoch, yielding a loss summary after each pass.

        The fitted estimator is only installed on ``self`` once the final
        epoch has run. Abandoning the iterator early leaves the predictor
        exactly as it was.

        Args:
            sequences: Normalized training pairs (at least 2).

        Yields:
            One ``EpochResult`` per epoch.

        Raises:
            ValueError: Fewer than 2 sequences, or wrong input width.
            ComputationFault: Training produced non-finite values.
        """
        from sklearn.neural_network import MLPRegressor

        n = len(sequences)
        if n < 2:
            raise ValueError(
                f"MLPPricePredictor.fit() needs >= 2 training sequences; got {n}."
            )
        if sequences.inputs.shape[1] != self.window_size:
            raise ValueError(
                f"Training inputs have width {sequences.inputs.shape[1]}; "
                f"expected window_size={self.window_size}."
            )

        n_val = min(n - 1, max(1, round(n * self._validation_fraction)))
        n_train = n - n_val
        X_train, y_train = sequences.inputs[:n_train], sequences.targets[:n_train]
        X_val, y_val = sequences.inputs[n_train:], sequences.targets[n_train:]

        estimator = MLPRegressor(
            hidden_layer_sizes=self._hyperparams["hidden_layer_sizes"],
            activation="relu",
            solver="adam",
            alpha=self._hyperparams["alpha"],
            learning_rate_init=self._hyperparams["learning_rate_init"],
            batch_size=min(self._hyperparams["max_batch_size"], n_train),
            shuffle=True,
            random_state=self._hyperparams["random_state"],
        )

        best_estimator = None
        best_val = math.inf
        best_epoch = 0

        for epoch in range(1, self.epochs + 1):
            try:
                estimator.partial_fit(X_train, y_train)
            except ValueError as exc:
                # sklearn raises ValueError when the solver produces non-finite weights
                raise ComputationFault(
                    f"Training diverged at epoch {epoch}: {exc}"
                ) from exc

            train_loss = float(estimator.loss_)
            val_pred = estimator.predict(X_val)
            val_mse = float(np.mean((val_pred - y_val) ** 2))

            if not (math.isfinite(train_loss) and math.isfinite(val_mse)):
                raise ComputationFault(
                    f"Non-finite loss at epoch {epoch}: "
                    f"train_loss={train_loss}, val_mse={val_mse}."
                )

            if val_mse < best_val:
                best_val = val_mse
                best_epoch = epoch
                best_estimator = copy.deepcopy(estimator)

            yield EpochResult(epoch=epoch, train_loss=train_loss, val_mse=val_mse)

        self._estimator = best_estimator
        self._training_rows = n_train
        self._trained_at = datetime.now(timezone.utc).isoformat()
        self._val_metrics = {
            "val_mse":    best_val,
            "best_epoch": float(best_epoch),
            "n_train":    float(n_train),
            "n_val":      float(n_val),
        }
        logger.debug(
            "Predictor trained: epochs=%d best_epoch=%d val_mse=%.6f n_train=%d n_val=%d",
            self.epochs, best_epoch, best_val, n_train, n_val,
        )

    def fit(self, sequences: TrainingSequences) -> dict[str, float]:
        """Run the full training loop synchronously.

        Returns:
            Validation metrics: ``val_mse``, ``best_epoch``, ``n_train``, ``n_val``.
        """
        for _ in self.iter_fit(sequences):
            pass
        return self.val_metrics

    async def fit_async(self, sequences: TrainingSequences) -> dict[str, float]:
        """Run the training loop, yielding to the event loop between epochs.

        Cancellation lands at an epoch boundary; the predictor then stays
        unfitted.
        """
        for _ in self.iter_fit(sequences):
            await asyncio.sleep(0)
        return self.val_metrics

    # ── Inference ─────────────────────────────────────────────────────────────

    def predict_next(self, window: Sequence[float]) -> float:
        """One forward pass: normalized window → next normalized value.

        Raises:
            RuntimeError: If the model is not fitted.
            ValueError: If ``len(window) != window_size``.
            ComputationFault: If the output is not finite.
        """
        if not self.is_fitted:
            raise RuntimeError("Cannot predict with an unfitted MLPPricePredictor.")
        if len(window) != self.window_size:
            raise ValueError(
                f"Window has {len(window)} values; expected {self.window_size}."
            )
        X = np.asarray(window, dtype=np.float64).reshape(1, -1)
        value = float(np.ravel(self._estimator.predict(X))[0])
        if not math.isfinite(value):
            raise ComputationFault(f"Predictor produced a non-finite value: {value}.")
        return value

    def forecast_steps(self, initial_window: Sequence[float], steps: int) -> list[float]:
        """Autoregressive rollout of exactly ``steps`` normalized values.

        Args:
            initial_window: The last ``window_size`` normalized observations.
            steps: Number of values to produce.

        Returns:
            Predicted normalized values, nearest step first.
        """
        window = list(initial_window)
        out: list[float] = []
        for _ in range(steps):
            value = self.predict_next(window)
            out.append(value)
            window = window[1:] + [value]
        return out

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def dispose(self) -> None:
        """Release the fitted estimator. The predictor becomes unfitted."""
        self._estimator = None
        self._val_metrics = {}
