"""
Per-commodity cache of trained predictors.

Concurrency model
-----------------
One ``threading.Lock`` guards the entry map and the generation counters;
every lookup, publish and eviction holds it for a few dictionary operations
only. Training itself never runs under the lock.

Generations
-----------
Each commodity id has a generation counter, bumped by ``invalidate``. A
forecast call reads ``(model, generation)`` with ``lookup`` before it starts
training and hands the same generation back to ``publish``. If an
invalidation happened in between, the freshly trained model was fitted on
history that is now stale: ``publish`` refuses it, the in-flight call still
uses it, and the next call retrains.

Eviction only drops the cache's reference. A call that already holds the
model from its ``lookup`` snapshot keeps predicting with it; the estimator is
released once the last holder lets go.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from crop_forecaster.ml.predictor import MLPPricePredictor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheLookup:
    """Snapshot of one cache key at the moment a forecast call began.

    Attributes:
        model:      Cached predictor, or ``None`` on a miss.
        generation: Generation of the key when the snapshot was taken.
    """

    model: Optional[MLPPricePredictor]
    generation: int


class ModelCache:
    """Thread-safe map from commodity id to trained predictor."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._models: dict[str, MLPPricePredictor] = {}
        self._generations: dict[str, int] = {}
        self._global_generation = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._models)

    def __contains__(self, commodity_id: object) -> bool:
        with self._lock:
            return commodity_id in self._models

    def _generation(self, commodity_id: str) -> int:
        return self._global_generation + self._generations.get(commodity_id, 0)

    def lookup(self, commodity_id: str) -> CacheLookup:
        """Return the cached model (if any) and the key's current generation."""
        with self._lock:
            return CacheLookup(
                model=self._models.get(commodity_id),
                generation=self._generation(commodity_id),
            )

    def publish(
        self,
        commodity_id: str,
        model: MLPPricePredictor,
        generation: int,
    ) -> bool:
        """Insert a trained model unless the key was invalidated meanwhile.

        Args:
            commodity_id: Cache key.
            model: A fully fitted predictor.
            generation: Generation returned by the ``lookup`` that preceded
                training.

        Returns:
            True if the model was cached, False if it was stale and dropped.

        Raises:
            ValueError: If ``model`` is not fitted.
        """
        if not model.is_fitted:
            raise ValueError("Refusing to cache an unfitted predictor.")
        with self._lock:
            if self._generation(commodity_id) != generation:
                logger.info(
                    "Model for '%s' was invalidated during training; not caching it.",
                    commodity_id,
                )
                return False
            self._models[commodity_id] = model
        return True

    def discard(self, commodity_id: str, model: MLPPricePredictor) -> bool:
        """Evict ``model`` if it is the one currently cached for the key.

        Used when a model faults at inference time. Leaves a newer model
        published by another call untouched and does not bump the generation.

        Returns:
            True if the model was evicted.
        """
        with self._lock:
            if self._models.get(commodity_id) is not model:
                return False
            del self._models[commodity_id]
        logger.info("Discarded faulty model for '%s'.", commodity_id)
        return True

    def invalidate(self, commodity_id: Optional[str] = None) -> int:
        """Evict one cached model, or all of them.

        Bumps the generation of the affected key(s) so that models still
        being trained against the old history are not published.

        Args:
            commodity_id: Key to evict; ``None`` evicts everything.

        Returns:
            Number of models evicted.
        """
        with self._lock:
            if commodity_id is None:
                evicted = list(self._models.values())
                self._models.clear()
                self._global_generation += 1
            else:
                model = self._models.pop(commodity_id, None)
                evicted = [model] if model is not None else []
                self._generations[commodity_id] = self._generations.get(commodity_id, 0) + 1

        logger.info(
            "Model cache invalidated: key=%s evicted=%d",
            commodity_id if commodity_id is not None else "*", len(evicted),
        )
        return len(evicted)
