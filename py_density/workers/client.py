"""
Background evaluation client with synchronous fallback.

Each client instance owns one lazily created single-thread executor. Requests
are single-flight: ``evaluate`` supersedes whatever the instance had in
flight, and the superseded future fails with ``EvaluationCancelled``.

Cancellation only discards. A sweep already running on the worker thread
runs to completion and its result is dropped.

Transport faults never reach the caller. If the executor cannot be created,
the instance evaluates synchronously from then on. A worker error or a
timeout recomputes the sweep synchronously and resolves the future with that
result. Only an exception from the synchronous recomputation itself is
set on the future.
"""

import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np
import structlog
from pydantic import BaseModel

from ..config import settings
from ..core.grid import DensityGridResult, evaluate_density_grid
from ..core.volume import VolumeResult, evaluate_density_volume
from . import density_worker, volume_worker
from .messages import DensityWorkerRequest, VolumeWorkerRequest

logger = structlog.get_logger()

CANCELLED = "cancelled"


class EvaluationCancelled(Exception):
    """Control signal for a superseded or cancelled request; compare ``str(exc) == CANCELLED``."""

    def __init__(self, reason: str = CANCELLED):
        super().__init__(reason)
        self.reason = reason


@dataclass
class _Flight:
    future: Future
    message: Dict[str, Any]
    timer: Optional[threading.Timer] = None


class _SweepClient(ABC):
    """Shared single-flight / timeout / fallback machinery."""

    request_model = BaseModel
    thread_name = "density-worker"

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = settings.worker_timeout_seconds if timeout is None else timeout
        self._executor: Optional[ThreadPoolExecutor] = None
        self._sync_only = False
        self._lock = threading.Lock()
        self._pending: Optional[_Flight] = None

    # Hooks

    @abstractmethod
    def _post(self, message: Dict[str, Any]) -> Dict[str, Any]:
        """Run the worker entry point on the executor thread."""

    @abstractmethod
    def _evaluate_sync(self, message: Dict[str, Any]):
        """Recompute the sweep on the calling thread."""

    @abstractmethod
    def _to_result(self, response: Mapping[str, Any]):
        """Build the result object from a successful worker response."""

    # Public API

    @property
    def is_synchronous(self) -> bool:
        """True once executor creation has failed for this instance."""
        return self._sync_only

    def evaluate(self, params: Union[Mapping[str, Any], BaseModel]) -> Future:
        """
        Start a sweep and return a future for its result.

        ``params`` is a request model or a mapping with the wire keys; an
        invalid mapping raises ``pydantic.ValidationError`` here.
        """
        message = self._serialize(params)
        self.cancel()

        future: Future = Future()
        # Running futures cannot be cancelled through Future.cancel(); use self.cancel()
        future.set_running_or_notify_cancel()

        executor = self._get_executor()
        if executor is None:
            self._resolve_now(future, message)
            return future

        flight = _Flight(future, message)
        with self._lock:
            self._pending = flight

        try:
            job = executor.submit(self._post, message)
        except RuntimeError as e:
            logger.warning("Worker unavailable, evaluating synchronously", worker=self.thread_name, error=str(e))
            self._sync_only = True
            self._fallback(flight)
            return future

        flight.timer = threading.Timer(self.timeout, self._on_timeout, args=(flight,))
        flight.timer.daemon = True
        flight.timer.start()
        job.add_done_callback(lambda done: self._on_worker_done(flight, done))
        return future

    def cancel(self) -> None:
        """Fail the in-flight future with ``EvaluationCancelled``; the worker is not interrupted."""
        with self._lock:
            flight, self._pending = self._pending, None
        if flight is None:
            return
        if flight.timer is not None:
            flight.timer.cancel()
        flight.future.set_exception(EvaluationCancelled())

    def close(self) -> None:
        self.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    # Internals

    def _serialize(self, params: Union[Mapping[str, Any], BaseModel]) -> Dict[str, Any]:
        if isinstance(params, self.request_model):
            request = params
        else:
            request = self.request_model.model_validate(params)
        return request.model_dump(by_alias=True)

    def _get_executor(self) -> Optional[ThreadPoolExecutor]:
        if self._sync_only:
            return None
        if self._executor is None:
            try:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=self.thread_name)
            except (RuntimeError, OSError) as e:
                logger.warning("Worker construction failed, falling back to synchronous evaluation",
                               worker=self.thread_name, error=str(e))
                self._sync_only = True
                return None
        return self._executor

    def _take(self, flight: _Flight) -> bool:
        """Claim ``flight`` for settlement; False if it was superseded, cancelled or already settled."""
        with self._lock:
            if self._pending is not flight:
                return False
            self._pending = None
        if flight.timer is not None:
            flight.timer.cancel()
        return True

    def _is_current(self, flight: _Flight) -> bool:
        with self._lock:
            return self._pending is flight

    def _resolve_now(self, future: Future, message: Dict[str, Any]) -> None:
        try:
            result = self._evaluate_sync(message)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    def _fallback(self, flight: _Flight) -> None:
        try:
            result = self._evaluate_sync(flight.message)
        except Exception as e:
            if self._take(flight):
                flight.future.set_exception(e)
            return
        if self._take(flight):
            flight.future.set_result(result)

    def _on_timeout(self, flight: _Flight) -> None:
        if not self._is_current(flight):
            return
        logger.warning("Worker timed out, evaluating synchronously", worker=self.thread_name, timeout=self.timeout)
        self._fallback(flight)

    def _on_worker_done(self, flight: _Flight, job: Future) -> None:
        if not self._is_current(flight):
            return
        try:
            response = job.result()
        except Exception as e:
            logger.warning("Worker raised, evaluating synchronously", worker=self.thread_name, error=str(e))
            self._fallback(flight)
            return
        if "error" in response:
            logger.warning("Worker reported an error, evaluating synchronously",
                           worker=self.thread_name, error=response["error"])
            self._fallback(flight)
            return
        if self._take(flight):
            flight.future.set_result(self._to_result(response))


class WorkerInstance(_SweepClient):
    """Independent grid-sweep client with its own evaluate/cancel pair."""

    request_model = DensityWorkerRequest
    thread_name = "density-worker"

    def _post(self, message):
        return density_worker.handle_message(message)

    def _evaluate_sync(self, message):
        request = DensityWorkerRequest.model_validate(message)
        return evaluate_density_grid(
            request.nodes,
            request.edges,
            request.resolution,
            request.range_min,
            request.range_max,
            request.y_level,
            request.root_node_id,
            request.evaluation_options(),
        )

    def _to_result(self, response):
        return DensityGridResult(
            np.asarray(response["values"], dtype=np.float32),
            response["minValue"],
            response["maxValue"],
        )


class VolumeWorkerInstance(_SweepClient):
    """Independent volume-sweep client."""

    request_model = VolumeWorkerRequest
    thread_name = "volume-worker"

    def _post(self, message):
        return volume_worker.handle_message(message)

    def _evaluate_sync(self, message):
        request = VolumeWorkerRequest.model_validate(message)
        return evaluate_density_volume(
            request.nodes,
            request.edges,
            request.resolution,
            request.range_min,
            request.range_max,
            request.y_min,
            request.y_max,
            request.y_slices,
            request.root_node_id,
            request.evaluation_options(),
        )

    def _to_result(self, response):
        return VolumeResult(
            np.asarray(response["densities"], dtype=np.float32),
            response["resolution"],
            response["ySlices"],
            response["minValue"],
            response["maxValue"],
        )


def create_worker_instance(timeout: Optional[float] = None) -> WorkerInstance:
    return WorkerInstance(timeout)


def create_volume_worker_instance(timeout: Optional[float] = None) -> VolumeWorkerInstance:
    return VolumeWorkerInstance(timeout)


# Default instances used by the main preview
_default_instance = WorkerInstance()
_default_volume_instance = VolumeWorkerInstance()


def evaluate_in_worker(params: Union[Mapping[str, Any], DensityWorkerRequest]) -> Future:
    """Evaluate a density grid in the background; supersedes the previous call."""
    return _default_instance.evaluate(params)


def cancel_evaluation() -> None:
    """Cancel the in-flight default grid evaluation; its future fails with ``EvaluationCancelled``."""
    _default_instance.cancel()


def evaluate_volume_in_worker(params: Union[Mapping[str, Any], VolumeWorkerRequest]) -> Future:
    return _default_volume_instance.evaluate(params)


def cancel_volume_evaluation() -> None:
    _default_volume_instance.cancel()
