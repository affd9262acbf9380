"""
Background sweep workers and their client.
"""

from .client import (
    CANCELLED,
    EvaluationCancelled,
    VolumeWorkerInstance,
    WorkerInstance,
    cancel_evaluation,
    cancel_volume_evaluation,
    create_volume_worker_instance,
    create_worker_instance,
    evaluate_in_worker,
    evaluate_volume_in_worker,
)

__all__ = ['CANCELLED', 'EvaluationCancelled', 'WorkerInstance', 'VolumeWorkerInstance',
           'create_worker_instance', 'create_volume_worker_instance',
           'evaluate_in_worker', 'cancel_evaluation', 'evaluate_volume_in_worker', 'cancel_volume_evaluation']
