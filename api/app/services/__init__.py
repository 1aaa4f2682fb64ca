"""
Business logic services.

Provides:
- Replicate API client
- Schema translation and version listing
- Prediction submission and polling
- Ordered batch orchestration
"""

from .errors import (
    InferenceJobError,
    RemoteServiceError,
    SubmissionError,
    PollingError,
    PollingTransportError,
    PollingTimeoutError,
    PredictionFailedError,
    PredictionCanceledError,
)
from .replicate_client import ReplicateClient
from .schema_translator import (
    coerce_type,
    list_properties,
    resolve_value,
    build_input,
    resolve_input_schema,
    list_versions,
)
from .prediction_job import PredictionJob, PredictionStatus, PollState, submit, wait_for_completion
from .batch_runner import run_inference_job

__all__ = [
    "InferenceJobError",
    "RemoteServiceError",
    "SubmissionError",
    "PollingError",
    "PollingTransportError",
    "PollingTimeoutError",
    "PredictionFailedError",
    "PredictionCanceledError",
    "ReplicateClient",
    "coerce_type",
    "list_properties",
    "resolve_value",
    "build_input",
    "resolve_input_schema",
    "list_versions",
    "PredictionJob",
    "PredictionStatus",
    "PollState",
    "submit",
    "wait_for_completion",
    "run_inference_job"
]
