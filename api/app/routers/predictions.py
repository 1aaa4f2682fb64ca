from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from app.deps.replicate import get_polling_policy, get_replicate_client
from app.models.schemas import ModelReference, RunInferenceRequest, RunInferenceResponse
from app.services.batch_runner import run_inference_job
from app.services.errors import InferenceJobError, PollingTimeoutError
from app.services.replicate_client import ReplicateClient
from app.utils.polling import PollingPolicy
from app.obs.logging_setup import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/predictions", tags=["predictions"])

@router.post("/run", response_model=RunInferenceResponse)
async def run_predictions(
    request: RunInferenceRequest,
    client: ReplicateClient = Depends(get_replicate_client),
    policy: PollingPolicy = Depends(get_polling_policy),
) -> RunInferenceResponse:
    """Run one prediction per item and block until all of them succeed."""
    model_ref = ModelReference(name=request.model, version=request.version)
    try:
        results = await run_inference_job(
            client,
            model_ref,
            [item.properties for item in request.items],
            policy=policy,
        )
    except PollingTimeoutError as e:
        raise HTTPException(status_code=504, detail=e.to_dict()) from e
    except InferenceJobError as e:
        raise HTTPException(status_code=502, detail=e.to_dict()) from e

    return RunInferenceResponse(model=model_ref.name, version=model_ref.version, results=results)
