from __future__ import annotations
import asyncio
from typing import List, Sequence
from app.config import BATCH_CONCURRENCY
from app.models.schemas import ItemResult, ModelReference, PropertySelection
from app.services.errors import InferenceJobError
from app.services.prediction_job import submit, wait_for_completion
from app.services.schema_translator import build_input
from app.utils.polling import DEFAULT_POLLING_POLICY, PollingPolicy, SleepFunc, default_sleep
from app.obs.decorators import monitor_errors, traced
from app.obs.prometheus_metrics import prometheus_metrics
from app.obs.logging_setup import get_logger

logger = get_logger(__name__)

async def run_item(
    client,
    model_ref: ModelReference,
    item_index: int,
    selections: Sequence[PropertySelection],
    policy: PollingPolicy = DEFAULT_POLLING_POLICY,
    sleep: SleepFunc = default_sleep,
) -> ItemResult:
    """Submit one item and wait for its prediction to succeed."""
    inputs = build_input(selections)
    try:
        job = await submit(client, model_ref.version, inputs, model=model_ref.name)
        payload = await wait_for_completion(client, job, policy=policy, sleep=sleep)
    except InferenceJobError as e:
        e.item_index = item_index
        raise
    return ItemResult(item_index=item_index, payload=payload)

@traced("inference.run_job")
@monitor_errors("inference_batch_errors_total")
async def run_inference_job(
    client,
    model_ref: ModelReference,
    items: Sequence[Sequence[PropertySelection]],
    policy: PollingPolicy = DEFAULT_POLLING_POLICY,
    concurrency: int = BATCH_CONCURRENCY,
    sleep: SleepFunc = default_sleep,
) -> List[ItemResult]:
    """Run one prediction per item and return the payloads in item order.

    The first fatal error aborts the whole batch and nothing is returned for
    items that already succeeded. With ``concurrency`` above 1, up to that many
    items are in flight at once and the rest are cancelled on failure.
    """
    logger.info("Starting inference batch",
                model=model_ref.name,
                version=model_ref.version,
                item_count=len(items),
                concurrency=concurrency)
    try:
        if concurrency <= 1 or len(items) <= 1:
            results = await _run_sequential(client, model_ref, items, policy, sleep)
        else:
            results = await _run_concurrent(client, model_ref, items, policy, sleep, concurrency)
    except InferenceJobError as e:
        prometheus_metrics.record_batch("failed")
        logger.error("Inference batch aborted",
                     model=model_ref.name,
                     item_index=getattr(e, "item_index", None),
                     error=e.message)
        raise

    prometheus_metrics.record_batch("succeeded")
    logger.info("Inference batch finished", model=model_ref.name, item_count=len(results))
    return results

async def _run_sequential(client, model_ref, items, policy, sleep) -> List[ItemResult]:
    results: List[ItemResult] = []
    for index, selections in enumerate(items):
        results.append(await run_item(client, model_ref, index, selections, policy, sleep))
    return results

async def _run_concurrent(client, model_ref, items, policy, sleep, concurrency) -> List[ItemResult]:
    semaphore = asyncio.Semaphore(concurrency)

    async def bounded(index: int, selections: Sequence[PropertySelection]) -> ItemResult:
        async with semaphore:
            return await run_item(client, model_ref, index, selections, policy, sleep)

    tasks = [
        asyncio.create_task(bounded(index, selections))
        for index, selections in enumerate(items)
    ]
    try:
        # gather preserves task order regardless of completion order
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
