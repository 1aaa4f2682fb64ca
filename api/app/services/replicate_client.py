from __future__ import annotations
from typing import Any, Dict, List, Optional
import httpx
from app import __version__
from app.config import REPLICATE_API_BASE, REPLICATE_API_TOKEN, HTTP_TIMEOUT_SECONDS
from app.models.schemas import validate_model_name
from app.services.errors import RemoteServiceError
from app.obs.logging_setup import get_logger

logger = get_logger(__name__)

class ReplicateClient:
    """Async client for the Replicate HTTP API.

    Owns one ``httpx.AsyncClient``; use it as an async context manager or
    call ``aclose()`` so pooled connections are released on every exit path.

    Prediction calls (``create_prediction``, ``get_prediction``) let
    ``httpx`` errors propagate so the job client can apply its own policy.
    Registry calls wrap failures in ``RemoteServiceError``.
    """

    def __init__(
        self,
        api_token: Optional[str] = None,
        base_url: str = REPLICATE_API_BASE,
        timeout_seconds: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        token = api_token if api_token is not None else REPLICATE_API_TOKEN
        headers = {
            "Accept": "application/json",
            "User-Agent": f"replicate-runner/{__version__}",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            logger.warning("No Replicate API token configured, requests will be unauthenticated")

        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def __aenter__(self) -> "ReplicateClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def is_closed(self) -> bool:
        return self._http.is_closed

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    async def create_prediction(self, version: str, inputs: Dict[str, Any]) -> Dict[str, Any]:
        """POST a new prediction and return the decoded response body."""
        response = await self._http.post(
            "/predictions",
            json={"version": version, "input": inputs},
        )
        response.raise_for_status()
        return _json_object(response)

    async def get_prediction(self, status_url: str) -> Dict[str, Any]:
        """GET a prediction by the status URL returned at submission."""
        response = await self._http.get(status_url)
        response.raise_for_status()
        return _json_object(response)

    # ------------------------------------------------------------------
    # Model registry
    # ------------------------------------------------------------------

    async def get_model_version(self, model_name: str, version: str) -> Dict[str, Any]:
        """Fetch a model version document, including its OpenAPI schema."""
        model_name = validate_model_name(model_name)
        return await self._registry_get(f"/models/{model_name}/versions/{version}")

    async def list_model_versions(self, model_name: str) -> List[Dict[str, Any]]:
        """Fetch every published version of a model, following pagination."""
        model_name = validate_model_name(model_name)
        versions: List[Dict[str, Any]] = []
        url: Optional[str] = f"/models/{model_name}/versions"
        seen_pages = set()

        while url and url not in seen_pages:
            seen_pages.add(url)
            page = await self._registry_get(url)
            versions.extend(page.get("results") or [])
            url = page.get("next")

        logger.debug("Listed model versions", model=model_name, count=len(versions))
        return versions

    async def _registry_get(self, url: str) -> Dict[str, Any]:
        try:
            response = await self._http.get(url)
            response.raise_for_status()
            return _json_object(response)
        except httpx.HTTPStatusError as e:
            logger.error("Registry request rejected", url=url, status_code=e.response.status_code)
            raise RemoteServiceError(
                f"remote service returned HTTP {e.response.status_code}",
                cause=e,
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Registry request failed", url=url, error=str(e))
            raise RemoteServiceError("error getting data from remote service", cause=e) from e

def _json_object(response: httpx.Response) -> Dict[str, Any]:
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object from {response.request.url}, got {type(data).__name__}")
    return data
