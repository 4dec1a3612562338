"""HTTP client for the Pulse API."""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx

from core.src.errors import ApiError
from core.src.models import PipelineExecution

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "http://localhost:8000"


class PulseClient:
    def __init__(self, server: str = DEFAULT_SERVER, timeout: float = 10.0, transport: Optional[httpx.BaseTransport] = None):
        self.server = server.rstrip("/")
        self._client = httpx.Client(base_url=self.server, timeout=timeout, transport=transport)

    def close(self):
        self._client.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        logger.debug(f"{method} {self.server}{path}")
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(f"Cannot reach Pulse server at {self.server}: {e}")

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            detail = body.get("detail", response.text) if isinstance(body, dict) else response.text
            raise ApiError(f"{detail} (HTTP {response.status_code})", status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    def register_repo(self, repo_url: str, pulsefile: str, repo_type: str = "github") -> Dict[str, Any]:
        return self._request(
            "POST",
            "/api/repos",
            json={"repo_url": repo_url, "pulsefile": pulsefile, "repo_type": repo_type},
        )

    def unregister_repo(self, repo_identifier: str):
        self._request("DELETE", f"/api/repos/{repo_identifier}")

    def list_repos(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/repos")

    def list_executions(self, limit: int = 20, status: Optional[str] = None) -> List[PipelineExecution]:
        params: Dict[str, Any] = {"limit": limit}
        if status:
            params["status"] = status
        data = self._request("GET", "/api/executions", params=params)
        return [PipelineExecution.model_validate(item) for item in data]

    def get_execution(self, execution_id: UUID) -> PipelineExecution:
        return PipelineExecution.model_validate(self._request("GET", f"/api/executions/{execution_id}"))

    def pipeline_status(self, repo_identifier: str, limit: int = 10) -> List[PipelineExecution]:
        data = self._request("GET", f"/api/pipelines/{repo_identifier}/status", params={"limit": limit})
        return [PipelineExecution.model_validate(item) for item in data]

    def trigger(self, repo_identifier: str, branch: Optional[str] = None) -> Dict[str, Any]:
        return self._request("POST", "/api/pipelines/run", json={"repository": repo_identifier, "branch": branch})

    def get_job(self, job_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/jobs/{job_id}")
