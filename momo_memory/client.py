"""
Momo memory backend client.

``MemoryBackend`` is the narrow surface the plugin relies on; ``MomoClient``
implements it over the Momo ``/api/v1`` HTTP API with requests.
"""

import json
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from .logger import logger
from .models import Document, IngestionJob, IngestionStatus, MemoryItem, Profile, SearchResult

DEFAULT_TIMEOUT_S = 30


class MomoError(RuntimeError):
    """Raised when a Momo API call fails (transport error, non-2xx, or error envelope)."""


class MemoryBackend(ABC):
    """Operations the plugin needs from the memory backend."""

    @abstractmethod
    def create_memory(self, content: str, container_tag: str, memory_type: Optional[str] = None) -> str:
        """Store a memory and return its ID."""

    @abstractmethod
    def list_memories(self, container_tag: str, limit: int = 20) -> List[MemoryItem]:
        pass

    @abstractmethod
    def forget_memory(self, memory_id: str) -> None:
        pass

    @abstractmethod
    def search(
        self,
        query: str,
        container_tags: List[str],
        limit: int = 10,
        mode: str = "hybrid",
    ) -> List[SearchResult]:
        pass

    @abstractmethod
    def compute_profile(
        self,
        container_tag: str,
        include_dynamic: bool = True,
        generate_narrative: bool = True,
    ) -> Profile:
        pass

    @abstractmethod
    def create_document(
        self,
        content: str,
        container_tag: str,
        extract_memories: bool = True,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        timeout_ms: Optional[int] = None,
    ) -> IngestionJob:
        pass

    @abstractmethod
    def upload_document(
        self,
        file_path: str,
        container_tag: str,
        extract_memories: bool = True,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        timeout_ms: Optional[int] = None,
    ) -> IngestionJob:
        pass

    @abstractmethod
    def get_document(self, document_id: str) -> Document:
        pass

    @abstractmethod
    def get_ingestion_status(self, ingestion_id: str) -> IngestionStatus:
        pass

    @abstractmethod
    def ingest_conversation(
        self,
        messages: List[Dict[str, str]],
        container_tag: str,
        session_id: str,
        memory_type: str = "episode",
    ) -> None:
        pass


class MomoClient(MemoryBackend):
    """
    HTTP client for the Momo API.

    Every response is expected in the envelope ``{"data": ..., "error": {"message": ...}}``.
    Any failure surfaces as MomoError; callers on best-effort paths catch it.
    """

    API_PREFIX = "/api/v1"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    # ------------------------------------------------------------------
    # Memories
    # ------------------------------------------------------------------
    def create_memory(self, content: str, container_tag: str, memory_type: Optional[str] = None) -> str:
        body: Dict[str, Any] = {"content": content, "containerTag": container_tag}
        if memory_type:
            body["memoryType"] = memory_type
        data = self._request("POST", "/memories", json=body)
        return data.get("memoryId") or data.get("id") or ""

    def list_memories(self, container_tag: str, limit: int = 20) -> List[MemoryItem]:
        data = self._request("GET", "/memories", params={"containerTag": container_tag, "limit": limit})
        return [MemoryItem.from_dict(m) for m in data.get("memories") or []]

    def forget_memory(self, memory_id: str) -> None:
        self._request("DELETE", f"/memories/{memory_id}")

    def search(
        self,
        query: str,
        container_tags: List[str],
        limit: int = 10,
        mode: str = "hybrid",
    ) -> List[SearchResult]:
        body = {"q": query, "containerTags": list(container_tags), "limit": limit, "scope": mode}
        data = self._request("POST", "/search", json=body)
        return [SearchResult.from_dict(r) for r in data.get("results") or []]

    def compute_profile(
        self,
        container_tag: str,
        include_dynamic: bool = True,
        generate_narrative: bool = True,
    ) -> Profile:
        body = {
            "containerTag": container_tag,
            "includeDynamic": include_dynamic,
            "generateNarrative": generate_narrative,
        }
        return Profile.from_dict(self._request("POST", "/profile:compute", json=body))

    # ------------------------------------------------------------------
    # Documents and ingestion
    # ------------------------------------------------------------------
    def create_document(
        self,
        content: str,
        container_tag: str,
        extract_memories: bool = True,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        timeout_ms: Optional[int] = None,
    ) -> IngestionJob:
        body: Dict[str, Any] = {
            "content": content,
            "containerTag": container_tag,
            "extractMemories": extract_memories,
        }
        if content_type:
            body["contentType"] = content_type
        if metadata:
            body["metadata"] = metadata
        data = self._request("POST", "/documents", json=body, timeout=_seconds(timeout_ms))
        return self._ingestion_job(data)

    def upload_document(
        self,
        file_path: str,
        container_tag: str,
        extract_memories: bool = True,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        timeout_ms: Optional[int] = None,
    ) -> IngestionJob:
        form: Dict[str, str] = {
            "containerTag": container_tag,
            "extractMemories": "true" if extract_memories else "false",
        }
        if content_type:
            form["contentType"] = content_type
        if metadata:
            form["metadata"] = json.dumps(metadata)

        try:
            with open(file_path, "rb") as f:
                files = {"file": (os.path.basename(file_path), f)}
                data = self._request(
                    "POST",
                    "/documents:upload",
                    data=form,
                    files=files,
                    timeout=_seconds(timeout_ms),
                )
        except OSError as e:
            raise MomoError(f"Cannot read {file_path}: {e}") from e
        return self._ingestion_job(data)

    def get_document(self, document_id: str) -> Document:
        return Document.from_dict(self._request("GET", f"/documents/{document_id}"))

    def get_ingestion_status(self, ingestion_id: str) -> IngestionStatus:
        return IngestionStatus.from_dict(self._request("GET", f"/ingestions/{ingestion_id}"))

    def ingest_conversation(
        self,
        messages: List[Dict[str, str]],
        container_tag: str,
        session_id: str,
        memory_type: str = "episode",
    ) -> None:
        body = {
            "messages": messages,
            "containerTag": container_tag,
            "sessionId": session_id,
            "memoryType": memory_type,
        }
        self._request("POST", "/conversations:ingest", json=body)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ingestion_job(self, data: Dict[str, Any]) -> IngestionJob:
        job = IngestionJob.from_dict(data)
        if not job.document_id or not job.ingestion_id:
            raise MomoError("Ingestion response missing documentId/ingestionId")
        return job

    def _request(self, method: str, path: str, timeout: Optional[float] = None, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{self.API_PREFIX}{path}"
        try:
            response = self.session.request(method, url, timeout=timeout or self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise MomoError(f"Request to {path} timed out") from e
        except requests.exceptions.RequestException as e:
            raise MomoError(f"Request to {path} failed: {e}") from e

        try:
            payload = response.json() if response.content else {}
        except ValueError:
            payload = {}

        error = payload.get("error") if isinstance(payload, dict) else None
        if not response.ok or error:
            message = (error or {}).get("message") if isinstance(error, dict) else None
            message = message or f"{method} {path} failed with status {response.status_code}"
            logger.debug(f"[client] {message}")
            raise MomoError(message)

        if not isinstance(payload, dict):
            return {}
        data = payload.get("data", payload)
        return data if isinstance(data, dict) else {}


def _seconds(timeout_ms: Optional[int]) -> Optional[float]:
    return timeout_ms / 1000 if timeout_ms else None
