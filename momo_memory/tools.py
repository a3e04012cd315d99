"""
User-invoked Momo tools.

These are the operations an agent (or the CLI) calls explicitly: storing,
searching, listing and forgetting memories, viewing the profile, and feeding
text, URLs and files through the document pipeline. Unlike the background
hooks, failures here are reported to the caller.
"""

import json
import os
from typing import Any, Callable, Dict, Optional, Tuple

from .client import MemoryBackend
from .logger import logger, log_tool_call
from .memory.ingestion import DEFAULT_INGEST_TIMEOUT_MS, DEFAULT_POLL_INTERVAL_MS, IngestionPoller
from .memory.privacy import is_fully_private, strip_private_content
from .memory.tags import ContainerTags
from .models import IngestionJob

MODES = ("help", "add", "search", "profile", "list", "forget")
SCOPES = ("user", "project")
MEMORY_TYPES = ("fact", "preference", "episode")
INPUT_TYPES = ("auto", "text", "url", "file")

HELP_TEXT = """**Momo Memory Commands**

| Mode | Description |
|------|-------------|
| `help` | Show this help message |
| `add` | Store a memory (requires `content`) |
| `search` | Search memories (requires `query`) |
| `profile` | View your computed user profile |
| `list` | List recent memories |
| `forget` | Forget a memory by ID (requires `memory_id`) |

**Scopes:** `user` (personal across projects) or `project` (current project only). Defaults vary by mode.

**Memory Types (for add):** `fact`, `preference`, `episode`

**Examples:**
- `momo(mode="add", content="User prefers dark mode", scope="user", memory_type="preference")`
- `momo(mode="search", query="database schema")`
- `momo(mode="forget", memory_id="mem_abc123")`
"""


class ToolError(Exception):
    """Custom exception for tool failures."""
    pass


class NotConfiguredError(ToolError):
    """Raised when a tool needs the backend but no API key is configured."""

    def __init__(self):
        super().__init__(
            "Momo is not configured. Set MOMO_API_KEY or configure "
            "~/.config/opencode/momo.jsonc (or project-local .momo.jsonc)."
        )


def truncate(value: str, max_length: int = 600) -> str:
    if len(value) <= max_length:
        return value
    return value[:max_length] + "..."


def infer_input_type(value: str, input_type: Optional[str] = None) -> str:
    """Resolve "auto": http(s) URLs are urls, existing paths are files, anything else is text."""
    if input_type and input_type != "auto":
        return input_type
    if value.startswith("http://") or value.startswith("https://"):
        return "url"
    if os.path.exists(value):
        return "file"
    return "text"


def parse_metadata_json(metadata_json: Optional[str]) -> Tuple[Dict[str, Any], Optional[str]]:
    """Parse a metadata JSON object string. Returns (metadata, error message)."""
    if not metadata_json:
        return {}, None
    try:
        parsed = json.loads(metadata_json)
    except ValueError as e:
        return {}, f"Invalid metadata_json: {e}"
    if not isinstance(parsed, dict):
        return {}, "metadata_json must be a JSON object"
    return parsed, None


def _lines(*lines: Optional[str]) -> str:
    return "\n".join(line for line in lines if line)


class MomoTools:
    """Tool implementations bound to one backend client and one set of container tags."""

    def __init__(
        self,
        client: Optional[MemoryBackend],
        tags: ContainerTags,
        poller: Optional[IngestionPoller] = None,
    ):
        """
        Args:
            client: Backend client, or None when the plugin is not configured
            tags: Container tags used to resolve scopes
            poller: Ingestion poller (built from the client if omitted)
        """
        self.client = client
        self.tags = tags
        self.poller = poller or (IngestionPoller(client) if client else None)

    def require_client(self) -> MemoryBackend:
        if self.client is None:
            raise NotConfiguredError()
        return self.client

    def registry(self) -> Dict[str, Callable[..., str]]:
        return {
            "momo": self.momo,
            "momo_ingest": self.ingest,
            "momo_ocr": self.ocr,
            "momo_transcribe": self.transcribe,
        }

    # ------------------------------------------------------------------
    # momo tool
    # ------------------------------------------------------------------
    def momo(
        self,
        mode: str,
        content: Optional[str] = None,
        query: Optional[str] = None,
        scope: Optional[str] = None,
        memory_type: Optional[str] = None,
        memory_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> str:
        """Interact with Momo long-term memory. Modes: help, add, search, profile, list, forget."""
        if scope is not None and scope not in SCOPES:
            return f"Error: scope must be one of {', '.join(SCOPES)}."

        if mode == "help":
            return HELP_TEXT
        if mode == "add":
            return self._add(content, scope, memory_type)
        if mode == "search":
            return self._search(query, scope, limit)
        if mode == "profile":
            return self._profile(scope)
        if mode == "list":
            return self._list(scope, limit)
        if mode == "forget":
            return self._forget(memory_id)
        return "Unknown mode. Use 'help' to see available commands."

    def _add(self, content: Optional[str], scope: Optional[str], memory_type: Optional[str]) -> str:
        client = self.require_client()
        if not content:
            return "Error: 'content' is required for add mode."
        if memory_type is not None and memory_type not in MEMORY_TYPES:
            return f"Error: memory_type must be one of {', '.join(MEMORY_TYPES)}."
        if is_fully_private(content):
            return "Error: Content is entirely private (wrapped in <private> tags). Nothing to store."

        scope = scope or "project"
        memory_id = client.create_memory(
            strip_private_content(content),
            self.tags.resolve(scope),
            memory_type=memory_type,
        )
        return f"Memory stored successfully (ID: {memory_id}, scope: {scope})."

    def _search(self, query: Optional[str], scope: Optional[str], limit: Optional[int]) -> str:
        client = self.require_client()
        if not query:
            return "Error: 'query' is required for search mode."

        container_tags = [self.tags.resolve(scope)] if scope else [self.tags.user, self.tags.project]
        results = client.search(query, container_tags, limit=limit or 10, mode="hybrid")
        if not results:
            return "No memories found matching your query."

        formatted = "\n".join(
            f"{i}. {r.content or '(no content)'} (score: {r.relevance:.2f})"
            for i, r in enumerate(results, 1)
        )
        return f"Found {len(results)} memories:\n\n{formatted}"

    def _profile(self, scope: Optional[str]) -> str:
        client = self.require_client()
        profile = client.compute_profile(
            self.tags.resolve(scope or "user"),
            include_dynamic=True,
            generate_narrative=True,
        )
        if profile.is_empty:
            return "No profile data available yet. Add some memories first."

        parts = []
        if profile.narrative:
            parts.append(f"**Summary:**\n{profile.narrative}")
        if profile.static_facts:
            facts = "\n".join(f"- {f.content}" for f in profile.static_facts)
            parts.append(f"**Known Facts:**\n{facts}")
        if profile.dynamic_facts:
            signals = "\n".join(f"- {f.content}" for f in profile.dynamic_facts)
            parts.append(f"**Recent Signals:**\n{signals}")
        return "\n\n".join(parts)

    def _list(self, scope: Optional[str], limit: Optional[int]) -> str:
        client = self.require_client()
        scope = scope or "project"
        memories = client.list_memories(self.tags.resolve(scope), limit=limit or 20)
        if not memories:
            return f"No memories found for scope '{scope}'."

        formatted = "\n".join(
            f"{i}. {m.content}{f' [{m.memory_type}]' if m.memory_type else ''} ({m.id})"
            for i, m in enumerate(memories, 1)
        )
        return f"{len(memories)} memories (scope: {scope}):\n\n{formatted}"

    def _forget(self, memory_id: Optional[str]) -> str:
        client = self.require_client()
        if not memory_id:
            return "Error: 'memory_id' is required for forget mode."
        client.forget_memory(memory_id)
        return f"Memory {memory_id} has been forgotten."

    # ------------------------------------------------------------------
    # Document pipeline tools
    # ------------------------------------------------------------------
    def ingest(
        self,
        input: str,
        input_type: Optional[str] = None,
        scope: Optional[str] = None,
        extract_memories: bool = True,
        metadata_json: Optional[str] = None,
        content_type: Optional[str] = None,
        wait: bool = True,
        timeout_ms: Optional[int] = None,
        poll_interval_ms: Optional[int] = None,
    ) -> str:
        """Ingest text, a URL or a local file through Momo's document pipeline."""
        client = self.require_client()
        if input_type is not None and input_type not in INPUT_TYPES:
            return f"Error: input_type must be one of {', '.join(INPUT_TYPES)}."
        if scope is not None and scope not in SCOPES:
            return f"Error: scope must be one of {', '.join(SCOPES)}."

        metadata, error = parse_metadata_json(metadata_json)
        if error:
            return f"Error: {error}"

        scope = scope or "project"
        timeout_ms = timeout_ms or DEFAULT_INGEST_TIMEOUT_MS
        inferred = infer_input_type(input, input_type)
        container_tag = self.tags.resolve(scope)

        if inferred == "file":
            job = client.upload_document(
                input,
                container_tag,
                extract_memories=extract_memories,
                content_type=content_type,
                metadata=metadata,
                timeout_ms=timeout_ms,
            )
        else:
            job = client.create_document(
                input,
                container_tag,
                extract_memories=extract_memories,
                content_type=content_type,
                metadata=metadata,
                timeout_ms=timeout_ms,
            )

        return self._finish_ingestion(
            job,
            label="Ingestion",
            scope=scope,
            extract_memories=extract_memories,
            wait=wait,
            timeout_ms=timeout_ms,
            poll_interval_ms=poll_interval_ms,
            input_type=inferred,
        )

    def ocr(self, file_path: str, **kwargs) -> str:
        """OCR an image file via Momo ingestion."""
        return self._upload_file(file_path, label="OCR ingestion", extractor="ocr", **kwargs)

    def transcribe(self, file_path: str, **kwargs) -> str:
        """Transcribe an audio or video file via Momo ingestion."""
        return self._upload_file(file_path, label="Transcription", extractor="transcription", **kwargs)

    def _upload_file(
        self,
        file_path: str,
        label: str,
        extractor: str,
        scope: Optional[str] = None,
        extract_memories: bool = True,
        wait: bool = True,
        timeout_ms: Optional[int] = None,
        poll_interval_ms: Optional[int] = None,
        content_type: Optional[str] = None,
    ) -> str:
        client = self.require_client()
        if scope is not None and scope not in SCOPES:
            return f"Error: scope must be one of {', '.join(SCOPES)}."

        scope = scope or "project"
        timeout_ms = timeout_ms or DEFAULT_INGEST_TIMEOUT_MS
        job = client.upload_document(
            file_path,
            self.tags.resolve(scope),
            extract_memories=extract_memories,
            content_type=content_type,
            timeout_ms=timeout_ms,
        )
        return self._finish_ingestion(
            job,
            label=label,
            scope=scope,
            extract_memories=extract_memories,
            wait=wait,
            timeout_ms=timeout_ms,
            poll_interval_ms=poll_interval_ms,
            extractor=extractor,
        )

    def _finish_ingestion(
        self,
        job: IngestionJob,
        label: str,
        scope: str,
        extract_memories: bool,
        wait: bool,
        timeout_ms: int,
        poll_interval_ms: Optional[int],
        input_type: Optional[str] = None,
        extractor: Optional[str] = None,
    ) -> str:
        input_line = f"- inputType: {input_type}" if input_type else None

        if not wait:
            return _lines(
                f"{label} queued (scope: {scope}).",
                input_line,
                f"- documentId: {job.document_id}",
                f"- ingestionId: {job.ingestion_id}",
                f"- extractMemories: {str(extract_memories).lower()}",
            )

        status = self.poller.await_terminal(
            job.ingestion_id,
            timeout_ms=timeout_ms,
            poll_interval_ms=poll_interval_ms or DEFAULT_POLL_INTERVAL_MS,
        )
        if status.status != "completed":
            return _lines(
                f"{label} status: {status.status} (scope: {scope}).",
                input_line,
                f"- documentId: {job.document_id}",
                f"- ingestionId: {job.ingestion_id}",
                f"- title: {status.title}" if status.title else None,
            )

        return self.format_document_result(job.document_id, scope, extractor)

    def format_document_result(self, document_id: str, scope: str, extractor: Optional[str] = None) -> str:
        """Summarize a finished document. Falls back to the bare ID if the lookup fails."""
        client = self.require_client()
        extractor_line = f"- extractor: {extractor}" if extractor else None
        try:
            doc = client.get_document(document_id)
        except Exception as e:
            logger.debug(f"[tools] Document lookup failed for {document_id}: {e}")
            return _lines(
                f"Document ready (scope: {scope}).",
                f"- documentId: {document_id}",
                extractor_line,
            )

        return _lines(
            f"Document ready (scope: {scope}).",
            f"- documentId: {doc.document_id}",
            f"- docType: {doc.doc_type}",
            f"- ingestionStatus: {doc.ingestion_status}",
            extractor_line,
            f"- title: {doc.title}" if doc.title else None,
            f"- notes: {doc.error_message}" if doc.error_message else None,
            f"- extractedTextPreview: {truncate(doc.content, 800)}" if doc.content else None,
        )


def execute_tool(name: str, args: str, tools: Dict[str, Callable[..., str]]) -> Tuple[dict, dict]:
    """Execute a tool by name with JSON-encoded arguments."""
    metadata = {"tool": name}
    try:
        parsed_args = json.loads(args) if args else {}
        if name not in tools:
            return {"error": f"Tool {name} doesn't exist."}, metadata
        output = tools[name](**parsed_args)
        log_tool_call(name, parsed_args, output)
        return {"output": output}, metadata
    except json.JSONDecodeError as e:
        return {"error": f"{name} failed to parse arguments: {str(e)}"}, metadata
    except TypeError as e:
        return {"error": f"Invalid arguments for {name}: {str(e)}"}, metadata
    except ToolError as e:
        return {"error": str(e)}, metadata
    except Exception as e:
        logger.warning(f"[tools] {name} failed: {e}")
        return {"error": str(e)}, metadata
