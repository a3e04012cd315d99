"""
Function-calling schemas for the Momo tools.
"""

from .tools import INPUT_TYPES, MEMORY_TYPES, MODES, SCOPES

_SCOPE = {
    "type": "string",
    "enum": list(SCOPES),
    "description": "Memory/document scope: 'user' (personal) or 'project' (current project)",
}

_WAIT_ARGS = {
    "extract_memories": {
        "type": "boolean",
        "description": "Whether to extract memories from ingested content (default: true)",
    },
    "wait": {
        "type": "boolean",
        "description": "Wait for ingestion to finish before returning (default: true)",
    },
    "timeout_ms": {
        "type": "integer",
        "description": "Max wait timeout in milliseconds (default: 120000)",
    },
    "poll_interval_ms": {
        "type": "integer",
        "description": "Polling interval while waiting (default: 1500)",
    },
    "content_type": {
        "type": "string",
        "description": "Optional content type hint (e.g. image/png, audio/mpeg)",
    },
}


def _function(name: str, description: str, properties: dict, required: list) -> dict:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


tools_schemas = [
    _function(
        "momo",
        "Interact with Momo long-term memory. Modes: help, add, search, profile, list, forget.",
        {
            "mode": {"type": "string", "enum": list(MODES), "description": "The action to perform"},
            "content": {"type": "string", "description": "Content to store (required for 'add' mode)"},
            "query": {"type": "string", "description": "Search query (required for 'search' mode)"},
            "scope": {**_SCOPE, "description": _SCOPE["description"] + ". Defaults vary by mode."},
            "memory_type": {
                "type": "string",
                "enum": list(MEMORY_TYPES),
                "description": "Memory classification (for 'add' mode): fact, preference, or episode",
            },
            "memory_id": {"type": "string", "description": "Memory ID to forget (required for 'forget' mode)"},
            "limit": {"type": "integer", "description": "Max results to return (for 'search' and 'list' modes)"},
        },
        ["mode"],
    ),
    _function(
        "momo_ingest",
        "Ingest text, URLs, and files through Momo's document pipeline (RAG + optional memory extraction).",
        {
            "input": {"type": "string", "description": "Text, URL, or local file path to ingest"},
            "input_type": {
                "type": "string",
                "enum": list(INPUT_TYPES),
                "description": "How to interpret input (default: auto)",
            },
            "scope": _SCOPE,
            "metadata_json": {"type": "string", "description": "Optional JSON object string attached as metadata"},
            **_WAIT_ARGS,
        },
        ["input"],
    ),
    _function(
        "momo_ocr",
        "OCR an image file via Momo ingestion, then return extracted text preview and memory extraction status.",
        {
            "file_path": {"type": "string", "description": "Local path to an image file"},
            "scope": _SCOPE,
            **_WAIT_ARGS,
        },
        ["file_path"],
    ),
    _function(
        "momo_transcribe",
        "Transcribe audio/video files via Momo ingestion, then return transcript preview and memory extraction status.",
        {
            "file_path": {"type": "string", "description": "Local path to an audio or video file"},
            "scope": _SCOPE,
            **_WAIT_ARGS,
        },
        ["file_path"],
    ),
]
