"""
Read-only projections of Momo backend responses.

The backend speaks camelCase JSON; each dataclass here exposes the fields the
plugin actually consumes and is built with ``from_dict``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class MemoryItem:
    """A stored memory (or a search hit rendered as one)."""

    content: Optional[str] = None
    memory_type: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MemoryItem":
        return cls(
            content=data.get("content"),
            memory_type=data.get("memoryType"),
            id=data.get("memoryId") or data.get("id"),
            created_at=data.get("createdAt"),
        )


@dataclass
class ProfileFact:
    content: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProfileFact":
        return cls(content=data.get("content") or "")


@dataclass
class Profile:
    """Computed user profile as returned by the backend."""

    narrative: Optional[str] = None
    static_facts: List[ProfileFact] = field(default_factory=list)
    dynamic_facts: List[ProfileFact] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        return cls(
            narrative=data.get("narrative"),
            static_facts=[ProfileFact.from_dict(f) for f in data.get("staticFacts") or []],
            dynamic_facts=[ProfileFact.from_dict(f) for f in data.get("dynamicFacts") or []],
        )

    @property
    def is_empty(self) -> bool:
        return not self.narrative and not self.static_facts and not self.dynamic_facts

    def to_profile_data(self) -> "ProfileData":
        return ProfileData(
            summary=self.narrative or None,
            traits=[f.content for f in self.static_facts],
        )


@dataclass
class ProfileData:
    """Profile view used for context formatting: narrative summary plus traits."""

    summary: Optional[str] = None
    traits: List[str] = field(default_factory=list)


@dataclass
class SearchResult:
    """A single hit from hybrid search. Memories carry similarity, documents a score."""

    type: str = "memory"
    content: Optional[str] = None
    similarity: Optional[float] = None
    score: Optional[float] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchResult":
        return cls(
            type=data.get("type") or "memory",
            content=data.get("content"),
            similarity=data.get("similarity"),
            score=data.get("score"),
            id=data.get("memoryId") or data.get("documentId") or data.get("id"),
        )

    @property
    def relevance(self) -> float:
        value = self.similarity if self.type == "memory" else self.score
        return float(value or 0.0)

    def to_memory_item(self) -> MemoryItem:
        return MemoryItem(content=self.content, id=self.id)


@dataclass
class IngestionJob:
    document_id: str
    ingestion_id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IngestionJob":
        return cls(
            document_id=data.get("documentId") or "",
            ingestion_id=data.get("ingestionId") or "",
        )


@dataclass
class IngestionStatus:
    """Status of an ingestion job: pending, processing, completed or failed."""

    status: str
    title: Optional[str] = None
    document_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IngestionStatus":
        return cls(
            status=data.get("status") or "pending",
            title=data.get("title"),
            document_id=data.get("documentId"),
        )


@dataclass
class Document:
    document_id: str
    doc_type: Optional[str] = None
    ingestion_status: Optional[str] = None
    title: Optional[str] = None
    error_message: Optional[str] = None
    content: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        return cls(
            document_id=data.get("documentId") or "",
            doc_type=data.get("docType"),
            ingestion_status=data.get("ingestionStatus"),
            title=data.get("title"),
            error_message=data.get("errorMessage"),
            content=data.get("content"),
        )
