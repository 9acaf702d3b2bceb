from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from qa2index.ingest.models import EntityId

DocKind = Literal["question", "answer", "comment"]

DOC_TYPE = "qeta"


class Document(BaseModel):
    """One index-ready unit handed to the search pipeline."""
    kind: DocKind
    title: str = ""
    text: str
    location: str
    doc_type: str = DOC_TYPE
    question_id: EntityId
    answer_id: Optional[EntityId] = None
    author: Optional[str] = None
    score: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    answer_count: Optional[int] = None
    views: Optional[int] = None
    created: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
