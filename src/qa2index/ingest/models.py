from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

# Upstream ids are numeric in the qeta API but nothing here depends on that.
EntityId = Union[int, str]


class CommentItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str
    id: Optional[EntityId] = None
    author: Optional[str] = None
    created: Optional[datetime] = None


class AnswerItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: EntityId
    content: str
    comments: List[CommentItem] = Field(default_factory=list)
    author: Optional[str] = None
    score: Optional[int] = 0
    correct: Optional[bool] = False
    created: Optional[datetime] = None


class QuestionItem(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: EntityId
    title: str = ""
    content: str
    answers: List[AnswerItem] = Field(default_factory=list)
    comments: List[CommentItem] = Field(default_factory=list)  # comments on the question itself
    author: Optional[str] = None
    score: Optional[int] = 0
    views: Optional[int] = None
    answers_count: Optional[int] = Field(None, alias="answersCount")
    tags: Optional[List[str]] = Field(default_factory=list)
    created: Optional[datetime] = None


class QuestionsPage(BaseModel):
    """Body of GET <base>/questions."""
    model_config = ConfigDict(extra="ignore")

    questions: List[QuestionItem]
    total: Optional[int] = None


class Page(BaseModel):
    """One fetched page plus where the next one starts (None = no more pages)."""
    questions: List[QuestionItem] = Field(default_factory=list)
    offset: int = 0
    next_cursor: Optional[int] = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None
