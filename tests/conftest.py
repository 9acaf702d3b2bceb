"""Shared fixtures: the qeta questions payload and a fake requests session."""

from __future__ import annotations

import copy
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from qa2index.ingest.models import Page, QuestionItem

BASE_URL = "http://test-backend/api/qeta"

MOCK_COMMENTS = [{"content": "comment"}]
MOCK_ANSWERS = [{"id": 1, "content": "answer 1", "comments": MOCK_COMMENTS}]
MOCK_QUESTIONS = {
    "questions": [
        {
            "id": 1,
            "title": "question1",
            "content": "question 1 content",
            "answers": MOCK_ANSWERS,
            "comments": MOCK_COMMENTS,
        }
    ]
}


def make_question(qid: int, answers: int = 0, comments: int = 0, answer_comments: int = 0) -> dict[str, Any]:
    return {
        "id": qid,
        "title": f"question{qid}",
        "content": f"question {qid} content",
        "answers": [
            {
                "id": qid * 100 + a,
                "content": f"answer {a} of {qid}",
                "comments": [{"content": f"answer comment {c}"} for c in range(answer_comments)],
            }
            for a in range(answers)
        ],
        "comments": [{"content": f"question comment {c}"} for c in range(comments)],
    }


def make_page(questions: list[dict[str, Any]], offset: int = 0, next_cursor: int | None = None) -> Page:
    return Page(
        questions=[QuestionItem.model_validate(q) for q in questions],
        offset=offset,
        next_cursor=next_cursor,
    )


def json_response(payload: Any, status: int = 200, url: str = BASE_URL + "/questions") -> MagicMock:
    r = MagicMock(spec=requests.Response)
    r.status_code = status
    r.url = url
    r.text = str(payload)
    r.json.return_value = copy.deepcopy(payload)
    if status >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status} Server Error")
    else:
        r.raise_for_status.return_value = None
    return r


@pytest.fixture
def session() -> MagicMock:
    """requests.Session stand-in that serves MOCK_QUESTIONS."""
    s = MagicMock(spec=requests.Session)
    s.get.return_value = json_response(MOCK_QUESTIONS)
    return s


class FakeFetcher:
    """Serves a scripted sequence of pages / exceptions and records cursors."""

    def __init__(self, script: list[Any]):
        self.script = list(script)
        self.cursors: list[int] = []
        self.closed = 0

    def fetch_page(self, cursor: int = 0) -> Page:
        self.cursors.append(cursor)
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed += 1
