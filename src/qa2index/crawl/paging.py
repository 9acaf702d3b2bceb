from typing import Any, Dict, Optional
from pydantic import ValidationError

from qa2index.crawl.errors import MalformedPayloadError
from qa2index.ingest.models import Page, QuestionsPage


def page_params(offset: int, page_size: int) -> Dict[str, Any]:
    return {
        "limit": page_size,
        "offset": offset,
        "includeAnswers": "true",
        "includeComments": "true",
        "orderBy": "created",
        "order": "asc",
    }


def next_cursor(offset: int, count: int, page_size: int, total: Optional[int]) -> Optional[int]:
    """Where the next page starts, or None when this was the last one.

    An explicit ``total`` wins; without it a short page ends the run.
    An empty page always ends it so the cursor can't stall.
    """
    if count == 0:
        return None
    nxt = offset + count
    if total is not None:
        return nxt if nxt < total else None
    return nxt if count >= page_size else None


def to_page(data: Any, offset: int, page_size: int, url: Optional[str] = None) -> Page:
    if not isinstance(data, dict):
        raise MalformedPayloadError(f"expected a JSON object, got {type(data).__name__} :: url={url}", url=url)
    try:
        body = QuestionsPage.model_validate(data)
    except ValidationError as e:
        raise MalformedPayloadError(f"bad questions payload :: url={url} :: {e}", url=url) from e
    return Page(
        questions=body.questions,
        offset=offset,
        next_cursor=next_cursor(offset, len(body.questions), page_size, body.total),
    )
