import json
from dataclasses import dataclass, field
from typing import IO, Iterable, List

from qa2index.index.collator import AsyncQetaCollator, QetaCollator
from qa2index.index.models import Document

# drain -> collect (storage belongs to the search backend)


@dataclass
class PipelineResult:
    documents: List[Document] = field(default_factory=list)
    pages_fetched: int = 0


def execute(collator: QetaCollator) -> PipelineResult:
    """Pull every document out of a collator. Fetch errors propagate."""
    with collator:
        docs = list(collator)
    return PipelineResult(documents=docs, pages_fetched=collator.pages_fetched)


async def aexecute(collator: AsyncQetaCollator) -> PipelineResult:
    docs = []
    async with collator:
        async for d in collator:
            docs.append(d)
    return PipelineResult(documents=docs, pages_fetched=collator.pages_fetched)


def write_jsonl(documents: Iterable[Document], stream: IO[str]) -> int:
    n = 0
    for d in documents:
        stream.write(json.dumps(d.to_dict(), ensure_ascii=False) + "\n")
        n += 1
    return n
