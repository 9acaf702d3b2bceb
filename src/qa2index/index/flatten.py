"""Question -> flat list of index documents.

Order within one question is fixed: the question, its answers, the comments
on the question, then each answer's comments (answer by answer).
"""
from typing import Iterable, List

from qa2index.index.models import Document
from qa2index.ingest.models import AnswerItem, QuestionItem

DEFAULT_PREFIX = "/qeta"


def question_location(q: QuestionItem, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{prefix}/questions/{q.id}"


def answer_location(q: QuestionItem, a: AnswerItem, prefix: str = DEFAULT_PREFIX) -> str:
    return f"{question_location(q, prefix)}#answer_{a.id}"


def expected_document_count(q: QuestionItem) -> int:
    return 1 + len(q.answers) + len(q.comments) + sum(len(a.comments) for a in q.answers)


def flatten_question(q: QuestionItem, prefix: str = DEFAULT_PREFIX) -> List[Document]:
    base = question_location(q, prefix)
    docs = [Document(
        kind="question",
        title=q.title or "",
        text=q.content,
        location=base,
        question_id=q.id,
        author=q.author,
        score=q.score,
        tags=q.tags or [],
        answer_count=q.answers_count if q.answers_count is not None else len(q.answers),
        views=q.views,
        created=q.created,
    )]
    for a in q.answers:
        docs.append(Document(
            kind="answer",
            text=a.content,
            location=answer_location(q, a, prefix),
            question_id=q.id,
            answer_id=a.id,
            author=a.author,
            score=a.score,
            created=a.created,
        ))
    # comment ids are optional upstream, so locations use the position
    for i, c in enumerate(q.comments):
        docs.append(Document(
            kind="comment",
            text=c.content,
            location=f"{base}#comment_{i}",
            question_id=q.id,
            author=c.author,
            created=c.created,
        ))
    for a in q.answers:
        for i, c in enumerate(a.comments):
            docs.append(Document(
                kind="comment",
                text=c.content,
                location=f"{answer_location(q, a, prefix)}_comment_{i}",
                question_id=q.id,
                answer_id=a.id,
                author=c.author,
                created=c.created,
            ))
    return docs


def flatten_page(questions: Iterable[QuestionItem], prefix: str = DEFAULT_PREFIX) -> List[Document]:
    out: List[Document] = []
    for q in questions:
        out.extend(flatten_question(q, prefix))
    return out
