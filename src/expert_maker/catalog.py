"""Load the static topic catalog from content/topics.json."""
import json
import logging
from functools import lru_cache
from pathlib import Path

from expert_maker.models import (
    FocusArea, GuideSection, PracticeDrill, QuizTemplate, Resource, StudyGuide, Topic,
)

log = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"


class CatalogError(ValueError):
    pass


class Catalog:
    """Topics keyed by id, iterated in file order."""

    def __init__(self, topics):
        self._topics = {}
        for topic in topics:
            if topic.id in self._topics:
                raise CatalogError(f"Duplicate topic id: {topic.id}")
            self._topics[topic.id] = topic

    def get(self, topic_id: str):
        return self._topics.get(topic_id)

    def ids(self) -> list[str]:
        return list(self._topics)

    def __contains__(self, topic_id) -> bool:
        return topic_id in self._topics

    def __iter__(self):
        return iter(self._topics.values())

    def __len__(self) -> int:
        return len(self._topics)


def _parse_guide(data: dict) -> StudyGuide:
    return StudyGuide(
        overview=data.get("overview", ""),
        objectives=tuple(data.get("objectives", [])),
        sections=tuple(
            GuideSection(title=s["title"], detail=s.get("detail", ""), bullets=tuple(s.get("bullets", [])))
            for s in data.get("sections", [])
        ),
        practice=tuple(
            PracticeDrill(title=p["title"], steps=tuple(p.get("steps", [])))
            for p in data.get("practice", [])
        ),
        reflection=tuple(data.get("reflection", [])),
        project_prompt=data.get("project_prompt", ""),
    )


def _parse_topic(data: dict, seen_quiz_ids: set) -> Topic:
    focus_areas = tuple(
        FocusArea(
            id=f["id"],
            title=f["title"],
            summary=f.get("summary", ""),
            study_guide=_parse_guide(f.get("study_guide", {})),
            resources=tuple(Resource(title=r["title"], url=r["url"]) for r in f.get("resources", [])),
        )
        for f in data["focus_areas"]
    )
    if not focus_areas:
        raise CatalogError(f"Topic {data['id']} has no focus areas")
    focus_ids = {f.id for f in focus_areas}
    quiz_bank = []
    for q in data.get("quiz_bank", []):
        if q["id"] in seen_quiz_ids:
            raise CatalogError(f"Duplicate quiz id: {q['id']}")
        if q["focus_id"] not in focus_ids:
            raise CatalogError(f"Quiz {q['id']} references unknown focus area {q['focus_id']}")
        if len(q["options"]) < 2:
            raise CatalogError(f"Quiz {q['id']} needs at least two options")
        if not 0 <= q["answer_index"] < len(q["options"]):
            raise CatalogError(f"Quiz {q['id']} answer index out of range")
        seen_quiz_ids.add(q["id"])
        quiz_bank.append(QuizTemplate(
            id=q["id"],
            focus_id=q["focus_id"],
            question=q["question"],
            options=tuple(q["options"]),
            answer_index=q["answer_index"],
            rationale=q.get("rationale", ""),
            doc_link=q.get("doc_link", ""),
        ))
    return Topic(
        id=data["id"],
        title=data["title"],
        description=data.get("description", ""),
        focus_areas=focus_areas,
        quiz_bank=tuple(quiz_bank),
    )


def load_catalog(path=None) -> Catalog:
    """Parse a catalog file; defaults to the bundled topics.json."""
    path = Path(path) if path else CONTENT_DIR / "topics.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    seen_quiz_ids = set()
    try:
        topics = [_parse_topic(t, seen_quiz_ids) for t in data["topics"]]
    except KeyError as e:
        raise CatalogError(f"Missing catalog field: {e.args[0]}") from e
    catalog = Catalog(topics)
    log.debug("Loaded %d topics from %s", len(catalog), path)
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    return load_catalog()
