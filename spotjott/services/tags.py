from typing import Iterable, List

from sqlalchemy.orm import Session

from spotjott.errors import MaxTagsError
from spotjott.models import DiaryEntry, DiaryEntryTag, Tag
from spotjott.validators import split_csv

MAX_TAGS_PER_ENTRY = 5


def parse_tag_names(raw) -> List[str]:
    """
    Normalize tag input from a comma-separated string or a list.

    Names are trimmed and lower-cased, empties dropped, and duplicates
    removed keeping the first occurrence. The cap applies after de-duplication.
    """
    names = []
    for name in split_csv(raw):
        name = name.lower()
        if name and name not in names:
            names.append(name)
    if len(names) > MAX_TAGS_PER_ENTRY:
        raise MaxTagsError(f"Maximum {MAX_TAGS_PER_ENTRY} tags allowed per entry")
    return names


class TagResolver:
    """Find-or-create per-user tags and link them to diary entries."""

    def __init__(self, session: Session):
        self.session = session

    def resolve(self, names: Iterable[str], user_id: int) -> List[Tag]:
        tags = []
        for name in names:
            tag = self.session.query(Tag).filter(Tag.name == name, Tag.user_id == user_id).first()
            if tag is None:
                tag = Tag(name=name, user_id=user_id)
                self.session.add(tag)
                self.session.flush()
            tags.append(tag)
        return tags

    def attach(self, entry: DiaryEntry, names: Iterable[str], user_id: int) -> None:
        for tag in self.resolve(names, user_id):
            entry.tag_links.append(DiaryEntryTag(tag=tag))

    def replace(self, entry: DiaryEntry, names: Iterable[str], user_id: int) -> None:
        entry.tag_links.clear()
        self.session.flush()
        self.attach(entry, names, user_id)
