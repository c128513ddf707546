"""Read-only story data supplied by the writing platform."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from story_gateway.models import RequestClass

ADULT_RATINGS = frozenset({"R", "NC-17", "18+"})


class ContentMode(str, Enum):
    STANDARD = "standard"
    ADULT = "adult"

    @property
    def request_class(self) -> RequestClass:
        return RequestClass.ADULT if self is ContentMode.ADULT else RequestClass.STANDARD


class Operation(str, Enum):
    CONTINUE = "continue"
    SUGGEST = "suggest"
    IMPROVE = "improve"
    TITLE = "title"
    DESCRIPTION = "description"


@dataclass(frozen=True)
class Universe:
    name: str
    description: str | None = None


@dataclass(frozen=True)
class CharacterEntry:
    name: str
    role: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class Chapter:
    number: int
    title: str
    content: str | None = None


@dataclass(frozen=True)
class StoryContext:
    title: str
    rating: str
    description: str | None = None
    universe: Universe | None = None
    characters: tuple[CharacterEntry, ...] = ()
    chapters: tuple[Chapter, ...] = field(default=())

    @property
    def is_adult_rated(self) -> bool:
        return self.rating in ADULT_RATINGS

    def preceding_chapter(self, chapter: Chapter) -> Chapter | None:
        """Nearest chapter with a lower number, if any."""
        earlier = [c for c in self.chapters if c.number < chapter.number]
        return max(earlier, key=lambda c: c.number, default=None)

    def recent_chapters(self, count: int) -> list[Chapter]:
        """The last ``count`` chapters by number, oldest first."""
        ordered = sorted(self.chapters, key=lambda c: c.number)
        return ordered[-count:] if count > 0 else []
