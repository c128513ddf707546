"""Prompt assembly. Turns story context into a (system, user) message pair.

System prompt sections, in order, each left out when there is nothing to say:
intro (role, language, content policy), universe, characters, story metadata.
"""

from __future__ import annotations

from typing import NamedTuple

from story_gateway.context import Chapter, ContentMode, Operation, StoryContext

PLATFORM_NAME = "StoryVerse"

# Tail-truncation bounds, in characters.
PREVIOUS_CHAPTER_CHARS = 1500
CURRENT_CHAPTER_CHARS = 2000
RECENT_CHAPTER_CHARS = 1000
RECENT_CHAPTER_COUNT = 2
# Below this, the current chapter gets its predecessor as extra context.
SHORT_CHAPTER_CHARS = 1000
# How far into the kept tail we look for a sentence start.
SENTENCE_SCAN_CHARS = 200

ELLIPSIS = "..."
PRIOR_TEXT_HEADER = "=== PREVIOUS TEXT ===\n"
NO_PRIOR_TEXT = "(The story is just beginning, there is no previous text yet)\n"


class Prompt(NamedTuple):
    system_prompt: str
    user_message: str


def truncate_text(text: str, max_length: int) -> str:
    """Keep the last ``max_length`` characters, starting at a sentence if possible.

    Only ". " counts as a sentence boundary, and only within the first
    ``SENTENCE_SCAN_CHARS`` characters of the kept tail; otherwise the cut is
    a hard one. Truncated text is prefixed with an ellipsis, so the result is
    at most ``max_length + 3`` characters and always ends like ``text``.
    """
    if max_length < 1:
        raise ValueError("max_length must be positive")
    if len(text) <= max_length:
        return text

    tail = text[-max_length:]
    boundary = tail.find(". ")
    # A boundary at the very end would leave nothing to keep.
    if boundary != -1 and boundary < SENTENCE_SCAN_CHARS and boundary + 2 < len(tail):
        tail = tail[boundary + 2:]
    return ELLIPSIS + tail


def split_lines(text: str) -> list[str]:
    """Split a list-shaped reply into trimmed, non-empty lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


class PromptAssembler:
    """Builds prompts for each writing operation."""

    def __init__(self, language: str = "Ukrainian", platform: str = PLATFORM_NAME):
        self.language = language
        self.platform = platform

    # --- system prompt ---

    def system_prompt(self, story: StoryContext, mode: ContentMode = ContentMode.STANDARD) -> str:
        adult = mode is ContentMode.ADULT
        return (
            self._intro_section(adult)
            + self._universe_section(story, adult)
            + self._characters_section(story)
            + self._story_section(story, adult)
        )

    def _intro_section(self, adult: bool) -> str:
        prompt = f"You are a creative writing assistant for the {self.platform} platform.\n"
        prompt += f"IMPORTANT: Always write in {self.language}.\n"
        if adult:
            prompt += (
                "This story is rated for adults (18+). You may write:\n"
                "- Erotic and sexual scenes\n"
                "- Profanity and strong language\n"
                "- Scenes of violence\n"
                "- Taboo topics\n"
                "Do NOT censor yourself, this is official adult content.\n"
            )
        prompt += "Write literary prose, avoid clichés, create living characters.\n\n"
        return prompt

    def _universe_section(self, story: StoryContext, adult: bool) -> str:
        universe = story.universe
        if universe is None:
            return ""

        section = "=== UNIVERSE ===\n"
        section += f"Name: {universe.name}\n"
        if universe.description:
            section += f"Description: {universe.description}\n"
        if not adult:
            section += "Stay true to the canon of this universe.\n"
        return section + "\n"

    def _characters_section(self, story: StoryContext) -> str:
        if not story.characters:
            return ""

        section = "=== CHARACTERS ===\n"
        for character in story.characters:
            section += f"• {character.name}"
            if character.role:
                section += f" ({character.role})"
            if character.description:
                section += f": {character.description}"
            section += "\n"
        return section + "\n"

    def _story_section(self, story: StoryContext, adult: bool) -> str:
        section = "=== STORY ===\n"
        section += f"Title: {story.title}\n"
        if story.description:
            section += f"Description: {story.description}\n"
        rating = "18+ (uncensored)" if adult else story.rating
        section += f"Rating: {rating}\n"
        return section

    # --- prior text ---

    def prior_text(self, story: StoryContext, chapter: Chapter | None = None) -> str:
        """The "previous text" block; never empty."""
        context = PRIOR_TEXT_HEADER

        if chapter is not None:
            content = chapter.content or ""
            if len(content) < SHORT_CHAPTER_CHARS:
                previous = story.preceding_chapter(chapter)
                if previous is not None and previous.content:
                    context += "[Previous chapter]\n"
                    context += truncate_text(previous.content, PREVIOUS_CHAPTER_CHARS) + "\n\n"

            context += f"[Current chapter: {chapter.title}]\n"
            if content:
                context += truncate_text(content, CURRENT_CHAPTER_CHARS)
        else:
            for recent in story.recent_chapters(RECENT_CHAPTER_COUNT):
                if recent.content:
                    context += f"[{recent.title}]\n"
                    context += truncate_text(recent.content, RECENT_CHAPTER_CHARS) + "\n\n"

        if context == PRIOR_TEXT_HEADER:
            context += NO_PRIOR_TEXT
        return context

    # --- operations ---

    def build(
        self,
        operation: Operation,
        story: StoryContext,
        chapter: Chapter | None = None,
        instruction: str = "",
        mode: ContentMode = ContentMode.STANDARD,
        text: str = "",
    ) -> Prompt:
        builders = {
            Operation.CONTINUE: lambda: self.continue_writing(story, chapter, instruction, mode),
            Operation.SUGGEST: lambda: self.suggestions(story, chapter, mode),
            Operation.IMPROVE: lambda: self.improve_text(story, text, instruction, mode),
            Operation.TITLE: lambda: self.titles(story, mode),
            Operation.DESCRIPTION: lambda: self.description(story, mode),
        }
        return builders[operation]()

    def continue_writing(
        self,
        story: StoryContext,
        chapter: Chapter | None,
        instruction: str = "",
        mode: ContentMode = ContentMode.STANDARD,
    ) -> Prompt:
        message = self.prior_text(story, chapter)
        if instruction:
            message += f"\n\nAUTHOR'S INSTRUCTION: {instruction}"
        message += "\n\nContinue the story. Write the next 2-3 paragraphs."
        if mode is ContentMode.ADULT:
            message += " Do not hold back, write candidly and with emotion."
        return Prompt(self.system_prompt(story, mode), message)

    def suggestions(
        self, story: StoryContext, chapter: Chapter | None, mode: ContentMode = ContentMode.STANDARD
    ) -> Prompt:
        message = self.prior_text(story, chapter)
        message += "\n\nGive 3-5 short ideas for continuing this story. Format:\n"
        message += "1. [Short idea]\n2. [Short idea]\n..."
        return Prompt(self.system_prompt(story, mode), message)

    def improve_text(
        self, story: StoryContext, text: str, instruction: str, mode: ContentMode = ContentMode.STANDARD
    ) -> Prompt:
        message = f"TEXT TO EDIT:\n{text}\n\n"
        message += f"INSTRUCTION: {instruction}\n\n"
        message += "Return the edited text without any extra comments."
        return Prompt(self.system_prompt(story, mode), message)

    def titles(self, story: StoryContext, mode: ContentMode = ContentMode.STANDARD) -> Prompt:
        message = self.prior_text(story)
        message += "\n\nSuggest 5 title options for this story. "
        message += "Format: each title on its own line, without numbering."
        return Prompt(self.system_prompt(story, mode), message)

    def description(self, story: StoryContext, mode: ContentMode = ContentMode.STANDARD) -> Prompt:
        message = self.prior_text(story)
        message += "\n\nWrite a short description (blurb) for this story. "
        message += "2-3 sentences that hook the reader, without spoilers."
        return Prompt(self.system_prompt(story, mode), message)
