# tests/test_prompts.py
import pytest

from story_gateway.context import Chapter, CharacterEntry, ContentMode, Operation, StoryContext, Universe
from story_gateway.prompts import (
    NO_PRIOR_TEXT,
    PRIOR_TEXT_HEADER,
    PromptAssembler,
    split_lines,
    truncate_text,
)


@pytest.fixture
def assembler():
    return PromptAssembler(language="Ukrainian")


@pytest.fixture
def story():
    return StoryContext(
        title="The Salt Road",
        rating="PG-13",
        description="A caravan crosses the steppe.",
        universe=Universe("Steppe", "Nomad kingdoms"),
        characters=(
            CharacterEntry("Olena", "protagonist", "a cartographer"),
            CharacterEntry("Bohdan", None, "her brother"),
            CharacterEntry("Stray dog"),
        ),
    )


# --- truncation ---

def test_short_text_is_untouched():
    assert truncate_text("Short.", 100) == "Short."


def test_truncate_starts_at_sentence_boundary():
    text = "A" * 50 + ". Second sentence here. Third one ends."
    result = truncate_text(text, 40)
    assert result.startswith("...")
    assert result == "..." + text[-40:].split(". ", 1)[1]
    assert result.endswith("ends.")


def test_truncate_hard_cut_without_boundary():
    text = "x" * 500
    assert truncate_text(text, 100) == "..." + "x" * 100


def test_truncate_ignores_boundary_past_scan_window():
    text = "y" * 300 + ". tail"
    result = truncate_text(text, 290)
    assert result == "..." + text[-290:]


@pytest.mark.parametrize("length,bound", [(10, 3), (1000, 999), (5000, 1500), (250, 1)])
def test_truncate_bounds_and_final_character(length, bound):
    text = ("Word one. Word two " * 400)[:length - 1] + "Z"
    result = truncate_text(text, bound)
    assert len(result) <= bound + 3
    assert result.endswith("Z")


def test_truncate_keeps_text_when_boundary_is_last():
    assert truncate_text("abc. ", 3) == "..." + "c. "


def test_truncate_rejects_non_positive_bound():
    with pytest.raises(ValueError):
        truncate_text("abc", 0)


def test_split_lines():
    assert split_lines("  First\n\n Second  \n\t\nThird") == ["First", "Second", "Third"]


# --- system prompt ---

def test_system_prompt_section_order(assembler, story):
    prompt = assembler.system_prompt(story)
    positions = [prompt.index(h) for h in ("StoryVerse", "=== UNIVERSE ===", "=== CHARACTERS ===", "=== STORY ===")]
    assert positions == sorted(positions)
    assert "Always write in Ukrainian." in prompt


def test_standard_mode_has_canon_and_plain_rating(assembler, story):
    prompt = assembler.system_prompt(story, ContentMode.STANDARD)
    assert "Stay true to the canon" in prompt
    assert "Rating: PG-13" in prompt
    assert "18+" not in prompt


def test_adult_mode_policy_and_rating(assembler, story):
    prompt = assembler.system_prompt(story, ContentMode.ADULT)
    assert "Do NOT censor yourself" in prompt
    assert "Stay true to the canon" not in prompt
    assert "Rating: 18+ (uncensored)" in prompt


def test_character_entries_omit_missing_parts(assembler, story):
    prompt = assembler.system_prompt(story)
    assert "• Olena (protagonist): a cartographer\n" in prompt
    assert "• Bohdan: her brother\n" in prompt
    assert "• Stray dog\n" in prompt


def test_sections_without_data_are_omitted(assembler):
    bare = StoryContext(title="Untitled", rating="G")
    prompt = assembler.system_prompt(bare)
    assert "=== UNIVERSE ===" not in prompt
    assert "=== CHARACTERS ===" not in prompt
    assert "Description:" not in prompt
    assert "Title: Untitled" in prompt


# --- prior text ---

def test_no_chapters_yields_placeholder(assembler, story):
    assert assembler.prior_text(story) == PRIOR_TEXT_HEADER + NO_PRIOR_TEXT


def test_chapters_without_content_yield_placeholder(assembler):
    story = StoryContext(title="t", rating="G", chapters=(Chapter(1, "One", None), Chapter(2, "Two", "")))
    assert assembler.prior_text(story).endswith(NO_PRIOR_TEXT)


def test_short_current_chapter_pulls_in_previous(assembler):
    previous = Chapter(1, "One", "Earlier events. " * 200)
    current = Chapter(2, "Two", "Begin. ")
    story = StoryContext(title="t", rating="G", chapters=(previous, current))

    text = assembler.prior_text(story, current)

    prev_at = text.index("[Previous chapter]")
    cur_at = text.index("[Current chapter: Two]")
    assert prev_at < cur_at
    assert text.endswith("Begin. ")
    prev_block = text[prev_at:cur_at]
    assert prev_block.count("Earlier") < 200
    assert "..." in prev_block


def test_nearest_preceding_chapter_is_used(assembler):
    story = StoryContext(
        title="t",
        rating="G",
        chapters=(Chapter(1, "One", "first text"), Chapter(3, "Three", "third text"), Chapter(5, "Five", "x")),
    )
    text = assembler.prior_text(story, story.chapters[2])
    assert "third text" in text
    assert "first text" not in text


def test_long_current_chapter_stands_alone(assembler):
    current = Chapter(2, "Two", "Long body. " * 300)
    story = StoryContext(title="t", rating="G", chapters=(Chapter(1, "One", "old"), current))

    text = assembler.prior_text(story, current)

    assert "[Previous chapter]" not in text
    body = text.split("[Current chapter: Two]\n", 1)[1]
    assert len(body) <= 2003


def test_without_target_uses_two_latest_in_order(assembler):
    story = StoryContext(
        title="t",
        rating="G",
        chapters=(Chapter(3, "Three", "c3"), Chapter(1, "One", "c1"), Chapter(2, "Two", "c2")),
    )
    text = assembler.prior_text(story)
    assert "c1" not in text
    assert text.index("[Two]\nc2") < text.index("[Three]\nc3")


# --- operations ---

def test_continue_includes_instruction(assembler, story):
    prompt = assembler.build(Operation.CONTINUE, story, instruction="Add a storm")
    assert "AUTHOR'S INSTRUCTION: Add a storm" in prompt.user_message
    assert prompt.user_message.endswith("Write the next 2-3 paragraphs.")


def test_adult_continue_adds_candor(assembler, story):
    prompt = assembler.build(Operation.CONTINUE, story, mode=ContentMode.ADULT)
    assert "write candidly" in prompt.user_message
    assert "Do NOT censor yourself" in prompt.system_prompt


def test_improve_uses_given_text_only(assembler, story):
    prompt = assembler.build(Operation.IMPROVE, story, instruction="Tighten it", text="Some draft.")
    assert prompt.user_message.startswith("TEXT TO EDIT:\nSome draft.")
    assert "INSTRUCTION: Tighten it" in prompt.user_message
    assert PRIOR_TEXT_HEADER not in prompt.user_message


def test_title_and_description_prompts(assembler, story):
    title = assembler.build(Operation.TITLE, story)
    description = assembler.build(Operation.DESCRIPTION, story)
    assert "5 title options" in title.user_message
    assert "without spoilers" in description.user_message
    assert title.user_message.startswith(PRIOR_TEXT_HEADER)
