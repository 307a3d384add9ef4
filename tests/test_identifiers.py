import json
import re

import pytest

from jellifit_api import identifiers
from jellifit_api.adaptors.memory import MemoryAdaptor
from jellifit_api.entities import ID_MAX_LENGTH
from jellifit_api.errors import AdaptorError, IdentifierExhaustedError, WordListError
from jellifit_api.identifiers import (
    ADJECTIVES,
    JELLIES,
    allocate_event_id,
    encode_name,
    generate_id,
    generate_name,
    load_word_list,
    slug_for,
)

from tests.conftest import make_event

SLUG_RE = re.compile(r"^([a-z0-9]+(-[a-z0-9]+)*)?$")
ID_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*-\d{6}$")


class ScriptedAdaptor(MemoryAdaptor):
    """Reports an id as taken for the first ``taken_probes`` lookups"""

    def __init__(self, taken_probes: int = 0):
        super().__init__()
        self.taken_probes = taken_probes
        self.probes: list[str] = []

    async def get_event(self, event_id):
        self.probes.append(event_id)
        if len(self.probes) <= self.taken_probes:
            return object()
        return None


class FailingAdaptor(MemoryAdaptor):
    def __init__(self):
        super().__init__()
        self.calls = 0

    async def get_event(self, event_id):
        self.calls += 1
        raise AdaptorError()


@pytest.mark.parametrize(
    "name",
    [
        "Hello World",
        "  Team   Sync  ",
        "Café Meetup",
        "日本語の会議",
        "Ünïcödé — Dashes – Everywhere",
        "a - b",
        "Tab\tSeparated\nLines",
        "emoji 🎉 party",
        "!!!",
        "",
        "   ",
        "---",
        "-leading and trailing-",
        "UPPER lower 123",
    ],
)
def test_encode_name_only_produces_slug_characters(name):
    assert SLUG_RE.match(encode_name(name))


def test_encode_name_ascii():
    assert encode_name("Hello World") == "hello-world"
    assert encode_name("  Team   Sync  ") == "team-sync"
    assert encode_name("a - b") == "a-b"


def test_encode_name_transliterates_non_latin_text():
    slug = encode_name("日本語の会議")
    assert slug
    assert SLUG_RE.match(slug)


def test_encode_name_returns_empty_for_punctuation():
    assert encode_name("!!!") == ""
    assert encode_name("") == ""
    assert encode_name("   ") == ""


def test_generate_name_shape():
    for _ in range(50):
        name = generate_name()
        adjective, jelly, suffix = name.split(" ")
        assert adjective in ADJECTIVES
        assert jelly in JELLIES
        assert suffix == "Jelly"


def test_bundled_word_lists_are_single_words():
    assert ADJECTIVES and JELLIES
    for word in ADJECTIVES + JELLIES:
        assert " " not in word


def test_load_word_list_missing_file(tmp_path, monkeypatch):
    monkeypatch.setattr(identifiers, "RESOURCES_DIR", tmp_path)
    with pytest.raises(WordListError):
        load_word_list("adjectives.json")


@pytest.mark.parametrize("content", ["not json", "{}", "[]", '["Two words"]', "[1, 2]"])
def test_load_word_list_malformed(tmp_path, monkeypatch, content):
    (tmp_path / "words.json").write_text(content)
    monkeypatch.setattr(identifiers, "RESOURCES_DIR", tmp_path)
    with pytest.raises(WordListError):
        load_word_list("words.json")


def test_load_word_list_valid(tmp_path, monkeypatch):
    (tmp_path / "words.json").write_text(json.dumps(["Moon", "Box"]))
    monkeypatch.setattr(identifiers, "RESOURCES_DIR", tmp_path)
    assert load_word_list("words.json") == ["Moon", "Box"]


async def test_allocate_uses_name_slug():
    event_id = await allocate_event_id(MemoryAdaptor(), "Team Sync")
    assert re.match(r"^team-sync-\d{6}$", event_id)
    suffix = int(event_id.rsplit("-", 1)[1])
    assert 100000 <= suffix <= 999999


@pytest.mark.parametrize("name", [None, "", "   ", "!!!", "---", "?? ..."])
async def test_allocate_never_returns_empty_slug(name):
    for _ in range(20):
        event_id = await allocate_event_id(MemoryAdaptor(), name)
        assert ID_RE.match(event_id)
        slug = event_id.rsplit("-", 1)[0]
        assert slug.replace("-", "")


async def test_allocate_probes_until_free():
    adaptor = ScriptedAdaptor(taken_probes=2)
    event_id = await allocate_event_id(adaptor, "Standup")

    assert len(adaptor.probes) == 3
    assert event_id == adaptor.probes[2]


async def test_allocate_never_returns_a_taken_id(monkeypatch, now):
    adaptor = MemoryAdaptor()
    suffixes = iter([111111, 222222, 111111, 333333])
    monkeypatch.setattr(identifiers._rng, "randint", lambda a, b: next(suffixes))

    for event_id in ("standup-111111", "standup-222222"):
        adaptor.events[event_id] = make_event(event_id, now)

    event_id = await allocate_event_id(adaptor, "Standup")
    assert event_id == "standup-333333"


async def test_allocate_keeps_slug_on_retry():
    adaptor = ScriptedAdaptor(taken_probes=4)
    await allocate_event_id(adaptor, "")

    slugs = {probe.rsplit("-", 1)[0] for probe in adaptor.probes}
    assert len(slugs) == 1


async def test_allocate_gives_up_after_max_attempts():
    adaptor = ScriptedAdaptor(taken_probes=1000)
    with pytest.raises(IdentifierExhaustedError):
        await allocate_event_id(adaptor, "Busy", max_attempts=5)
    assert len(adaptor.probes) == 5


async def test_allocate_propagates_adaptor_failure():
    adaptor = FailingAdaptor()
    with pytest.raises(AdaptorError):
        await allocate_event_id(adaptor, "Outage")
    assert adaptor.calls == 1


@pytest.mark.parametrize("name", ["日本語の会議" * 40, "ab " * 200, "x" * 255])
def test_long_names_still_fit_an_id(name):
    slug = slug_for(name)

    assert slug
    assert SLUG_RE.match(slug)
    assert len(generate_id(slug)) <= ID_MAX_LENGTH


def test_short_slug_is_not_truncated():
    assert slug_for("Team Sync") == "team-sync"
