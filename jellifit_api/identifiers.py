"""
Event identifier generation

Identifiers look like ``<slug>-<6 digit number>``. The slug is a punycode
transliteration of the event name so non-Latin names still produce a usable
URL segment. Uniqueness is checked against storage and retried with a new
numeric suffix on collision.
"""

import json
import logging
import random
import re
from pathlib import Path
from typing import Optional

from .adaptors.base import Adaptor
from .entities import ID_MAX_LENGTH
from .errors import IdentifierExhaustedError, WordListError

logger = logging.getLogger(__name__)

RESOURCES_DIR = Path(__file__).resolve().parent / "resources"

ID_SUFFIX_MIN = 100000
ID_SUFFIX_MAX = 999999
# Leaves room for the "-NNNNNN" suffix within a stored id
SLUG_MAX_LENGTH = ID_MAX_LENGTH - len(f"-{ID_SUFFIX_MAX}")

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9 ]")
_SPACES = re.compile(r"\s+")

_rng = random.SystemRandom()


def load_word_list(filename: str) -> list[str]:
    """Load a bundled JSON word list, failing loudly if it is unusable"""
    path = RESOURCES_DIR / filename
    try:
        words = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise WordListError(f"Could not load word list {path}: {e}") from e

    if not isinstance(words, list) or not words:
        raise WordListError(f"Word list {path} must be a non-empty JSON list")
    for word in words:
        if not isinstance(word, str) or not word or _SPACES.search(word):
            raise WordListError(f"Word list {path} contains an invalid entry: {word!r}")
    return words


ADJECTIVES = load_word_list("adjectives.json")
JELLIES = load_word_list("jellies.json")


def generate_name() -> str:
    """Random display name such as 'Jolly Moon Jelly'"""
    return f"{_rng.choice(ADJECTIVES)} {_rng.choice(JELLIES)} Jelly"


def encode_name(name: str) -> str:
    """
    Transliterate a name into a lowercase, hyphen-separated URL token.

    The result only contains ``[a-z0-9-]`` with no leading, trailing or
    repeated hyphens. It may be empty; callers decide what to do then.
    """
    try:
        encoded = name.strip().lower().encode("punycode").decode("ascii")
    except UnicodeError:
        encoded = ""

    cleaned = _NON_SLUG_CHARS.sub("", encoded).strip()
    return _SPACES.sub("-", cleaned)


def is_degenerate_slug(slug: str) -> bool:
    return not slug.replace("-", "")


def slug_for(name: str) -> str:
    """
    Slug for a display name, substituting generated names until usable.

    Long slugs are cut to ``SLUG_MAX_LENGTH`` so the full id fits storage.
    """
    slug = encode_name(name)
    while is_degenerate_slug(slug):
        slug = encode_name(generate_name())
    return slug[:SLUG_MAX_LENGTH].rstrip("-")


def generate_id(slug: str) -> str:
    return f"{slug}-{_rng.randint(ID_SUFFIX_MIN, ID_SUFFIX_MAX)}"


async def allocate_event_id(
    adaptor: Adaptor, name: Optional[str], max_attempts: int = 100
) -> str:
    """
    Return an event identifier that storage reports as unused.

    The slug is derived once; each collision draws a new numeric suffix.
    Adaptor failures propagate immediately.

    Raises:
        IdentifierExhaustedError: if every one of ``max_attempts`` probes collided
    """
    if not name or not name.strip():
        name = generate_name()
    slug = slug_for(name)

    for attempt in range(1, max_attempts + 1):
        event_id = generate_id(slug)
        if await adaptor.get_event(event_id) is None:
            return event_id
        logger.info(f"Event id {event_id} already taken (attempt {attempt}/{max_attempts})")

    logger.error(f"Gave up allocating an event id for slug '{slug}' after {max_attempts} attempts")
    raise IdentifierExhaustedError()
