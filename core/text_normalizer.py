"""Practice text normalization.

Upstream text (LLM output or anything else) is turned into a fixed number of
lowercase words that between them cover the whole alphabet. The normalizer
never fails: short input is padded from a fallback word list, long input is
truncated, and missing letters are patched in by overwriting words near the
middle of the text.
"""

import logging
import random
import re
import string

log = logging.getLogger("typecoach.text_normalizer")

TARGET_WORD_COUNT = 90
MAX_WORD_LENGTH = 10
ALPHABET = string.ascii_lowercase

# Short words for letters that generated text tends to leave out
RARE_LETTER_WORDS: dict[str, list[str]] = {
    "q": ["quick", "quiet", "queen", "quiz", "quote"],
    "x": ["box", "fox", "mix", "fix", "next", "text", "exam"],
    "z": ["zero", "zone", "size", "maze", "jazz", "fizz", "buzz"],
    "j": ["just", "jump", "join", "job", "joy", "major"],
    "k": ["keep", "know", "kind", "key", "kick", "make", "take"],
    "v": ["very", "have", "give", "live", "move", "over", "view"],
    "w": ["with", "will", "work", "want", "way", "new", "now"],
}

FALLBACK_WORDS: list[str] = [
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
    "her", "was", "one", "our", "out", "day", "get", "has", "him", "his",
    "how", "its", "may", "new", "now", "old", "see", "way", "who", "boy",
    "did", "let", "put", "say", "she", "too", "use", "add", "ago", "air",
    "also", "ask", "back", "been", "best", "big", "both", "call", "came",
    "come", "could", "down", "each", "end", "even", "few", "find", "first",
    "from", "give", "good", "great", "hand", "have", "help", "here", "high",
    "home", "just", "keep", "kind", "know", "last", "left", "life", "like",
    "line", "live", "long", "look", "made", "make", "many", "more", "most",
    "much", "must", "name", "need", "next", "only", "open", "over", "own",
]

FALLBACK_TEXT = (
    "the quick brown fox jumps over lazy dog and runs away into forest where "
    "many animals live together in peace under tall trees that provide shade "
    "from hot summer sun while birds sing their sweet songs high above "
    "branches where they build nests to raise young ones who will soon learn "
    "fly explore world beyond home this beautiful natural place with amazing "
    "views and exciting journeys through vast open spaces"
)

_NON_LETTERS = re.compile(r"[^a-z\s]")

# Spread of candidate slots past the midpoint for alphabet patches
_PATCH_SPREAD = 10
_MAX_PATCH_PASSES = 3


def missing_letters(text: str) -> list[str]:
    """Return the letters of the alphabet that do not occur in text."""
    present = set(text.lower())
    return [letter for letter in ALPHABET if letter not in present]


def clean_words(
    raw_text: str,
    target_word_count: int = TARGET_WORD_COUNT,
    max_word_length: int = MAX_WORD_LENGTH,
) -> list[str]:
    """Lowercase, strip non-letters, split and truncate.

    Args:
        raw_text: Arbitrary input text
        target_word_count: Maximum number of words kept
        max_word_length: Longer tokens are dropped, not cut

    Returns:
        Up to target_word_count lowercase words
    """
    stripped = _NON_LETTERS.sub("", raw_text.lower())
    words = [w for w in stripped.split() if 0 < len(w) <= max_word_length]
    return words[:target_word_count]


def pad_words(words: list[str], target_word_count: int = TARGET_WORD_COUNT) -> list[str]:
    """Pad by cycling the fallback list until target_word_count is reached."""
    padded = list(words)
    while len(padded) < target_word_count:
        padded.append(FALLBACK_WORDS[len(padded) % len(FALLBACK_WORDS)])
    return padded


def find_coverage_word(letter: str, rng: random.Random | None = None) -> str | None:
    """Pick a word containing letter, or None if no list has one.

    Args:
        letter: Lowercase letter to cover
        rng: Random source for choosing among curated words

    Returns:
        Word containing the letter, or None
    """
    curated = RARE_LETTER_WORDS.get(letter)
    if curated:
        return (rng or random).choice(curated)
    for word in FALLBACK_WORDS:
        if letter in word:
            return word
    return None


def _patch_slot(length: int, used: set[int], rng: random.Random) -> int | None:
    """Choose an index near the middle that has not been patched yet."""
    if length == 0:
        return None
    middle = length // 2
    candidates = [
        i for i in range(middle, min(length, middle + _PATCH_SPREAD)) if i not in used
    ]
    if not candidates:
        candidates = [i for i in range(length) if i not in used]
    if not candidates:
        return None
    return rng.choice(candidates)


def ensure_all_letters(words: list[str], rng: random.Random | None = None) -> list[str]:
    """Overwrite words so that every letter of the alphabet appears.

    Best effort: a letter no word list can supply stays missing. The number
    of words never changes.

    Args:
        words: Normalized words
        rng: Random source for slot and word choice

    Returns:
        New list with the same length as words
    """
    rng = rng or random.Random()
    result = list(words)
    used: set[int] = set()

    for _ in range(_MAX_PATCH_PASSES):
        missing = missing_letters(" ".join(result))
        if not missing:
            break

        for letter in missing:
            if letter in " ".join(result):
                continue
            word = find_coverage_word(letter, rng)
            if word is None:
                log.warning(f"No coverage word available for letter '{letter}'")
                continue
            slot = _patch_slot(len(result), used, rng)
            if slot is None:
                log.warning(f"No free slot to cover letter '{letter}'")
                break
            result[slot] = word
            used.add(slot)

    remaining = missing_letters(" ".join(result))
    if remaining:
        log.info(f"Practice text still missing letters: {''.join(remaining)}")

    return result


def normalize_words(
    raw_text: str,
    target_word_count: int = TARGET_WORD_COUNT,
    max_word_length: int = MAX_WORD_LENGTH,
    rng: random.Random | None = None,
) -> list[str]:
    """Turn arbitrary text into practice words.

    Args:
        raw_text: Arbitrary input text, e.g. model output
        target_word_count: Exact number of words returned
        max_word_length: Maximum length of any word
        rng: Random source for alphabet patches

    Returns:
        Exactly target_word_count words, each 1 to max_word_length letters a-z
    """
    words = clean_words(raw_text, target_word_count, max_word_length)
    if len(words) < target_word_count:
        log.debug(f"Padding {len(words)} words to {target_word_count}")
    words = pad_words(words, target_word_count)
    words = ensure_all_letters(words, rng)

    # Patches only overwrite, so this is a no-op unless the lists change
    words = pad_words(words[:target_word_count], target_word_count)
    return words


def is_normalized(
    words: list[str],
    target_word_count: int = TARGET_WORD_COUNT,
    max_word_length: int = MAX_WORD_LENGTH,
) -> bool:
    """Check the length and charset guarantees of normalize_words."""
    if len(words) != target_word_count:
        return False
    pattern = re.compile(r"^[a-z]{1,%d}$" % max_word_length)
    return all(pattern.match(w) for w in words)


def fallback_words(target_word_count: int = TARGET_WORD_COUNT) -> list[str]:
    """Normalized form of FALLBACK_TEXT.

    Patching is seeded, so the result is the same on every call.
    """
    return normalize_words(FALLBACK_TEXT, target_word_count, rng=random.Random(0))
