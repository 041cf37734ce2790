"""Prompt construction for the upstream language model."""

from core.models import PerformanceProfile, SessionResult

FORMAT_RULES = """
CRITICAL: The generated text MUST include ALL 26 letters of the alphabet (a-z) at least once.
Include words like: quick, fox, jump, lazy, box, quiz, zero, jazz, vex to cover rare letters.

STRICT FORMAT RULES:
- Only lowercase letters
- No punctuation, no special characters, no numbers
- Separate words with single spaces
- Words should be 3-8 letters each
- Use real, common English words only

Output ONLY the {word_count} words separated by spaces, nothing else."""

GENERIC_PROMPT = """Generate exactly {word_count} common English words for a touch typing practice session.

REQUIREMENTS:
1. Use simple, common words (3-8 letters each)
2. Mix of short and medium length words

Example words to include for full alphabet coverage:
- q: quick, quiet, queen, quiz
- x: box, fox, mix, fix, next
- z: zero, zone, size, maze, jazz
- j: just, jump, join, job, joy
- v: very, have, give, live, view
- w: with, will, work, want, way
"""

PERSONALIZED_PROMPT = """Generate exactly {word_count} English words for a PERSONALIZED touch typing practice session.

USER PERFORMANCE DATA:
- Current accuracy: {accuracy}%
- Struggling keys (need more practice): {weak_keys}

CRITICAL REQUIREMENTS:
1. Include 60-70% of words that contain the struggling keys: {weak_keys}
2. For each struggling key, include at least 8-10 words featuring that letter prominently
3. Mix word difficulties: 40% easy (3-4 letters), 40% medium (5-6 letters), 20% challenging (7-8 letters)
4. Include words where struggling keys appear at different positions (start, middle, end)

WORD SELECTION STRATEGY FOR {weak_keys}:
- Words starting with these letters
- Words ending with these letters
- Words with these letters in the middle
- Words with repeated instances of these letters
- Common bigrams/trigrams containing these letters
"""

INSIGHT_PROMPT = """Analyze this typing session data and provide a brief, encouraging insight (max 2 sentences):
- WPM: {wpm}
- Accuracy: {accuracy}%
- Struggling keys: {weak_keys}
- Words completed: {completed}/{total}
- Total keystrokes: {keystrokes}

Be encouraging and give one specific tip for improvement."""


def is_personalized(profile: PerformanceProfile | None) -> bool:
    """Whether a profile has weak keys to steer the next text toward."""
    return profile is not None and len(profile.weak_keys) > 0


def build_practice_prompt(
    profile: PerformanceProfile | None, word_count: int = 90
) -> str:
    """Build the text-generation prompt.

    Args:
        profile: Aggregate performance, or None before the first session
        word_count: Number of words to ask for

    Returns:
        Prompt string; personalized when the profile has struggling keys
    """
    if is_personalized(profile):
        prompt = PERSONALIZED_PROMPT.format(
            word_count=word_count,
            accuracy=profile.accuracy_percent,
            weak_keys=", ".join(profile.weak_keys),
        )
    else:
        prompt = GENERIC_PROMPT.format(word_count=word_count)

    return prompt + FORMAT_RULES.format(word_count=word_count)


def build_insight_prompt(result: SessionResult) -> str:
    """Build the session-insight prompt for a scored result."""
    weak_keys = ", ".join(k.key for k in result.struggling_keys if k.key.strip()) or "none"
    return INSIGHT_PROMPT.format(
        wpm=result.words_per_minute,
        accuracy=result.accuracy_percent,
        weak_keys=weak_keys,
        completed=result.completed_word_count,
        total=result.total_word_count,
        keystrokes=result.total_keystrokes,
    )
