"""Voice catalog for synthesis configuration.

Responsibilities:
- Describe the bundled voice styles and their intended uses.
- Resolve requested voice codes, falling back to the default voice.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class VoiceProfile:
    """Declarative voice profile backed by one style file.

    Attributes:
        code: Voice code and style file stem (for example `M1`).
        description: Human-readable timbre description.
        use_cases: Suggested content types for the voice.
    """

    code: str
    description: str
    use_cases: str


VOICE_PROFILES: tuple[VoiceProfile, ...] = (
    VoiceProfile(
        code="M1",
        description="Lively, upbeat male voice with confident energy and a standard, clear tone.",
        use_cases="Promotional videos, upbeat explainers, general-purpose narration, casual announcements.",
    ),
    VoiceProfile(
        code="M2",
        description="Deep, robust male voice; calm, composed, and serious with a grounded presence.",
        use_cases="Corporate content, serious announcements, documentaries, formal guidance.",
    ),
    VoiceProfile(
        code="M3",
        description="Polished, authoritative male voice; confident and trustworthy.",
        use_cases="Business presentations, leadership messages, investor briefings, high-trust narration.",
    ),
    VoiceProfile(
        code="M4",
        description="Soft, neutral-toned male voice; gentle and approachable with a youthful quality.",
        use_cases="Educational content, friendly explainers, onboarding guides, youth-oriented narration.",
    ),
    VoiceProfile(
        code="M5",
        description="Warm, soft-spoken male voice; calm and soothing with a storytelling quality.",
        use_cases="Audiobooks, relaxation content, bedtime stories, reflective narration.",
    ),
    VoiceProfile(
        code="F1",
        description="Calm female voice with a slightly low tone; steady and composed.",
        use_cases="Customer service, guided instructions, meditative content, professional narration.",
    ),
    VoiceProfile(
        code="F2",
        description="Bright, cheerful female voice; lively, playful, and youthful.",
        use_cases="Youth content, playful ads, social media videos, character voices.",
    ),
    VoiceProfile(
        code="F3",
        description="Clear, professional announcer-style female voice; articulate and broadcast-ready.",
        use_cases="Commercials, documentaries, news-style narration, formal presentations.",
    ),
    VoiceProfile(
        code="F4",
        description="Crisp, confident female voice; distinct and expressive with strong delivery.",
        use_cases="Business explainers, training videos, pitch decks, product announcements.",
    ),
    VoiceProfile(
        code="F5",
        description="Kind, gentle female voice; soft-spoken, calm, and naturally soothing.",
        use_cases="Audiobooks, supportive messages, wellness content, empathetic narration.",
    ),
)

DEFAULT_VOICE_CODE = "M1"

_PROFILES_BY_CODE = {profile.code: profile for profile in VOICE_PROFILES}


def is_known_voice(code: str) -> bool:
    """Return whether a voice code exists in the catalog."""

    return code in _PROFILES_BY_CODE


def resolve_voice(code: str | None) -> VoiceProfile:
    """Return the profile for `code`, or the default voice when unknown or missing."""

    if code is None:
        return _PROFILES_BY_CODE[DEFAULT_VOICE_CODE]
    return _PROFILES_BY_CODE.get(code, _PROFILES_BY_CODE[DEFAULT_VOICE_CODE])
