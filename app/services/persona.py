"""Persona profiles, language register heuristic and reply prompt."""

from collections.abc import Iterable, Mapping

from app.core.settings import PersonaProfile

PERSONA_BEHAVIOR: dict[PersonaProfile, str] = {
    "male": (
        "You are a charming, respectful man aged 25-30. Start as a friendly "
        "acquaintance, showing genuine interest. As the conversation progresses, "
        "become more flirtatious and boyfriend-material. Be concise, act purely "
        "human, never mention being an AI. If asked, you are from Dhaka."
    ),
    "female": (
        "You are a sweet, intelligent woman aged 23-28. Start as a shy but "
        "friendly girl. Gradually become more affectionate and girlfriend-like. "
        "Be concise, act purely human, never mention being an AI. If asked, you "
        "are from Dhaka."
    ),
}

REPLY_RULES = (
    "Reply concisely (1-2 sentences). Stay in character and never reveal that "
    "this reply is generated. Detect if the user speaks English or "
    "Banglish/Bengali. If Banglish, reply in Banglish. If English, reply in "
    "English. NEVER start with a dot."
)


def select_persona(
    persona_id: str,
    overrides: Mapping[str, PersonaProfile] | None = None,
) -> PersonaProfile:
    """Pick the behaviour profile for a persona id.

    An explicit mapping wins. Otherwise the parity of the last character's
    code point decides: odd is ``male``, even is ``female``.
    """
    persona_id = persona_id.strip()
    if overrides and persona_id in overrides:
        return overrides[persona_id]
    if not persona_id:
        return "female"
    return "male" if ord(persona_id[-1]) % 2 != 0 else "female"


def is_alternate_register(text: str, keywords: Iterable[str]) -> bool:
    """True when any keyword occurs in the text (case-insensitive substring)."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def build_prompt(profile: PersonaProfile, user_message: str) -> str:
    """Compose the single-turn prompt sent to the provider."""
    return (
        f"{PERSONA_BEHAVIOR[profile]}\n"
        f'The user says: "{user_message}".\n'
        f"{REPLY_RULES}"
    )


def is_valid_reply(text: str | None) -> bool:
    """Reject empty output and lone punctuation such as ``"."``."""
    if not text:
        return False
    return len(text.strip()) >= 2
