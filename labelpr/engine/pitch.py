"""
Pitch Assist - drafts a short PR pitch to a contact via AI.
Pitches are written in Russian. Failures never raise to the caller: they
degrade to a static message the CLI can show as-is.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from labelpr.config import config
from labelpr.logging_config import log_call
from labelpr.engine.ai_client import call_ai
from labelpr.engine import records
from labelpr.models import Contact
from labelpr.bus.events import bus, EVENT_PITCH_READY

logger = logging.getLogger(__name__)

# Pitch storage
PITCHES_DIR = Path(__file__).parent.parent.parent / "data" / "pitches"

PITCH_ERROR_TEXT = "Ошибка генерации питча."
PITCH_EMPTY_TEXT = "Не удалось сгенерировать питч."

SYSTEM_PROMPT = (
    "You are an experienced music PR manager at an independent label. "
    "You write short, personal outreach messages that respect the recipient's time."
)


def build_pitch_prompt(contact: Contact, context: str) -> str:
    """Prompt with the contact card and the user's news hook."""
    return f"""Generate a professional and engaging PR pitch in RUSSIAN for the following contact:
Name: {contact.name}
Platform: {contact.platform} ({contact.handle})
Category: {contact.category}
Notes: {contact.notes}
Tags: {', '.join(contact.tags)}

Context for the pitch: {context}

Rules:
- Language: RUSSIAN.
- Style: Business professional but music-industry friendly.
- Length: Short (1-2 paragraphs).
- Output ONLY the message text."""


def _save_pitch(contact: Contact, text: str, model: str) -> Path:
    PITCHES_DIR.mkdir(exist_ok=True, parents=True)
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    path = PITCHES_DIR / f"pitch_{contact.id}_{timestamp}.txt"
    path.write_text(
        f"TO: {contact.name}\n"
        f"PLATFORM: {contact.platform} ({contact.handle})\n"
        f"MODEL: {model}\n"
        f"GENERATED: {datetime.now().isoformat()}\n\n"
        f"{text}\n",
        encoding='utf-8',
    )
    return path


@log_call
def generate_pitch(
    contact_id: str,
    context: str,
    model: Optional[str] = None,
    save: bool = True,
) -> Dict[str, Any]:
    """
    Draft a pitch for a contact.

    Args:
        contact_id: ID of the contact (any partition)
        context: The news hook — release, tour, premiere
        model: AI model ('gemini-flash', 'claude', 'deepseek-chat')
        save: Write successful pitches to data/pitches/

    Returns: dict with text, ok flag, contact_name, pitch_path (None unless saved)
    Raises: ValueError if the contact does not exist
    """
    contact = records.get_contact(contact_id)
    if not contact:
        raise ValueError(f"Contact {contact_id} not found")

    _model = model or config.DEFAULT_AI_MODEL
    logger.info(f"Generating pitch for contact {contact_id} using {_model}")

    try:
        text = call_ai(build_pitch_prompt(contact, context), model=_model, system=SYSTEM_PROMPT, max_tokens=800)
    except (ValueError, RuntimeError) as e:
        logger.error(f"Pitch generation failed for contact {contact_id}: {e}")
        return {'text': PITCH_ERROR_TEXT, 'ok': False, 'contact_name': contact.name, 'pitch_path': None}

    text = (text or '').strip()
    if not text:
        logger.warning(f"Empty pitch returned for contact {contact_id}")
        return {'text': PITCH_EMPTY_TEXT, 'ok': False, 'contact_name': contact.name, 'pitch_path': None}

    pitch_path = None
    if save:
        pitch_path = str(_save_pitch(contact, text, _model))
        logger.info(f"Pitch saved to {pitch_path}")

    bus.emit(EVENT_PITCH_READY, {'contact_id': contact_id, 'pitch_path': pitch_path})

    return {'text': text, 'ok': True, 'contact_name': contact.name, 'pitch_path': pitch_path}
