"""
AI Client - Unified interface for all AI backends.
Supports: Gemini (default), Claude API, DeepSeek Chat.

Two call shapes:
  call_ai      → freeform text
  call_ai_json → JSON constrained to a schema: Gemini responseSchema,
                 a forced tool call on Claude, JSON mode on DeepSeek
"""

import json
import logging
import re
from typing import Any, Dict, Optional

import requests
from anthropic import Anthropic

from labelpr.config import config

logger = logging.getLogger(__name__)

MODEL_CHOICES = ['gemini-flash', 'claude', 'deepseek-chat']

_FENCE_RE = re.compile(r'^\s*```(?:json)?\s*(.*?)\s*```\s*$', re.DOTALL)


# =============================================================================
# GEMINI CLIENT
# =============================================================================

def call_gemini(
    prompt: str,
    system: Optional[str] = None,
    max_tokens: int = 2000,
    response_schema: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Call the Gemini generateContent REST endpoint. Returns generated text.
    With response_schema the reply is JSON text matching the schema.
    """
    if not config.GEMINI_API_KEY:
        raise ValueError("GEMINI_API_KEY not set in environment")

    url = f"{config.GEMINI_BASE_URL}/models/{config.GEMINI_MODEL}:generateContent"

    generation_config: Dict[str, Any] = {"maxOutputTokens": max_tokens}
    if response_schema is not None:
        generation_config["responseMimeType"] = "application/json"
        generation_config["responseSchema"] = response_schema

    payload: Dict[str, Any] = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": generation_config,
    }
    if system:
        payload["systemInstruction"] = {"parts": [{"text": system}]}

    headers = {
        "x-goog-api-key": config.GEMINI_API_KEY,
        "Content-Type": "application/json",
    }

    try:
        logger.debug(f"Calling Gemini API with model {config.GEMINI_MODEL}")
        response = requests.post(
            url, json=payload, headers=headers,
            timeout=(10, config.AI_TIMEOUT_SECONDS), verify=True,
        )
        response.raise_for_status()

        result = response.json()
        parts = result['candidates'][0]['content'].get('parts', [])
        return ''.join(part.get('text', '') for part in parts)

    except requests.exceptions.RequestException as e:
        logger.error(f"Gemini API error: {e}")
        raise RuntimeError(f"Failed to call Gemini API: {e}")
    except (KeyError, IndexError, ValueError) as e:
        logger.error(f"Gemini response parse error: {e}")
        raise RuntimeError(f"Unexpected Gemini response format: {e}")


# =============================================================================
# SCHEMA HELPERS
# =============================================================================

def to_json_schema(schema: Any) -> Any:
    """
    Gemini schemas spell types in upper case ("OBJECT", "STRING").
    Claude tools and prompt-embedded schemas want standard JSON Schema.
    """
    if isinstance(schema, dict):
        return {
            key: value.lower() if key == 'type' and isinstance(value, str) else to_json_schema(value)
            for key, value in schema.items()
        }
    if isinstance(schema, list):
        return [to_json_schema(item) for item in schema]
    return schema


def _schema_instruction(schema: Dict[str, Any]) -> str:
    return (
        "Reply with a single JSON object matching this JSON schema, and nothing else:\n"
        f"{json.dumps(to_json_schema(schema), ensure_ascii=False)}"
    )


# =============================================================================
# CLAUDE CLIENT
# =============================================================================

CLAUDE_SYSTEM = "You are a music PR manager working for an independent label."
CLAUDE_JSON_TOOL = "record_result"


def call_claude(
    prompt: str,
    system: Optional[str] = None,
    max_tokens: int = 2000,
    response_schema: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Call Claude through the Anthropic SDK. Returns generated text.
    With response_schema Claude is made to call a single tool whose input
    schema is the requested one; the tool input comes back as JSON text.
    """
    if not config.ANTHROPIC_API_KEY:
        raise ValueError("ANTHROPIC_API_KEY not set in environment")

    request: Dict[str, Any] = {
        "model": config.CLAUDE_MODEL,
        "max_tokens": max_tokens,
        "system": system or CLAUDE_SYSTEM,
        "messages": [{"role": "user", "content": prompt}],
    }
    if response_schema is not None:
        request["tools"] = [{
            "name": CLAUDE_JSON_TOOL,
            "description": "Record the structured data extracted from the text.",
            "input_schema": to_json_schema(response_schema),
        }]
        request["tool_choice"] = {"type": "tool", "name": CLAUDE_JSON_TOOL}

    client = Anthropic(api_key=config.ANTHROPIC_API_KEY)
    try:
        logger.debug(f"Calling Claude API with model {config.CLAUDE_MODEL}")
        message = client.messages.create(**request)
    except Exception as e:
        logger.error(f"Claude API error: {e}")
        raise RuntimeError(f"Failed to call Claude API: {e}")

    if response_schema is None:
        return ''.join(getattr(block, 'text', '') for block in message.content)
    for block in message.content:
        if getattr(block, 'type', None) == 'tool_use':
            return json.dumps(block.input, ensure_ascii=False)
    logger.error(f"Claude reply has no {CLAUDE_JSON_TOOL} call (stop_reason={message.stop_reason})")
    raise RuntimeError("Claude did not return structured output")


# =============================================================================
# DEEPSEEK CLIENT
# =============================================================================

def call_deepseek(
    prompt: str,
    model: str = 'deepseek-chat',
    system: Optional[str] = None,
    max_tokens: int = 2000,
    response_schema: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Call the DeepSeek chat completions endpoint (OpenAI-compatible).
    With response_schema DeepSeek's JSON mode is switched on and the schema
    travels in the system message, which JSON mode requires to mention JSON.
    """
    if not config.DEEPSEEK_API_KEY:
        raise ValueError("DEEPSEEK_API_KEY not set in environment")

    if response_schema is not None:
        system = f"{system}\n\n{_schema_instruction(response_schema)}" if system \
            else _schema_instruction(response_schema)

    messages = [{"role": "system", "content": system}] if system else []
    messages.append({"role": "user", "content": prompt})

    payload: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
        "stream": False,
    }
    if response_schema is not None:
        payload["response_format"] = {"type": "json_object"}

    try:
        logger.debug(f"Calling DeepSeek API with model {model}")
        response = requests.post(
            f"{config.DEEPSEEK_BASE_URL}/chat/completions",
            json=payload,
            headers={"Authorization": f"Bearer {config.DEEPSEEK_API_KEY}"},
            timeout=(10, config.AI_TIMEOUT_SECONDS),
        )
        response.raise_for_status()
        choice = response.json()['choices'][0]
        content = choice['message'].get('content') or ''
    except requests.exceptions.RequestException as e:
        logger.error(f"DeepSeek API error: {e}")
        raise RuntimeError(f"Failed to call DeepSeek API: {e}")
    except (KeyError, IndexError, ValueError) as e:
        logger.error(f"DeepSeek response parse error: {e}")
        raise RuntimeError(f"Unexpected DeepSeek response format: {e}")

    if choice.get('finish_reason') == 'length':
        logger.warning(f"DeepSeek reply cut at max_tokens={max_tokens}")
    return content


# =============================================================================
# UNIFIED ROUTER
# =============================================================================

def call_ai(
    prompt: str,
    model: Optional[str] = None,
    system: Optional[str] = None,
    max_tokens: int = 2000
) -> str:
    """
    Route an AI call to the appropriate backend.

    Args:
        prompt: User prompt text
        model: One of 'gemini-flash', 'claude', 'deepseek-chat'; defaults to DEFAULT_AI_MODEL
        system: Optional system prompt
        max_tokens: Max tokens to generate

    Returns: Generated text
    """
    model = model or config.DEFAULT_AI_MODEL
    if model == 'gemini-flash':
        return call_gemini(prompt, system=system, max_tokens=max_tokens)
    elif model == 'claude':
        return call_claude(prompt, system=system, max_tokens=max_tokens)
    elif model == 'deepseek-chat':
        return call_deepseek(prompt, model=model, system=system, max_tokens=max_tokens)
    else:
        raise ValueError(f"Unknown AI model '{model}'. Choose from: {', '.join(MODEL_CHOICES)}")


def parse_json_reply(text: str) -> Any:
    """Parse a JSON reply, tolerating a surrounding Markdown code fence."""
    text = (text or '').strip()
    match = _FENCE_RE.match(text)
    if match:
        text = match.group(1)
    try:
        return json.loads(text or '{}')
    except ValueError as e:
        logger.error(f"AI JSON parse error: {e}")
        raise RuntimeError(f"AI reply is not valid JSON: {e}")


def call_ai_json(
    prompt: str,
    schema: Dict[str, Any],
    model: Optional[str] = None,
    max_tokens: int = 4000,
) -> Any:
    """
    Ask for JSON matching schema and return it parsed.
    Raises RuntimeError if the reply is not valid JSON.
    """
    model = model or config.DEFAULT_AI_MODEL
    if model == 'gemini-flash':
        text = call_gemini(prompt, max_tokens=max_tokens, response_schema=schema)
    elif model == 'claude':
        text = call_claude(prompt, max_tokens=max_tokens, response_schema=schema)
    elif model == 'deepseek-chat':
        text = call_deepseek(prompt, model=model, max_tokens=max_tokens, response_schema=schema)
    else:
        raise ValueError(f"Unknown AI model '{model}'. Choose from: {', '.join(MODEL_CHOICES)}")
    return parse_json_reply(text)
