"""
Label PR Desk Configuration
Loads settings from environment variables with sensible defaults.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

# Load .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

STORAGE_BACKENDS = ('local', 'firebase')


class Config:
    """Application configuration."""

    # Storage backend: local JSON file or Firebase Realtime Database document
    STORAGE_BACKEND = os.getenv('STORAGE_BACKEND', 'local').strip().lower()
    if STORAGE_BACKEND not in STORAGE_BACKENDS:
        _logger.critical(f"STORAGE_BACKEND={STORAGE_BACKEND!r} is not supported.")
        raise ValueError(
            f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, got {STORAGE_BACKEND!r}"
        )

    # Local store file (relative paths resolve against the project root)
    STORE_PATH = os.getenv('STORE_PATH', 'data/store.json')

    # Firebase — only needed when STORAGE_BACKEND=firebase
    FIREBASE_DB_URL = os.getenv('FIREBASE_DB_URL', '')
    FIREBASE_DOC_PATH = os.getenv('FIREBASE_DOC_PATH', 'labelpr/store')
    FIREBASE_AUTH_TOKEN = os.getenv('FIREBASE_AUTH_TOKEN', '')
    if STORAGE_BACKEND == 'firebase' and not FIREBASE_DB_URL:
        _logger.critical("FIREBASE_DB_URL is not set — cannot use the firebase backend.")
        raise ValueError("FIREBASE_DB_URL environment variable is not set. Copy .env.example to .env and configure it.")

    # AI Configuration
    # Gemini (default: pitches and smart import)
    GEMINI_API_KEY = os.getenv('GEMINI_API_KEY', '')
    GEMINI_BASE_URL = os.getenv('GEMINI_BASE_URL', 'https://generativelanguage.googleapis.com/v1beta')
    GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-3-flash-preview')
    DEFAULT_AI_MODEL = os.getenv('DEFAULT_AI_MODEL', 'gemini-flash')
    # Claude
    ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY', '')
    CLAUDE_MODEL = os.getenv('CLAUDE_MODEL', 'claude-3-5-sonnet-20241022')
    # DeepSeek
    DEEPSEEK_API_KEY = os.getenv('DEEPSEEK_API_KEY', '')
    DEEPSEEK_BASE_URL = os.getenv('DEEPSEEK_BASE_URL', 'https://api.deepseek.com')

    AI_TIMEOUT_SECONDS = float(os.getenv('AI_TIMEOUT_SECONDS', '120'))


# Singleton instance
config = Config()
