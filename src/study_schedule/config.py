import os

# Record store (unset -> process-local in-memory tables)
DATABASE_URL = os.getenv("DATABASE_URL", "").strip()

# Extraction upstream
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "gemini").strip().lower()
LLM_TIMEOUT_S = float(os.getenv("LLM_TIMEOUT_S", "60"))
LLM_STRICT_JSON = os.getenv("LLM_STRICT_JSON", "false").lower() in {"1", "true", "yes"}

GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash-exp").strip()
GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
).strip()

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").strip()

OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.1").strip()
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").strip()

# Settings gate. Not an access-control mechanism, see study_schedule.navigation.
SETTINGS_PASSCODE = os.getenv("SETTINGS_PASSCODE", "31134")

# Chat sessions hold the user's API key; idle ones are dropped
SESSION_IDLE_TTL_S = float(os.getenv("SESSION_IDLE_TTL_S", "1800"))
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "50"))
