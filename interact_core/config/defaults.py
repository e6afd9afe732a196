"""interact_core.config.defaults
=============================

Small, stable default values used across the package. They can be overridden
through the layered configuration in :mod:`interact_core.config`; nothing here
performs I/O or imports other package modules.
"""

from __future__ import annotations

# ---- Backend ----
API_DEFAULT_BASE_URL = "http://localhost:8000/api"
API_DEFAULT_TIMEOUT_SECONDS = 30.0

# ---- Durable local state ----
STORAGE_NAMESPACE = "interact"
CONVERSATIONS_KEY = "conversations"
LANGUAGE_KEY = "language"
ACCESS_TOKEN_KEY = "access_token"
API_KEY_KEY = "api_key"  # pragma: allowlist secret - storage key name, not a secret
SQLITE_DEFAULT_PATH = "~/.interact/interact.db"
SQLITE_BUSY_TIMEOUT_MS = 5000
SQLITE_JOURNAL_MODE = "WAL"
SQLITE_SYNCHRONOUS = "NORMAL"

# ---- Conversations ----
DEFAULT_APP_LANGUAGE = "fr"
SUPPORTED_UI_LANGUAGES = ("en", "fr")
NEW_CONVERSATION_TITLE = "Nouvelle conversation"
HYDRATED_CONVERSATION_TITLE = "Conversation"
LOCAL_ID_PREFIX = "local-"

# Episodic entries handed to the synthesizer per reply.
EPISODIC_CONTEXT_WINDOW = 5
# Per-side clip of the "user → assistant" summary stored for each exchange.
EPISODIC_EXCHANGE_MAX_CHARS = 80

# ---- Synthesizer ----
SYNTH_GENERATED_BY = "reasoning-sim"
SYNTH_MODEL_TAG = "sim-reasoner-v1"
SYNTH_DEFAULT_AGENT_NAME = "INTERACT"
SYNTH_EMOJI_PROBABILITY = 0.4
SYNTH_MEMORY_RECALL_PROBABILITY = 0.4
SYNTH_MEMORY_RECALL_WINDOW = 3
SYNTH_LATENCY_MIN_MS = 300
SYNTH_LATENCY_MAX_MS = 1200

# ---- Streaming ----
SSE_DATA_PREFIX = "data: "
STREAM_GENERATED_BY = "backend-stream"
