"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


# Data folders (relative to the working directory unless absolute)
SQLITE_DIR: str = os.getenv("SQLITE_DIR", "data/sqlite").strip() or "data/sqlite"
DOCS_DIR: str = os.getenv("DOCS_DIR", "data/documents").strip() or "data/documents"

# Document corpus: readable extensions, chunking and snippet size
DOC_EXTENSIONS: frozenset[str] = frozenset({".txt", ".md", ".pdf"})
CHUNK_SIZE: int = 800
CHUNK_OVERLAP: int = 150
SNIPPET_MAX_CHARS: int = 400
DOCS_TOP_K: int = 3

# Structured data: hard cap on rows read per relation (not configurable)
SQL_ROW_LIMIT: int = 10

# Hugging Face (embeddings fallback / LLM fallback)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()
HF_EMBED_MODEL: str = "sentence-transformers/all-MiniLM-L6-v2"
HF_CHAT_URL: str = "https://router.huggingface.co/v1/chat/completions"
HF_LLM_MODEL: str = (
    os.getenv("HF_LLM_MODEL", "meta-llama/Llama-3.2-3B-Instruct").strip()
    or "meta-llama/Llama-3.2-3B-Instruct"
)
EMBED_BATCH_SIZE: int = 32

# OpenAI (router / answer LLM and embeddings). Primary when the key is set.
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)
OPENAI_EMBED_MODEL: str = (
    os.getenv("OPENAI_EMBED_MODEL", "text-embedding-3-small").strip()
    or "text-embedding-3-small"
)
LLM_TEMPERATURE: float = 0.0
LLM_MAX_TOKENS: int = 1024

# API timeouts (seconds)
EMBED_API_TIMEOUT: float = 30.0
LLM_API_TIMEOUT: float = 60.0
WEB_HTTP_TIMEOUT: float = 15.0

# Web search providers, queried in this order
SEARX_URL: str = os.getenv("SEARX_URL", "https://searx.perennialte.ch/search").strip()
DUCKDUCKGO_URL: str = "https://api.duckduckgo.com/"
WIKIPEDIA_SUMMARY_URL: str = (
    os.getenv("WIKIPEDIA_SUMMARY_URL", "https://en.wikipedia.org/api/rest_v1/page/summary/").strip()
    or "https://en.wikipedia.org/api/rest_v1/page/summary/"
)
WEB_USER_AGENT: str = "evidence-agent/0.1 (+https://github.com/)"

# Web policy: "aggregate" queries every provider, "first_success" stops early
WEB_SEARCH_POLICY: str = os.getenv("WEB_SEARCH_POLICY", "aggregate").strip().lower() or "aggregate"
WEB_CONCURRENT_PROVIDERS: bool = _env_flag("WEB_CONCURRENT_PROVIDERS")

# Approval gate: skip the operator prompt for outbound web commands
WEB_AUTO_APPROVE: bool = _env_flag("WEB_AUTO_APPROVE")

# Evidence collection: run SQL and DOCS collection on two worker threads
COLLECT_CONCURRENTLY: bool = _env_flag("COLLECT_CONCURRENTLY")
