"""
crm_assistant/core/config.py

Centralised configuration loaded from environment variables.
Use a .env file locally; Docker Compose injects these at runtime.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ── Application ────────────────────────────────────────────────────────────
    app_name: str = "CRM Knowledge Assistant API"
    app_version: str = "1.0.0"
    debug: bool = False

    # ── Vector index ───────────────────────────────────────────────────────────
    vector_backend: str = "chroma"          # "chroma" | "memory"
    chroma_persist_dir: str = "./data/chroma"
    vector_namespace: str = "knowledge"

    # ── Embedder ───────────────────────────────────────────────────────────────
    embedding_provider: str = "sentence-transformers"   # or "openai"
    embedding_model: str = "all-MiniLM-L6-v2"
    openai_embedding_model: str = "text-embedding-3-small"

    # ── Generation ─────────────────────────────────────────────────────────────
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    chat_model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_output_tokens: int = 500
    max_input_chars: Optional[int] = 12000

    # ── Retrieval ──────────────────────────────────────────────────────────────
    retrieval_top_k: int = 3

    # ── Persistence ────────────────────────────────────────────────────────────
    document_db_path: str = "./data/documents.sqlite3"
    session_db_path: str = "./data/sessions.sqlite3"
    session_timezone: Optional[str] = None   # IANA name; None = server local time

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Single shared instance; import this everywhere.
settings = Settings()
