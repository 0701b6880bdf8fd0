"""
crm_assistant/core/constants.py

Application-wide fixed constants.

These are business rules that are part of the system's contract and are
NOT configurable via environment variables.
"""

# ── Chat session ───────────────────────────────────────────────────────────────

#: Id of the seeded greeting; it is excluded from the grouped history view.
WELCOME_MESSAGE_ID: str = "welcome"

WELCOME_MESSAGE: str = (
    "Hello! I'm your CRM assistant. Ask me anything about your contacts, "
    "deals, tasks, or any other CRM data."
)

#: Shown in place of a reply whenever generation fails.
APOLOGY_MESSAGE: str = (
    "Sorry, I encountered an error. Please try again later. "
    "Make sure your OpenAI API key is configured in Settings."
)

#: Per-user storage key is ``f"{SESSION_KEY_PREFIX}:{user_id}"``.
SESSION_KEY_PREFIX: str = "crm_ai_chat_history"

# ── Prompt assembly ────────────────────────────────────────────────────────────

SYSTEM_INSTRUCTION: str = (
    "You are a helpful CRM assistant for a sales team. Answer the user's "
    "question using the knowledge base context provided below. "
    "If the context is empty or does not contain the answer, say so briefly "
    "and fall back to general CRM and sales best-practice guidance. "
    "Keep answers concise and actionable."
)

#: Separates consecutive retrieved passages inside the context block.
CONTEXT_DELIMITER: str = "\n\n---\n\n"

# ── Knowledge documents ────────────────────────────────────────────────────────

DEFAULT_DOCUMENT_TYPE: str = "knowledge"
DEFAULT_DOCUMENT_SOURCE: str = "manual"
