# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; put them in .env (local, gitignored).
"""

ENV_VARS = {
    # App / logging
    "WORKPLAN_APP_NAME": "App display name (default: workplan).",
    "WORKPLAN_LOG_LEVEL": "Console logging level (default: INFO).",
    # Plan generation (OpenAI-compatible endpoint)
    "WORKPLAN_OPENROUTER_API_KEY": "OpenRouter API key (required only for /analyze).",
    "WORKPLAN_OPENROUTER_BASE_URL": "Base URL (default: https://openrouter.ai/api/v1).",
    "WORKPLAN_LLM_MODELS": "Comma/space separated list of models to try in order.",
    "WORKPLAN_LLM_TIMEOUT_SECONDS": "Per-request read timeout (default: 60).",
    "WORKPLAN_HTTP_REFERER": "Optional OpenRouter metadata header.",
    "WORKPLAN_APP_TITLE": "Optional OpenRouter metadata header title.",
    # Document ingestion
    "WORKPLAN_MAX_DOCUMENT_CHARS": "Document text sent to the model is cut at this length (default: 200000).",
    # Paths (gitignored)
    "WORKPLAN_DATA_DIR": "Local data directory, also holds workplan.log (default: .local/workplan).",
    "WORKPLAN_REMINDERS_DB_PATH": "Reminder store SQLite path (default: <data_dir>/reminders.sqlite3).",
}
