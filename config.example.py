# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKTANGO_APP_NAME": "App display name (default: tasktango).",
    "TASKTANGO_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "TASKTANGO_DATA_DIR": "Local directory for tasktango.log (default: .local/tasktango).",
    # Connectors
    "TASKTANGO_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    # Suggestions
    "TASKTANGO_SUGGESTION_ENDPOINT": "Completion endpoint to POST to (default: http://localhost:5000/llama).",
    "TASKTANGO_SUGGESTION_MAX_TOKENS": "max_tokens sent with each request (default: 100).",
    "TASKTANGO_SUGGESTION_PROMPT_PREFIX": "Text put before the task summary (default: 'Categorize these tasks: ').",
    "TASKTANGO_SUGGESTIONS_OFFLINE": "Use the offline demo provider instead of HTTP (true/false).",
    # Task list
    "TASKTANGO_SAMPLE_TASKS": "Seed sample tasks on startup (true/false, default: true).",
    "TASKTANGO_SAMPLE_TASK_COUNT": "How many sample tasks to seed (default: 10).",
    # Support chat
    "TASKTANGO_CHAT_REPLY_DELAY_SECONDS": "Delay before the support bot answers (default: 1.0).",
}
