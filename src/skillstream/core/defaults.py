"""Default configuration values for skillstream.

All configurable defaults are defined here. These can be overridden by:
1. Config file (~/.skillstream/config.yaml)
2. Environment variables
3. CLI flags

Priority (highest to lowest):
CLI flags > Environment > Config file > Defaults
"""

from __future__ import annotations

# =============================================================================
# SERVER
# =============================================================================

DEFAULT_HOST: str = "0.0.0.0"

DEFAULT_PORT: int = 8787

DEFAULT_LOG_LEVEL: str = "info"

# Origins allowed by the CORS layer ("*" = any)
DEFAULT_CORS_ORIGINS: list[str] = ["*"]

VERSION: str = "2.0.0"

# =============================================================================
# UPSTREAM PROVIDERS
# =============================================================================

# Text completion provider (OpenAI-compatible streaming API)
DEFAULT_TEXT_API_URL: str = "https://api.deepseek.com/chat/completions"
DEFAULT_TEXT_MODEL: str = "deepseek-chat"

# Vision provider (OpenAI-compatible multi-part messages)
DEFAULT_VISION_API_URL: str = "https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions"
DEFAULT_VISION_MODEL: str = "qwen-vl-plus"

DEFAULT_TEMPERATURE: float = 0.7

# Connect/read timeout in seconds for a single upstream read. There is no
# total-stream deadline; a stalled read fails the skill step.
DEFAULT_REQUEST_TIMEOUT: float = 60.0

# Attempts for opening an upstream stream (1 = no retry)
DEFAULT_RETRY_ATTEMPTS: int = 2

# Initial backoff delay in seconds
DEFAULT_RETRY_DELAY: float = 0.5

DEFAULT_RETRY_MAX_DELAY: float = 10.0

# =============================================================================
# TASKS & TOOLS
# =============================================================================

# Maximum tasks tracked in memory before old finished ones are evicted
DEFAULT_MAX_TASKS: int = 100

# Fraction of tracked tasks considered for eviction at once
TASK_EVICTION_RATIO: float = 0.2

# Tool-result cache TTL in seconds
DEFAULT_TOOL_CACHE_TTL: float = 300.0

DEFAULT_TOOL_CACHE_MAX_ENTRIES: int = 1000

# Maximum cache size in bytes (10MB)
DEFAULT_TOOL_CACHE_MAX_SIZE: int = 10 * 1024 * 1024

# Injected tool output is truncated to this many characters
TOOL_RESULT_PREVIEW_CHARS: int = 1000

# Request bodies above this size are rejected (10MB)
MAX_REQUEST_BYTES: int = 10 * 1024 * 1024
