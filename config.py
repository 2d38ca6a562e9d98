# config.py

import os

# --- API Configuration ---
API_URL = 'https://api.openai.com/v1/chat/completions'
API_KEY_ENV_VAR = 'OPENAI_API_KEY'
MODEL_NAME = "gpt-4o"
MAX_TOKENS = 600
IMAGE_DETAIL = "high"

# Seconds before an in-flight request is abandoned.
REQUEST_TIMEOUT = 300.0

# --- Batching Configuration ---
# Number of images sent in a single chat completion request.
BATCH_SIZE = 8

# --- Retry Configuration ---
# Total attempts per batch. 1 means a single attempt with no retry.
API_RETRIES = 1
INITIAL_RETRY_DELAY = 1.5
EXPONENTIAL_BACKOFF_FACTOR = 2

# --- Logging Configuration ---
LOG_DIR = "logs"
LOG_FILENAME = "extraction.log"


class ConfigurationError(RuntimeError):
    """Raised when required runtime configuration is missing."""


def get_api_key() -> str:
    """Reads the API key from the environment, failing if it is unset or empty."""
    api_key = os.environ.get(API_KEY_ENV_VAR)
    if not api_key:
        raise ConfigurationError(f"{API_KEY_ENV_VAR} environment variable not set")
    return api_key
