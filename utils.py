# utils.py

import logging
import os
import random
import time
import base64
from typing import Optional, Sequence
from logging.handlers import RotatingFileHandler

import httpx

import config
import prompts
from schemas import (
    APIRequestBody,
    APIRequestMessage,
    ChatCompletionResponse,
    ImageURL,
    ImageUrlContent,
    TextContent,
)

logger = logging.getLogger(__name__)

# Leading bytes of the image encodings the API accepts.
_MAGIC_NUMBERS = (
    (b'\xff\xd8\xff', 'image/jpeg'),
    (b'\x89PNG\r\n\x1a\n', 'image/png'),
    (b'GIF87a', 'image/gif'),
    (b'GIF89a', 'image/gif'),
    (b'BM', 'image/bmp'),
)

DEFAULT_MIME_TYPE = 'image/jpeg'


def detect_mime_type(image_data: bytes) -> str:
    """
    Returns the MIME type of an image by inspecting its magic bytes.
    Unrecognized data is labelled image/jpeg; the bytes are sent as they are.
    """
    if image_data[:4] == b'RIFF' and image_data[8:12] == b'WEBP':
        return 'image/webp'
    for magic, mime_type in _MAGIC_NUMBERS:
        if image_data.startswith(magic):
            return mime_type
    logger.warning("Unrecognized image format, labelling it as image/jpeg.")
    return DEFAULT_MIME_TYPE


def encode_image_data_url(image_data: bytes) -> str:
    """Wraps raw image bytes in a base64 data URL labelled with their real type."""
    mime_type = detect_mime_type(image_data)
    base64_image = base64.b64encode(image_data).decode('utf-8')
    return f"data:{mime_type};base64,{base64_image}"


def read_image_file(path: str) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


LOG_FORMATTER = logging.Formatter(
    '%(asctime)s - %(levelname)s - [%(threadName)s] - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


def configure_logging():
    """
    Configures console logging on the root logger.
    Console output goes to stderr; stdout is reserved for extracted sentences.
    Nothing touches the filesystem until enable_file_logging is called.
    """
    # Get the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    # Prevent duplicate handlers if this function is called multiple times
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    # --- Console (Stream) Handler ---
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(LOG_FORMATTER)
    root_logger.addHandler(stream_handler)


def enable_file_logging():
    """Adds a rotating log file under config.LOG_DIR to the root logger."""
    # Ensure the log directory exists
    os.makedirs(config.LOG_DIR, exist_ok=True)
    log_file_path = os.path.join(config.LOG_DIR, config.LOG_FILENAME)

    # --- Rotating File Handler ---
    # Rotates logs when they reach 10MB, keeping 5 old log files as backup.
    file_handler = RotatingFileHandler(
        log_file_path, maxBytes=10*1024*1024, backupCount=5, encoding='utf-8'
    )
    file_handler.setFormatter(LOG_FORMATTER)
    logging.getLogger().addHandler(file_handler)

    logger.debug(f"Logging to {log_file_path}.")


def build_request(images: Sequence[bytes]) -> dict:
    """
    Builds the chat completion payload for one batch of images.

    The content list holds the extraction prompt followed by one image entry
    per input, in the order given. The batch size is not checked here.
    """
    content = [TextContent(text=prompts.get_extraction_prompt())]
    for image_data in images:
        content.append(ImageUrlContent(
            image_url=ImageURL(url=encode_image_data_url(image_data), detail=config.IMAGE_DETAIL)
        ))

    api_request_body = APIRequestBody(
        model=config.MODEL_NAME,
        max_tokens=config.MAX_TOKENS,
        messages=[APIRequestMessage(role="user", content=content)],
    )
    return api_request_body.model_dump(exclude_none=True)


def call_chat_completion_api(
    client: httpx.Client,
    api_key: str,
    payload: dict,
    max_retries: Optional[int] = None,
    initial_delay: Optional[float] = None,
) -> ChatCompletionResponse:
    """
    Sends one chat completion request and decodes the response.

    Args:
        client: An httpx.Client instance for connection pooling.
        api_key: Bearer token for the API.
        payload: The request body produced by build_request.
        max_retries: Total attempts. Defaults to config.API_RETRIES.
        initial_delay: Initial delay in seconds for retries.

    Network errors, server errors and rate limits are retried while attempts
    remain. Other HTTP errors and malformed responses are raised immediately.
    """
    if max_retries is None:
        max_retries = config.API_RETRIES
    if initial_delay is None:
        initial_delay = config.INITIAL_RETRY_DELAY
    max_retries = max(1, max_retries)

    headers = {'Content-Type': 'application/json', 'Authorization': f'Bearer {api_key}'}

    delay = initial_delay
    for i in range(max_retries):
        try:
            start_time = time.monotonic()
            response = client.post(config.API_URL, headers=headers, json=payload, timeout=config.REQUEST_TIMEOUT)
            duration = time.monotonic() - start_time
            logger.info(f"API call to {config.API_URL} responded in {duration:.2f} seconds.")

            response.raise_for_status()
            return ChatCompletionResponse.model_validate(response.json())

        except (httpx.RequestError, httpx.HTTPStatusError) as e:
            is_server_error = isinstance(e, httpx.HTTPStatusError) and e.response.status_code >= 500
            is_rate_limit_error = isinstance(e, httpx.HTTPStatusError) and e.response.status_code == 429
            is_network_error = isinstance(e, httpx.RequestError)

            # Only retry on server errors, rate limits, or network errors.
            if not (is_server_error or is_rate_limit_error or is_network_error):
                logger.error(f"Non-retryable client error: {e}")
                raise

            logger.warning(f"API call failed (Attempt {i + 1}/{max_retries}): {e}.")
            if i == max_retries - 1:
                raise

            wait_time = delay

            if is_rate_limit_error:
                retry_after_header = e.response.headers.get('Retry-After')
                if retry_after_header:
                    try:
                        wait_time = int(retry_after_header)
                        logger.info(f"Rate limit hit. Honoring 'Retry-After' header, waiting for {wait_time} seconds.")
                    except (ValueError, TypeError):
                        logger.warning(f"Could not parse 'Retry-After' header: '{retry_after_header}'. Using exponential backoff.")

            jitter = random.uniform(0, 1)
            total_wait = wait_time + jitter

            logger.info(f"Retrying in {total_wait:.2f} seconds.")
            time.sleep(total_wait)

            delay *= config.EXPONENTIAL_BACKOFF_FACTOR

        except ValueError as e:
            # Covers malformed JSON as well as pydantic validation failures.
            logger.error(f"Could not decode API response: {e}")
            raise
