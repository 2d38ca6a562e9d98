# processing.py

import logging
import time
from typing import Iterator, List, Optional, Sequence

import httpx

import config
import utils
from schemas import ChatCompletionResponse, FinishReason

logger = logging.getLogger(__name__)


def chunked(items: Sequence, size: int) -> Iterator[list]:
    """Yields consecutive slices of at most `size` items, preserving order."""
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def extract_lines(response: ChatCompletionResponse) -> List[str]:
    """
    Collects the sentences from every completed choice.

    Choices that did not finish with `stop` were truncated, filtered or
    turned into a tool call; their content is dropped entirely. Completed
    content is split on newlines and empty lines are kept.
    """
    lines = []
    for choice in response.choices:
        if choice.finish_reason != FinishReason.STOP:
            logger.warning(f"Skipping choice {choice.index}: finish reason '{choice.finish_reason.value}'.")
            continue
        if choice.message.content is None:
            continue
        lines.extend(choice.message.content.split('\n'))
    return lines


def process_batch(client: httpx.Client, api_key: str, paths: Sequence[str]) -> List[str]:
    """Reads one batch of images, sends them in a single request and returns the extracted lines."""
    images = [utils.read_image_file(path) for path in paths]
    payload = utils.build_request(images)
    response = utils.call_chat_completion_api(client, api_key, payload)
    logger.info(
        f"Response {response.id}: {len(response.choices)} choice(s), "
        f"{response.usage.total_tokens} tokens used."
    )
    return extract_lines(response)


def process_images(paths: Sequence[str], api_key: str, client: Optional[httpx.Client] = None) -> int:
    """
    Runs every image through the API in batches and prints the results.

    Batches are processed strictly in order and each batch's lines are
    printed before the next one is read. Any error propagates to the caller;
    lines from earlier batches have already been written by then.
    Returns the number of lines printed.
    """
    start_time = time.time()
    batches = list(chunked(paths, config.BATCH_SIZE))
    logger.info(f"Processing {len(paths)} image(s) in {len(batches)} batch(es).")

    owns_client = client is None
    if owns_client:
        client = httpx.Client()

    printed = 0
    try:
        for number, batch in enumerate(batches, start=1):
            logger.info(f"Starting batch {number}/{len(batches)} with {len(batch)} image(s).")
            for line in process_batch(client, api_key, batch):
                print(line, flush=True)
                printed += 1
    finally:
        if owns_client:
            client.close()

    logger.info(f"Printed {printed} line(s) in {time.time() - start_time:.2f} seconds.")
    return printed
