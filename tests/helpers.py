"""Test helpers for building API responses and recording requests."""

import json

import httpx

JPEG_BYTES = b'\xff\xd8\xff\xe0\x00\x10JFIF\x00' + b'\x01' * 16
PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 16


def make_response_body(choices=None, **extra):
    """Builds a minimal chat completion response body."""
    if choices is None:
        choices = [("stop", "")]
    body = {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1715000000,
        "model": "gpt-4o-2024-05-13",
        "system_fingerprint": "fp_abc123",
        "choices": [
            {
                "index": i,
                "message": {"role": "assistant", "content": content},
                "logprobs": None,
                "finish_reason": reason,
            }
            for i, (reason, content) in enumerate(choices)
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }
    body.update(extra)
    return body


class RecordingTransport(httpx.MockTransport):
    """Mock transport that remembers every request it served."""

    def __init__(self, responder):
        self.requests = []

        def handler(request):
            self.requests.append(request)
            return responder(request)

        super().__init__(handler)

    def payloads(self):
        return [json.loads(request.content) for request in self.requests]
