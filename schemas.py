# schemas.py

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Request models ---

class TextContent(BaseModel):
    """The instruction part of a multimodal message."""
    type: Literal["text"] = "text"
    text: str


class ImageURL(BaseModel):
    url: str
    detail: str = "high"


class ImageUrlContent(BaseModel):
    """An image part of a multimodal message, carried as a data URL."""
    type: Literal["image_url"] = "image_url"
    image_url: ImageURL


RequestContent = Annotated[Union[TextContent, ImageUrlContent], Field(discriminator="type")]


class APIRequestMessage(BaseModel):
    """A single message in a chat conversation."""
    role: str
    content: List[RequestContent]


class APIRequestBody(BaseModel):
    """The main body of the request sent to the Chat Completions API."""
    model: str
    messages: List[APIRequestMessage]
    max_tokens: Optional[int] = None


# --- Response models ---
# Unknown fields are ignored so that additions to the API do not break decoding.

class FinishReason(str, Enum):
    """Why the model stopped producing tokens. Only STOP marks a complete answer."""
    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    TOOL_CALLS = "tool_calls"
    FUNCTION_CALL = "function_call"


class _ResponseModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class TopLogProb(_ResponseModel):
    token: str
    logprob: float
    bytes: Optional[List[int]] = None


class TokenInfo(_ResponseModel):
    token: str
    logprob: float
    bytes: Optional[List[int]] = None
    top_logprobs: List[TopLogProb] = Field(default_factory=list)


class LogProbs(_ResponseModel):
    content: Optional[List[TokenInfo]] = None


class APIResponseMessage(_ResponseModel):
    """The message object returned by the API."""
    role: str
    content: Optional[str] = None


class Choice(_ResponseModel):
    """A single choice from the list of API responses."""
    index: int
    message: APIResponseMessage
    logprobs: Optional[LogProbs] = None
    finish_reason: FinishReason


class Usage(_ResponseModel):
    """Token usage statistics for the API call."""
    prompt_tokens: int = Field(ge=0)
    completion_tokens: int = Field(ge=0)
    total_tokens: int = Field(ge=0)


class ChatCompletionResponse(_ResponseModel):
    """The top-level structure of the API's JSON response."""
    id: str
    object: str
    created: int
    model: str
    system_fingerprint: Optional[str] = None
    choices: List[Choice]
    usage: Usage
