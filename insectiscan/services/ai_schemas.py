"""
Pydantic models for the chat-completions wire format.

Requests are built by PromptBuilder and serialized by RetryingTransport;
responses are validated here before the message text is handed on.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


# --- Request ---


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageURL(BaseModel):
    url: str  # data:<mime>;base64,<payload>


class ImagePart(BaseModel):
    type: Literal["image_url"] = "image_url"
    image_url: ImageURL


ContentPart = Annotated[Union[TextPart, ImagePart], Field(discriminator="type")]


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: list[ContentPart]


class ChatCompletionRequest(BaseModel):
    model: str
    messages: list[ChatMessage]
    max_tokens: int


# --- Response ---


class ResponseMessage(BaseModel):
    role: str = "assistant"
    content: Optional[str] = None


class Choice(BaseModel):
    message: ResponseMessage


class ChatCompletionResponse(BaseModel):
    choices: list[Choice]

    @property
    def first_content(self) -> Optional[str]:
        if not self.choices:
            return None
        return self.choices[0].message.content
