from typing import Any

from mcp.types import TextContent
from pydantic import BaseModel

from gemini_video.models.video import LocalVideoRequest, RemoteVideoRequest


class ToolSpec(BaseModel):
    name: str
    description: str
    input_schema: dict[str, Any]


class ToolResponse(BaseModel):
    content: list[TextContent]

    @classmethod
    def from_text(cls, text: str) -> "ToolResponse":
        return cls(content=[TextContent(type="text", text=text)])

    @property
    def text(self) -> str:
        return "\n".join(item.text for item in self.content)


class Validation(BaseModel):
    """Outcome of checking raw tool arguments: a parsed request or the violated expectation."""

    request: LocalVideoRequest | RemoteVideoRequest | None = None
    problem: str | None = None

    @property
    def ok(self) -> bool:
        return self.problem is None


class ErrorInfo(BaseModel):
    """Uniform view of any exception raised while running a tool."""

    message: str
    code: int | None = None
    status: str | None = None
