from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from gemini_video.models.tools import ToolResponse, ToolSpec
from gemini_video.tools import ToolDispatcher

router = APIRouter(prefix="/api/video", tags=["video"])


def get_dispatcher(request: Request) -> ToolDispatcher:
    return request.app.state.dispatcher


@router.get("/tools")
def list_tools(dispatcher: ToolDispatcher = Depends(get_dispatcher)) -> list[ToolSpec]:
    return dispatcher.list_tools()


@router.post("/tools/{name}")
def call_tool(
    name: str,
    arguments: dict[str, Any] | None = Body(default=None),
    dispatcher: ToolDispatcher = Depends(get_dispatcher),
) -> ToolResponse:
    return dispatcher.call_tool(name, arguments)
