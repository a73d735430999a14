import asyncio
from typing import Any

from fastmcp import FastMCP
from fastmcp.tools.tool import Tool, ToolResult
from pydantic import PrivateAttr

from gemini_video.config import AppConfig
from gemini_video.models.tools import ToolSpec
from gemini_video.tools import ToolDispatcher

SERVER_NAME = "gemini-video"


class DispatchedTool(Tool):
    """MCP tool whose arguments are passed through untouched to the dispatcher."""

    _dispatcher: ToolDispatcher = PrivateAttr()

    @classmethod
    def from_spec(cls, spec: ToolSpec, dispatcher: ToolDispatcher) -> "DispatchedTool":
        tool = cls(name=spec.name, description=spec.description, parameters=spec.input_schema)
        tool._dispatcher = dispatcher
        return tool

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        # The client is blocking; each call gets its own worker thread
        response = await asyncio.to_thread(self._dispatcher.call_tool, self.name, arguments)
        return ToolResult(content=response.content)


def create_server(config: AppConfig, dispatcher: ToolDispatcher | None = None) -> FastMCP:
    dispatcher = dispatcher or ToolDispatcher(config)
    mcp = FastMCP(SERVER_NAME)
    for spec in dispatcher.list_tools():
        mcp.add_tool(DispatchedTool.from_spec(spec, dispatcher))
    return mcp
