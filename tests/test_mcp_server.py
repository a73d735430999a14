import asyncio

import pytest
from unittest.mock import MagicMock

from fastmcp import Client
from fastmcp.exceptions import ToolError

from gemini_video.exceptions import InvalidArgumentsError
from gemini_video.mcp_server import DispatchedTool, create_server
from gemini_video.models.tools import ToolResponse
from gemini_video.tools import TOOL_SPECS, ToolDispatcher


@pytest.fixture
def mock_dispatcher():
    dispatcher = MagicMock(spec=ToolDispatcher)
    dispatcher.list_tools.return_value = list(TOOL_SPECS)
    return dispatcher


class TestCreateServer:
    def test_registers_catalog(self, app_config, mock_dispatcher):
        mcp = create_server(app_config, mock_dispatcher)
        tools = asyncio.run(mcp.get_tools())
        assert set(tools) == {"analyzeLocalVideo", "analyzeRemoteVideo", "checkEnvironment"}
        assert tools["analyzeRemoteVideo"].parameters["required"] == ["videoUrl"]

    def test_builds_dispatcher_when_missing(self, app_config, mock_genai_client):
        mcp = create_server(app_config)
        tools = asyncio.run(mcp.get_tools())
        assert "checkEnvironment" in tools


class TestDispatchedTool:
    def test_forwards_raw_arguments(self, mock_dispatcher):
        mock_dispatcher.call_tool.return_value = ToolResponse.from_text("ok")
        tool = DispatchedTool.from_spec(TOOL_SPECS[0], mock_dispatcher)
        result = asyncio.run(tool.run({"filePath": "clip.mp4"}))
        assert result.content[0].text == "ok"
        mock_dispatcher.call_tool.assert_called_once_with("analyzeLocalVideo", {"filePath": "clip.mp4"})

    def test_dispatcher_errors_propagate(self, mock_dispatcher):
        mock_dispatcher.call_tool.side_effect = InvalidArgumentsError("Invalid arguments for analyzeLocalVideo")
        tool = DispatchedTool.from_spec(TOOL_SPECS[0], mock_dispatcher)
        with pytest.raises(InvalidArgumentsError):
            asyncio.run(tool.run({}))

    def test_check_environment_end_to_end(self, app_config, mock_genai_client):
        tool = DispatchedTool.from_spec(TOOL_SPECS[2], ToolDispatcher(app_config))
        result = asyncio.run(tool.run({}))
        assert "AIza…JK" in result.content[0].text


async def _call_in_memory(mcp, name, arguments):
    async with Client(mcp) as client:
        return await client.call_tool(name, arguments)


class TestMcpClient:
    def test_check_environment(self, app_config, mock_genai_client):
        mcp = create_server(app_config, ToolDispatcher(app_config))
        result = asyncio.run(_call_in_memory(mcp, "checkEnvironment", {}))
        assert "AIza…JK" in result.content[0].text

    def test_invalid_arguments_become_tool_error(self, app_config, mock_genai_client):
        mcp = create_server(app_config, ToolDispatcher(app_config))
        with pytest.raises(ToolError) as exc_info:
            asyncio.run(_call_in_memory(mcp, "analyzeLocalVideo", {}))
        assert "filePath" in str(exc_info.value)
        mock_genai_client.files.upload.assert_not_called()
