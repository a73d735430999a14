"""Tool catalog, argument validation and dispatch to the Gemini video client."""

import json
import logging
from typing import Any

from gemini_video.config import AppConfig
from gemini_video.exceptions import InvalidArgumentsError, UnknownToolError
from gemini_video.models.tools import ErrorInfo, ToolResponse, ToolSpec, Validation
from gemini_video.models.video import LocalVideoRequest, RemoteVideoRequest
from gemini_video.services.gemini import DEFAULT_PROMPT, GeminiVideoClient

logger = logging.getLogger(__name__)

ANALYZE_LOCAL_VIDEO = "analyzeLocalVideo"
ANALYZE_REMOTE_VIDEO = "analyzeRemoteVideo"
CHECK_ENVIRONMENT = "checkEnvironment"

_MODEL_PROPERTY = {
    "type": "string",
    "description": "Override Gemini model name (defaults to gemini-2.5-flash).",
}
_PROMPT_PROPERTY = {
    "type": "string",
    "description": "Optional custom instruction for Gemini video analysis.",
    "default": DEFAULT_PROMPT,
}

ANALYZE_LOCAL_VIDEO_INPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "filePath": {
            "type": "string",
            "description": "Absolute or relative path to a local video file (≤ 20MB).",
        },
        "prompt": _PROMPT_PROPERTY,
        "mimeType": {
            "type": "string",
            "description": "MIME type for the provided file (guessed from the extension when omitted).",
        },
        "model": _MODEL_PROPERTY,
    },
    "required": ["filePath"],
    "additionalProperties": False,
}

ANALYZE_REMOTE_VIDEO_INPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "videoUrl": {
            "type": "string",
            "format": "uri",
            "description": "Remote video URL supported by Gemini (e.g., YouTube).",
        },
        "prompt": _PROMPT_PROPERTY,
        "model": _MODEL_PROPERTY,
    },
    "required": ["videoUrl"],
    "additionalProperties": False,
}

CHECK_ENVIRONMENT_INPUT_SCHEMA = {
    "type": "object",
    "properties": {},
    "additionalProperties": False,
}

TOOL_SPECS = [
    ToolSpec(
        name=ANALYZE_LOCAL_VIDEO,
        description="ローカルの動画ファイル (20MB 以下) を Gemini で要約します。",
        input_schema=ANALYZE_LOCAL_VIDEO_INPUT_SCHEMA,
    ),
    ToolSpec(
        name=ANALYZE_REMOTE_VIDEO,
        description="YouTube などの公開URLを Gemini で分析します。",
        input_schema=ANALYZE_REMOTE_VIDEO_INPUT_SCHEMA,
    ),
    ToolSpec(
        name=CHECK_ENVIRONMENT,
        description="GOOGLE_API_KEY が読み込まれているか確認し、現在の設定サマリを返します。",
        input_schema=CHECK_ENVIRONMENT_INPUT_SCHEMA,
    ),
]

EXPECTED_SHAPES = {
    ANALYZE_LOCAL_VIDEO: "{ filePath: string, prompt?: string, mimeType?: string, model?: string }",
    ANALYZE_REMOTE_VIDEO: "{ videoUrl: string, prompt?: string, model?: string }",
    CHECK_ENVIRONMENT: "{} (no arguments are required)",
}

PERMISSION_DENIED_MARKERS = ("permission denied", "does not have permission", "403")


# --- Argument validation ---

def _optional_string_problem(arguments: dict, keys: tuple[str, ...]) -> str | None:
    for key in keys:
        if key in arguments and not isinstance(arguments[key], str):
            return f"{key} must be a string when provided"
    return None


def validate_local_video_args(arguments: Any) -> Validation:
    if not isinstance(arguments, dict):
        return Validation(problem="arguments must be an object")
    if not isinstance(arguments.get("filePath"), str):
        return Validation(problem="filePath is required and must be a string")
    problem = _optional_string_problem(arguments, ("prompt", "mimeType", "model"))
    if problem:
        return Validation(problem=problem)
    return Validation(request=LocalVideoRequest(
        file_path=arguments["filePath"],
        prompt=arguments.get("prompt"),
        mime_type=arguments.get("mimeType"),
        model=arguments.get("model"),
    ))


def validate_remote_video_args(arguments: Any) -> Validation:
    if not isinstance(arguments, dict):
        return Validation(problem="arguments must be an object")
    if not isinstance(arguments.get("videoUrl"), str):
        return Validation(problem="videoUrl is required and must be a string")
    problem = _optional_string_problem(arguments, ("prompt", "model"))
    if problem:
        return Validation(problem=problem)
    return Validation(request=RemoteVideoRequest(
        video_url=arguments["videoUrl"],
        prompt=arguments.get("prompt"),
        model=arguments.get("model"),
    ))


def validate_check_environment_args(arguments: Any) -> Validation:
    if arguments is None or arguments == {}:
        return Validation()
    return Validation(problem="no arguments are accepted")


_VALIDATORS = {
    ANALYZE_LOCAL_VIDEO: validate_local_video_args,
    ANALYZE_REMOTE_VIDEO: validate_remote_video_args,
    CHECK_ENVIRONMENT: validate_check_environment_args,
}


# --- Environment summary ---

def mask_api_key(api_key: str | None) -> str:
    if not api_key or not api_key.strip():
        return "未設定"
    trimmed = api_key.strip()
    if len(trimmed) <= 8:
        return f"{trimmed} (長さ: {len(trimmed)})"
    return f"{trimmed[:4]}…{trimmed[-2:]} (長さ: {len(trimmed)})"


def summarize_config(config: AppConfig) -> str:
    lines = [
        "環境変数の読み込み結果:",
        f"- GOOGLE_API_KEY: {mask_api_key(config.api_key)}",
        f"- モデル: {config.model}",
    ]
    return "\n".join(lines)


# --- Error handling ---

def describe_error(error: BaseException) -> ErrorInfo:
    """Collapse SDK and local exceptions into message plus optional HTTP code and status."""
    code = getattr(error, "code", None)
    status = getattr(error, "status", None)
    if isinstance(status, int) and code is None:
        code, status = status, None
    return ErrorInfo(
        message=getattr(error, "message", None) or str(error) or type(error).__name__,
        code=code if isinstance(code, int) else None,
        status=status if isinstance(status, str) else None,
    )


def is_permission_denied(info: ErrorInfo) -> bool:
    if info.code == 403 or (info.status or "").upper() == "PERMISSION_DENIED":
        return True
    message = info.message.lower()
    return any(marker in message for marker in PERMISSION_DENIED_MARKERS)


def permission_denied_message(info: ErrorInfo) -> str:
    lines = [
        "Gemini が動画にアクセスできませんでした (権限エラー)。",
        "考えられる原因:",
        "- 動画が非公開または限定公開に設定されている",
        "- ライブ配信のアーカイブで、まだ公開処理が完了していない",
        "対処方法: 動画を公開設定にしてから再度お試しください。"
        "公開できない場合は動画をダウンロードし、analyzeLocalVideo で解析してください。",
        f"詳細: {info.message}",
    ]
    return "\n".join(lines)


def _safe_serialize(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return "[unserializable arguments]"


# --- Dispatcher ---

class ToolDispatcher:
    """Validates tool calls and routes them to the Gemini video client."""

    def __init__(self, config: AppConfig, client: GeminiVideoClient | None = None):
        self._config = config
        self._client = client or GeminiVideoClient(config)

    @property
    def config(self) -> AppConfig:
        return self._config

    def list_tools(self) -> list[ToolSpec]:
        return list(TOOL_SPECS)

    def call_tool(self, name: str, arguments: Any = None) -> ToolResponse:
        try:
            return self._run(name, arguments)
        except Exception as e:
            info = describe_error(e)
            logger.error(
                "Tool execution failed (%s) args=%s message=%s",
                name, _safe_serialize(arguments), info.message,
                exc_info=e,
            )
            if name == ANALYZE_REMOTE_VIDEO and is_permission_denied(info):
                return ToolResponse.from_text(permission_denied_message(info))
            raise

    def _run(self, name: str, arguments: Any) -> ToolResponse:
        validator = _VALIDATORS.get(name)
        if validator is None:
            raise UnknownToolError(f"Unknown tool requested: {name}")

        validation = validator(arguments)
        if not validation.ok:
            raise InvalidArgumentsError(
                f"Invalid arguments for {name} ({validation.problem}). "
                f"Expecting {EXPECTED_SHAPES[name]}."
            )

        if name == ANALYZE_LOCAL_VIDEO:
            text = self._client.analyze_local_video(validation.request)
        elif name == ANALYZE_REMOTE_VIDEO:
            text = self._client.analyze_remote_video(validation.request)
        else:
            text = summarize_config(self._config)
        return _to_tool_response(text, name)


def _to_tool_response(text: str, tool_name: str) -> ToolResponse:
    if not text or not text.strip():
        text = f"Gemini returned no textual response for {tool_name}."
    return ToolResponse.from_text(text)
