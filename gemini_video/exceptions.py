class ConfigError(Exception):
    """Raised when no Gemini API key can be resolved at startup."""


class LocalFileError(Exception):
    """Base class for problems with a local video file."""


class NotFoundError(LocalFileError):
    """Raised when a local video file does not exist."""


class NotAFileError(LocalFileError):
    """Raised when a local path exists but is not a regular file."""


class SizeLimitError(LocalFileError):
    """Raised when a local file is larger than the allowed byte count."""


class UploadError(Exception):
    """Raised when the Gemini File API rejects an upload or returns an incomplete file."""


class ToolCallError(Exception):
    """Base class for malformed tool calls."""


class UnknownToolError(ToolCallError):
    """Raised when a tool name is not in the catalog."""


class InvalidArgumentsError(ToolCallError):
    """Raised when tool arguments do not match the expected shape."""
