"""Local video file checks, base64 encoding and MIME type guessing."""

import base64
from pathlib import Path

from gemini_video.exceptions import NotAFileError, NotFoundError, SizeLimitError
from gemini_video.models.video import EncodedFile, ResolvedFile

MIME_TYPES_BY_EXTENSION = {
    ".mp4": "video/mp4",
    ".m4v": "video/x-m4v",
    ".mov": "video/quicktime",
    ".qt": "video/quicktime",
    ".webm": "video/webm",
    ".mkv": "video/x-matroska",
    ".avi": "video/x-msvideo",
    ".wmv": "video/x-ms-wmv",
    ".flv": "video/x-flv",
    ".mpeg": "video/mpeg",
    ".mpg": "video/mpeg",
    ".3gp": "video/3gpp",
    ".3g2": "video/3gpp2",
    ".ts": "video/mp2t",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".flac": "audio/flac",
}


def ensure_readable(path: str | Path) -> ResolvedFile:
    """Resolve ``path`` to an absolute path and check it is an existing regular file."""
    resolved = Path(path).expanduser().resolve()
    try:
        stat = resolved.stat()
    except OSError as e:
        raise NotFoundError(f"Local video file not found: {resolved}") from e
    if not resolved.is_file():
        raise NotAFileError(f"Expected a file but found something else at: {resolved}")
    return ResolvedFile(resolved_path=resolved, size_in_bytes=stat.st_size)


def ensure_within_limit(path: str | Path, max_bytes: int) -> ResolvedFile:
    resolved = ensure_readable(path)
    if resolved.size_in_bytes > max_bytes:
        raise SizeLimitError(
            f"Local video file exceeds the {max_bytes} byte limit "
            f"({resolved.size_in_bytes} bytes > {max_bytes} bytes). "
            "Use a smaller file or a remote URL."
        )
    return resolved


def read_as_base64(path: str | Path, max_bytes: int) -> EncodedFile:
    """Read a file no larger than ``max_bytes`` and return it base64-encoded."""
    resolved = ensure_within_limit(path, max_bytes)
    data = resolved.resolved_path.read_bytes()
    return EncodedFile(
        resolved_path=resolved.resolved_path,
        size_in_bytes=resolved.size_in_bytes,
        base64_data=base64.b64encode(data).decode("ascii"),
    )


def guess_mime_type(path: str | Path) -> str | None:
    return MIME_TYPES_BY_EXTENSION.get(Path(path).suffix.lower())
