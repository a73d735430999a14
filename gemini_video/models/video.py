from pathlib import Path

from pydantic import BaseModel


class LocalVideoRequest(BaseModel):
    file_path: str
    prompt: str | None = None
    mime_type: str | None = None
    model: str | None = None


class RemoteVideoRequest(BaseModel):
    video_url: str
    prompt: str | None = None
    model: str | None = None


class ResolvedFile(BaseModel):
    resolved_path: Path
    size_in_bytes: int


class EncodedFile(ResolvedFile):
    base64_data: str
