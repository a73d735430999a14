"""Gemini video analysis: local files go through the File API, remote URLs are referenced directly."""

import logging
import time
from pathlib import Path

from google import genai
from google.genai import types

from gemini_video.best_effort import best_effort
from gemini_video.config import AppConfig
from gemini_video.exceptions import UploadError
from gemini_video.models.video import LocalVideoRequest, RemoteVideoRequest
from gemini_video.services.files import ensure_within_limit, guess_mime_type
from gemini_video.services.response_text import extract_text

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = (
    "最初にこの記事全体を要約し全体像を掴んだ後、大きなセクションごとに細かく要約を行ってください。 "
    "その次に小さなセクションごとに更に詳細な要約を行ってください。"
)
FALLBACK_MIME_TYPE = "application/octet-stream"
REMOTE_VIDEO_MIME_TYPE = "video/mp4"
PROCESSING_POLL_ATTEMPTS = 60
PROCESSING_POLL_SECONDS = 2.0


def resolve_prompt(prompt: str | None) -> str:
    if prompt and prompt.strip():
        return prompt.strip()
    return DEFAULT_PROMPT


def pick_model(candidate: str | None, fallback: str) -> str:
    if candidate and candidate.strip():
        return candidate.strip()
    return fallback


class GeminiVideoClient:
    """Runs one analysis per call; keeps no state between calls besides the SDK client."""

    def __init__(self, config: AppConfig):
        self._client = genai.Client(api_key=config.api_key)
        self._default_model = config.model
        self._max_file_bytes = config.max_inline_file_bytes

    def analyze_local_video(self, request: LocalVideoRequest) -> str:
        prompt = resolve_prompt(request.prompt)
        model = pick_model(request.model, self._default_model)
        mime_type = request.mime_type or guess_mime_type(request.file_path) or FALLBACK_MIME_TYPE
        local = ensure_within_limit(request.file_path, self._max_file_bytes)

        uploaded = self._upload(local.resolved_path, mime_type)
        logger.info("Uploaded %s as %s (%s)", local.resolved_path, uploaded.name, mime_type)
        try:
            if not uploaded.uri or not uploaded.mime_type:
                raise UploadError("Upload failed: missing file URI or MIME type")
            uploaded = self._wait_until_active(uploaded)
            response = self._client.models.generate_content(
                model=model,
                contents=[
                    types.Part.from_uri(file_uri=uploaded.uri, mime_type=uploaded.mime_type),
                    prompt,
                ],
            )
        finally:
            self._delete(uploaded)
        return extract_text(response)

    def analyze_remote_video(self, request: RemoteVideoRequest) -> str:
        prompt = resolve_prompt(request.prompt)
        model = pick_model(request.model, self._default_model)

        response = self._client.models.generate_content(
            model=model,
            contents=[
                types.Part.from_uri(file_uri=request.video_url, mime_type=REMOTE_VIDEO_MIME_TYPE),
                prompt,
            ],
        )
        return extract_text(response)

    def _upload(self, path: Path, mime_type: str) -> types.File:
        try:
            return self._client.files.upload(
                file=str(path),
                config=types.UploadFileConfig(mime_type=mime_type),
            )
        except Exception as e:
            raise UploadError(f"Gemini file upload failed for {path}: {e}") from e

    def _wait_until_active(self, uploaded: types.File) -> types.File:
        """Poll until the uploaded video has finished server-side processing."""
        attempts = 0
        while uploaded.state == types.FileState.PROCESSING:
            if attempts >= PROCESSING_POLL_ATTEMPTS:
                raise UploadError(f"Gemini file {uploaded.name} is still processing; try again later")
            time.sleep(PROCESSING_POLL_SECONDS)
            uploaded = self._client.files.get(name=uploaded.name)
            attempts += 1

        if uploaded.state == types.FileState.FAILED:
            raise UploadError(f"Gemini could not process uploaded file {uploaded.name}")
        return uploaded

    def _delete(self, uploaded: types.File) -> None:
        if not uploaded.name:
            return
        with best_effort(f"deletion of uploaded file {uploaded.name}"):
            self._client.files.delete(name=uploaded.name)
