import pytest
from unittest.mock import MagicMock

from google.genai import types

from gemini_video.config import AppConfig
from gemini_video.services.gemini import GeminiVideoClient


# --- Canned API responses ---

API_KEY = "AIzaSyABCDEFGHIJK"
DEFAULT_MODEL = "gemini-2.5-flash"

UPLOADED_FILE = types.File(
    name="files/abc123",
    uri="https://generativelanguage.googleapis.com/v1beta/files/abc123",
    mime_type="video/mp4",
    state=types.FileState.ACTIVE,
)

GENERATE_RESPONSE = types.GenerateContentResponse(
    candidates=[
        types.Candidate(
            content=types.Content(role="model", parts=[types.Part(text="summary text")]),
        ),
    ],
)


@pytest.fixture
def app_config():
    return AppConfig(api_key=API_KEY, model=DEFAULT_MODEL)


@pytest.fixture
def mock_genai_client(mocker):
    """Replaces google.genai.Client inside the service with a MagicMock."""
    mock_genai = mocker.patch("gemini_video.services.gemini.genai")
    client = MagicMock()
    client.files.upload.return_value = UPLOADED_FILE
    client.models.generate_content.return_value = GENERATE_RESPONSE
    mock_genai.Client.return_value = client
    return client


@pytest.fixture
def gemini_client(app_config, mock_genai_client):
    return GeminiVideoClient(app_config)


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00" * 1024)
    return path
