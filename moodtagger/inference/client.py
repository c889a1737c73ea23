"""Client for the Ollama text-generation API."""

from typing import Any, Dict, Optional

import httpx

from ..config import AppConfig
from ..core.errors import InferenceError
from ..core.features import FeatureVector
from ..core.mood import MoodAnalysis
from .parser import parse_response
from .prompt import build_prompt


class OllamaClient:
    """Rates the mood of a track by prompting a text-generation model."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize OllamaClient.

        Args:
            config: Application configuration (defaults if None)
            http_client: HTTP client to use; one is created if None
        """
        self.config = config or AppConfig()
        self.generate_url = f"{self.config.ollama_base_url.rstrip('/')}/generate"
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=self.config.request_timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "OllamaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def request_body(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.config.ollama_model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "num_predict": self.config.max_tokens,
            },
        }

    def generate(self, prompt: str) -> str:
        """
        Send a prompt and return the generated text.

        Raises:
            InferenceError: On transport errors, non-success status codes
                or a reply without a ``response`` string
        """
        try:
            response = self._client.post(self.generate_url, json=self.request_body(prompt))
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise InferenceError(
                f"Inference service returned {e.response.status_code} for {self.generate_url}"
            ) from e
        except httpx.HTTPError as e:
            raise InferenceError(f"Inference request to {self.generate_url} failed: {e}") from e
        except ValueError as e:
            raise InferenceError(f"Inference service returned invalid JSON: {e}") from e

        text = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise InferenceError("Inference reply has no 'response' text")
        return text

    def analyze_mood(self, vector: FeatureVector) -> MoodAnalysis:
        """
        Rate the mood of a track from its features.

        Args:
            vector: Features of the track

        Returns:
            MoodAnalysis tagged with the configured model name
        """
        reply = self.generate(build_prompt(vector))
        return parse_response(
            reply,
            file_path=vector.file_path,
            detected_bpm=vector.bpm,
            model=self.config.ollama_model,
        )
