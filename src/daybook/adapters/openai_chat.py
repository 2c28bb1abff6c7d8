"""OpenAI chat completions adapter - HTTP client for summarization."""

import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAIChatService:
    """
    OpenAI chat completions adapter.

    Implements LLMService protocol. Asks for a JSON object response so the
    summarizer can parse the result directly. No business logic - just I/O.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-5",
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 60,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()

    def generate(self, prompt: str) -> str:
        """Generate text from a prompt. Returns complete response."""
        if not self.api_key:
            raise RuntimeError("OpenAI API key not configured. Set OPENAI_API_KEY in daybook.conf")

        try:
            resp = self._session.post(
                f"{self.base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "messages": [{"role": "user", "content": prompt}],
                    "response_format": {"type": "json_object"},
                },
                timeout=self.timeout,
            )
        except requests.Timeout:
            raise RuntimeError(f"OpenAI request timed out after {self.timeout}s")
        except requests.RequestException as e:
            raise RuntimeError(f"OpenAI request failed: {e}")

        if resp.status_code != 200:
            logger.error(f"OpenAI request failed: {resp.status_code} {resp.text}")
            raise RuntimeError(f"OpenAI request failed: {resp.status_code} {resp.text}")

        try:
            data = resp.json()
            return data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise RuntimeError(f"Unexpected OpenAI response: {e}")
