"""HTTP client for the Gemini generateContent API.

Uses httpx with configurable timeouts. Calls are never retried: any
transport, quota or model error surfaces as AICallFailure and fails the
task that made the call.
"""

import logging

import httpx

from config import settings

logger = logging.getLogger(__name__)


class AICallFailure(Exception):
    """The model call failed (connection, timeout, quota, non-2xx, empty answer)."""


class GeminiClient:
    """HTTP client for a Gemini text model."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
        temperature: float | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self._model = model or settings.GEMINI_MODEL
        self._base_url = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self._temperature = temperature if temperature is not None else settings.GEMINI_TEMPERATURE

        read_timeout = timeout if timeout is not None else settings.GEMINI_TIMEOUT_SECONDS
        conn_timeout = connect_timeout if connect_timeout is not None else settings.GEMINI_CONNECT_TIMEOUT

        self._client = httpx.Client(
            base_url=self._base_url,
            headers={"x-goog-api-key": self._api_key},
            timeout=httpx.Timeout(
                connect=float(conn_timeout),
                read=float(read_timeout),
                write=30.0,
                pool=30.0,
            ),
        )

    @property
    def model(self) -> str:
        return self._model

    def close(self):
        self._client.close()

    def generate(self, prompt: str) -> str:
        """Send a single-turn prompt and return the model's raw text answer.

        Raises AICallFailure on any failure.
        """
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": self._temperature},
        }

        try:
            resp = self._client.post(f"/v1beta/models/{self._model}:generateContent", json=payload)
        except httpx.TimeoutException as e:
            logger.error("Gemini request timed out: %s", e)
            raise AICallFailure(f"Gemini request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error("Gemini HTTP error: %s", e)
            raise AICallFailure(f"Cannot reach Gemini: {e}") from e

        if resp.status_code != 200:
            detail = _error_detail(resp)
            logger.error("Gemini error %d: %s", resp.status_code, detail)
            raise AICallFailure(f"Gemini returned HTTP {resp.status_code}: {detail}")

        try:
            text = _candidate_text(resp.json())
        except (ValueError, AttributeError, TypeError) as e:
            logger.error("Gemini returned an unreadable body: %s", resp.text[:200])
            raise AICallFailure(f"Gemini returned an unreadable response: {e}") from e
        if not text:
            raise AICallFailure("Gemini returned no candidate text")
        return text

    def health(self) -> dict:
        """Check that the configured model is reachable. Never raises."""
        try:
            resp = self._client.get(f"/v1beta/models/{self._model}", timeout=10.0)
        except Exception as e:
            logger.warning("Gemini health check failed: %s", e)
            return {"status": "unreachable", "error": str(e)}

        if resp.status_code != 200:
            return {"status": "unavailable", "error": _error_detail(resp)}
        return {"status": "ready", "model": self._model}


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] or f"HTTP {resp.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return f"HTTP {resp.status_code}"


def _candidate_text(data: dict) -> str:
    """Join the text parts of the first candidate."""
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts)
