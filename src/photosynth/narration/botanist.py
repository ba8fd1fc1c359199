from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from photosynth.core.environment import EnvironmentState
from photosynth.core.errors import NarrationUnavailable
from photosynth.core.rate_model import ProductionStats

logger = logging.getLogger("photosynth.narration")

MISSING_KEY_MESSAGE = "API Key is missing. Cannot consult the botanist."
UNAVAILABLE_MESSAGE = "The botanist is currently unavailable. (Error connecting to AI)"
THINKING_MESSAGE = "The botanist is thinking..."

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


@dataclass(frozen=True)
class NarrationResult:
    text: str
    ok: bool


def build_prompt(env: EnvironmentState, stats: ProductionStats) -> str:
    return (
        "You are an expert botanist teaching a student about photosynthesis.\n"
        "The current simulation conditions are:\n"
        f"- Light Intensity: {env.light_intensity:g}%\n"
        f"- CO2 Level: {env.co2_level:g}%\n"
        f"- Water Availability: {env.water_level:g}%\n"
        f"- Temperature: {env.temperature:g}°C\n"
        "\n"
        f"The current limiting factor is: {stats.limiting_factor.value}.\n"
        f"The glucose production rate is: {stats.glucose_rate:.2f} (arbitrary units).\n"
        "\n"
        "Explain simply why the rate is what it is, what the limiting factor implies, "
        "and suggest one change to improve efficiency. Keep it under 3 sentences."
    )


def _extract_text(payload: Dict[str, Any]) -> str:
    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list):
        raise NarrationUnavailable("unexpected response shape: 'candidates' is not a list")
    parts = []
    for candidate in candidates:
        if not isinstance(candidate, dict):
            raise NarrationUnavailable("unexpected response shape: candidate is not an object")
        content = candidate.get("content") or {}
        if not isinstance(content, dict) or not isinstance(content.get("parts") or [], list):
            raise NarrationUnavailable("unexpected response shape: malformed candidate content")
        for part in content.get("parts") or []:
            text = part.get("text") if isinstance(part, dict) else None
            if text is not None and not isinstance(text, str):
                raise NarrationUnavailable("unexpected response shape: text part is not a string")
            if text:
                parts.append(text)
        if parts:
            break
    return "".join(parts).strip()


@dataclass
class BotanistNarrator:
    """
    "Dr. Green": pull-only narration of the current simulation state.

    The narrator is handed read-only snapshots and returns text. Every failure
    is turned into a user-facing message; nothing here touches simulator state.
    """
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 20.0
    transport: Optional[Callable[[str, bytes, Dict[str, str], float], Dict[str, Any]]] = None

    def __post_init__(self) -> None:
        if self.api_key is None:
            self.api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "x-goog-api-key": self.api_key or "",
        }

    def _post_json(self, url: str, body: bytes, headers: Dict[str, str], timeout: float) -> Dict[str, Any]:
        req = urllib.request.Request(url, data=body, headers=headers, method="POST")
        try:
            with urllib.request.urlopen(req, timeout=timeout) as response:  # nosec - fixed https endpoint
                raw = response.read()
        except (urllib.error.URLError, OSError) as exc:
            raise NarrationUnavailable(f"request to {url} failed: {exc}") from exc
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise NarrationUnavailable(f"invalid JSON from {url}: {exc}") from exc

    def generate(self, prompt: str) -> str:
        """Send ``prompt`` to the text service. Raises NarrationUnavailable on any failure."""
        url = f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"
        body = json.dumps({"contents": [{"parts": [{"text": prompt}]}]}).encode("utf-8")
        post = self.transport or self._post_json
        payload = post(url, body, self._headers(), self.timeout_seconds)
        if not isinstance(payload, dict):
            raise NarrationUnavailable("unexpected response shape")
        return _extract_text(payload)

    def narrate(self, env: EnvironmentState, stats: ProductionStats) -> NarrationResult:
        if not self.api_key:
            return NarrationResult(text=MISSING_KEY_MESSAGE, ok=False)
        try:
            text = self.generate(build_prompt(env, stats))
        except NarrationUnavailable as exc:
            logger.warning("Botanist narration failed: %s", exc)
            return NarrationResult(text=UNAVAILABLE_MESSAGE, ok=False)
        return NarrationResult(text=text or THINKING_MESSAGE, ok=True)
