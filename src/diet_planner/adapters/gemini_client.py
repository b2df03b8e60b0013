"""Gemini generateContent REST client."""

from dataclasses import dataclass

import httpx

from diet_planner.errors import UpstreamTimeout, UpstreamUnavailable
from diet_planner.services.generation import GenerativeClient


@dataclass
class HttpxGeminiClient(GenerativeClient):
    """HTTPX-backed Gemini client."""

    api_key: str
    model: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 60.0

    @classmethod
    def create(
        cls, api_key: str, model: str, base_url: str, timeout: float = 60.0
    ) -> "HttpxGeminiClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(
            api_key=api_key,
            model=model,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def generate(self, prompt: str) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            response = await self.http_client.post(
                url,
                params={"key": self.api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise UpstreamTimeout("Gemini request timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(
                "Gemini request failed", {"reason": str(exc)}
            ) from exc
        text = _extract_text(response.json())
        if not text:
            raise UpstreamUnavailable("Gemini returned an empty response")
        return text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _extract_text(payload: dict[str, object]) -> str:
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(str(part.get("text", "")) for part in parts)
