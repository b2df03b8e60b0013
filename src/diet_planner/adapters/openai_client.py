"""OpenAI Responses API client for plan text generation."""

from dataclasses import dataclass

from openai import APITimeoutError, AsyncOpenAI, OpenAIError

from diet_planner.errors import UpstreamTimeout, UpstreamUnavailable
from diet_planner.services.generation import GenerativeClient


@dataclass
class OpenAIGenerativeClient(GenerativeClient):
    """Generative client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(
        cls, api_key: str, model: str, timeout: float = 60.0
    ) -> "OpenAIGenerativeClient":
        """Create an OpenAI generative client."""
        return cls(client=AsyncOpenAI(api_key=api_key, timeout=timeout), model=model)

    async def generate(self, prompt: str) -> str:
        """Send the prompt as a single user input and return the output text."""
        try:
            response = await self.client.responses.create(
                model=self.model,
                input=prompt,
            )
        except APITimeoutError as exc:
            raise UpstreamTimeout("OpenAI request timed out") from exc
        except OpenAIError as exc:
            raise UpstreamUnavailable(
                "OpenAI request failed", {"reason": str(exc)}
            ) from exc
        output_text = response.output_text
        if not output_text:
            raise UpstreamUnavailable("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        await self.client.close()
