"""OpenAI adapter: image generation, chat completions and vision.

OpenAI Specifics
----------------
- **Image generation**: ``POST /images/generations`` with ``n=1``.  The
  prompt is truncated to 4000 characters, and ``quality`` is only sent to
  ``dall-e-3`` since other models reject it.
- **Chat**: ``POST /chat/completions``; the first choice's text is
  returned.  ``response_format={"type": "json_object"}`` asks for JSON.
- **Vision**: a chat call whose user message mixes one text part with
  ``image_url`` parts, each optionally carrying a ``detail`` level.

Usage Example
-------------
    >>> adapter = OpenAIAdapter(config)
    >>> result = await adapter.generate_image("a red fox", size="1024x1024")
    >>> result["url"]
    'https://...'
"""

import logging
from typing import Any

from ..errors import ProviderError
from ..provider_adapters import ProviderAdapterBase, provider_registry

logger = logging.getLogger(__name__)

MAX_PROMPT_LENGTH = 4000


class OpenAIAdapter(ProviderAdapterBase):
    """Adapter for the OpenAI image, chat and vision endpoints."""

    name = "openai"
    label = "OpenAI"
    description = "Image generation, vision analysis and text models"
    provider_type = "ai"

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured("openai")

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.openai_api_key}",
            "Content-Type": "application/json",
        }

    def _url(self, path: str) -> str:
        return f"{self.config.openai_base_url.rstrip('/')}/{path.lstrip('/')}"

    async def generate_image(
        self,
        prompt: str,
        model: str | None = None,
        size: str = "1024x1024",
        quality: str = "standard",
    ) -> dict[str, str]:
        """Generate one image.

        Args:
            prompt: Image prompt (truncated to 4000 characters)
            model: Image model; defaults to ``config.image_model``
            size: ``WIDTHxHEIGHT`` accepted by the model
            quality: Quality level, only sent for ``dall-e-3``

        Returns
        -------
        dict[str, str]
            ``{"url": ..., "revised_prompt": ...}``

        Raises
        ------
        ProviderError
            Missing key, upstream error, or a response without an image
        """
        self.require_configured()
        model = model or self.config.image_model

        body: dict[str, Any] = {
            "model": model,
            "prompt": prompt[:MAX_PROMPT_LENGTH],
            "n": 1,
            "size": size,
        }
        if model == "dall-e-3":
            body["quality"] = quality

        logger.info(f"Generating image: model={model} size={size} prompt_length={len(prompt)}")
        response = await self.request(
            "POST", self._url("images/generations"), headers=self.headers, json=body
        )
        payload = self.json_body(response, self.label)

        data = (payload.get("data") or []) if isinstance(payload, dict) else []
        if not data or not data[0].get("url"):
            raise ProviderError("OpenAI returned no image", status_code=502, provider=self.label)

        logger.info("Image generated successfully")
        return {"url": data[0]["url"], "revised_prompt": data[0].get("revised_prompt") or ""}

    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        response_format: dict[str, str] | None = None,
    ) -> str:
        """Run one chat completion and return the first choice's text.

        Raises
        ------
        ProviderError
            Missing key, upstream error, or a response without choices
        """
        self.require_configured()

        body: dict[str, Any] = {"model": model or self.config.text_model, "messages": messages}
        if temperature is not None:
            body["temperature"] = temperature
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        if response_format is not None:
            body["response_format"] = response_format

        response = await self.request(
            "POST", self._url("chat/completions"), headers=self.headers, json=body
        )
        payload = self.json_body(response, self.label)

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not choices:
            raise ProviderError("Invalid OpenAI response", status_code=502, provider=self.label)
        return (choices[0].get("message") or {}).get("content") or ""

    async def vision(
        self,
        prompt: str,
        image_urls: list[str],
        model: str | None = None,
        max_tokens: int = 500,
        detail: str | None = None,
    ) -> str:
        """Ask a vision model about one or more images."""
        content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        for url in image_urls:
            image: dict[str, str] = {"url": url}
            if detail:
                image["detail"] = detail
            content.append({"type": "image_url", "image_url": image})

        return await self.chat(
            [{"role": "user", "content": content}],
            model=model or self.config.vision_model,
            max_tokens=max_tokens,
        )


# Register the adapter with the global provider registry
provider_registry.register(OpenAIAdapter)
