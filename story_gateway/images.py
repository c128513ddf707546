"""Stable Diffusion WebUI client for local illustration generation.

Talks to a WebUI started with ``--api``. Single backend, so there is no
failover; failures are logged and returned as ``None`` / empty values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from story_gateway.config import GatewaySettings

PROBE_TIMEOUT_S = 5.0
LIST_TIMEOUT_S = 10.0
SET_MODEL_TIMEOUT_S = 60.0

DEFAULT_NEGATIVE_PROMPT = "low quality, blurry, distorted, deformed, ugly, bad anatomy"
DEFAULT_SAMPLER = "Euler a"
DEFAULT_STYLE = "fantasy"

STYLE_PROMPTS: dict[str, str] = {
    "anime": "anime style, manga, japanese animation, vibrant colors, clean lines",
    "realistic": "photorealistic, detailed, 8k uhd, realistic lighting, professional photography",
    "fantasy": "fantasy art, digital painting, epic, dramatic lighting, detailed",
    "sketch": "sketch, pencil drawing, line art, black and white, artistic",
}


@dataclass(frozen=True)
class ImageResult:
    base64: str


def styled_prompt(prompt: str, style: str | None = None) -> str:
    """Prefix a prompt with the style keywords."""
    style = style or DEFAULT_STYLE
    if style not in STYLE_PROMPTS:
        raise ValueError(f"Unknown style '{style}'. Styles: {', '.join(STYLE_PROMPTS)}")
    return f"{STYLE_PROMPTS[style]}, {prompt}"


class StableDiffusionService:

    def __init__(self, base_url: str, timeout: float = 180.0, client: httpx.AsyncClient | None = None):
        self._base = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client or httpx.AsyncClient()

    @classmethod
    def from_settings(
        cls, settings: GatewaySettings, client: httpx.AsyncClient | None = None
    ) -> StableDiffusionService:
        return cls(settings.SD_BASE_URL, settings.SD_TIMEOUT, client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def generate(
        self,
        prompt: str,
        negative_prompt: str = "",
        width: int = 512,
        height: int = 512,
        style: str | None = None,
        steps: int = 30,
        cfg_scale: float = 7.5,
    ) -> ImageResult | None:
        """Text to image. Returns ``None`` if the WebUI is down or fails."""
        if not await self.is_available():
            logger.warning("Stable Diffusion service is not available")
            return None

        return await self._render(
            "txt2img",
            {
                "prompt": styled_prompt(prompt, style),
                "negative_prompt": negative_prompt or DEFAULT_NEGATIVE_PROMPT,
                "width": width,
                "height": height,
                "steps": steps,
                "cfg_scale": cfg_scale,
                "sampler_name": DEFAULT_SAMPLER,
                "batch_size": 1,
                "n_iter": 1,
            },
        )

    async def generate_variation(
        self,
        prompt: str,
        image_base64: str,
        denoising_strength: float = 0.5,
        negative_prompt: str = "",
    ) -> ImageResult | None:
        """Image to image; ``denoising_strength`` 0 keeps the source, 1 redraws it."""
        if not await self.is_available():
            return None

        return await self._render(
            "img2img",
            {
                "prompt": prompt,
                "negative_prompt": negative_prompt or DEFAULT_NEGATIVE_PROMPT,
                "init_images": [image_base64],
                "denoising_strength": denoising_strength,
                "steps": 30,
                "cfg_scale": 7.5,
                "sampler_name": DEFAULT_SAMPLER,
            },
        )

    async def _render(self, endpoint: str, payload: dict[str, Any]) -> ImageResult | None:
        try:
            response = await self._client.post(
                f"{self._base}/sdapi/v1/{endpoint}", json=payload, timeout=self._timeout
            )
        except httpx.HTTPError as e:
            logger.error(f"Stable Diffusion {endpoint} exception: {e!r}")
            return None

        if not response.is_success:
            logger.warning(
                f"Stable Diffusion API error: status={response.status_code} body={response.text[:300]}"
            )
            return None

        try:
            images = response.json().get("images") or []
        except (ValueError, AttributeError):
            logger.warning(f"Stable Diffusion {endpoint} returned a malformed body")
            return None
        if not images:
            logger.warning("Stable Diffusion returned no images")
            return None
        return ImageResult(base64=images[0])

    async def _get_json(self, path: str, timeout: float) -> Any | None:
        try:
            response = await self._client.get(f"{self._base}{path}", timeout=timeout)
        except httpx.HTTPError:
            return None
        if not response.is_success:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    async def is_available(self) -> bool:
        try:
            response = await self._client.get(
                f"{self._base}/sdapi/v1/sd-models", timeout=PROBE_TIMEOUT_S
            )
        except httpx.HTTPError:
            return False
        return response.is_success

    async def models(self) -> list[str]:
        data = await self._get_json("/sdapi/v1/sd-models", LIST_TIMEOUT_S) or []
        return [m["title"] for m in data if isinstance(m, dict) and "title" in m]

    async def samplers(self) -> list[str]:
        data = await self._get_json("/sdapi/v1/samplers", LIST_TIMEOUT_S) or []
        return [s["name"] for s in data if isinstance(s, dict) and "name" in s]

    async def set_model(self, model_name: str) -> bool:
        try:
            response = await self._client.post(
                f"{self._base}/sdapi/v1/options",
                json={"sd_model_checkpoint": model_name},
                timeout=SET_MODEL_TIMEOUT_S,
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to change SD model to {model_name}: {e!r}")
            return False
        return response.is_success

    async def progress(self) -> dict:
        data = await self._get_json("/sdapi/v1/progress", PROBE_TIMEOUT_S)
        if not isinstance(data, dict):
            return {"progress": 0, "eta_relative": 0}
        return data

    async def interrupt(self) -> bool:
        try:
            response = await self._client.post(
                f"{self._base}/sdapi/v1/interrupt", timeout=PROBE_TIMEOUT_S
            )
        except httpx.HTTPError:
            return False
        return response.is_success
