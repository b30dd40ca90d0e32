"""Remote analyzer — OpenAI-compatible chat completions over httpx."""

from __future__ import annotations

import logging

import httpx

from riskscan.analyzer.prompts import SYSTEM_PROMPT, code_prompt, dependencies_prompt
from riskscan.config import RiskScanConfig
from riskscan.errors import ConfigurationError, TransportError

logger = logging.getLogger(__name__)

NO_RESULT = "No analysis result returned."


class RemoteAnalyzer:
    """Sends dependency lists and source files to the text-generation service.

    No retries and no timeout: a slow call simply blocks the (sequential)
    scan until the service answers or the connection fails.
    """

    def __init__(
        self,
        config: RiskScanConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client or httpx.AsyncClient(timeout=None)

    async def analyze_dependencies(self, specifiers: list[str]) -> str:
        return await self._complete(
            dependencies_prompt(list(specifiers)),
            max_tokens=self._config.max_tokens_dependencies,
        )

    async def analyze_code(self, content: str, path: str) -> str:
        return await self._complete(
            code_prompt(content, path),
            max_tokens=self._config.max_tokens_code,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _complete(self, prompt: str, max_tokens: int) -> str:
        api_key = self._config.api_key
        if not api_key:
            raise ConfigurationError(
                "OpenAI API key is not set. Set RISKSCAN_API_KEY or api_key "
                "in config.yaml."
            )

        url = self._config.api_base.rstrip("/") + "/chat/completions"
        payload = {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = await self._client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

        if resp.status_code >= 400:
            raise TransportError(
                f"Request failed with status code {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError(f"Service returned non-JSON body: {e}") from e

        return _first_message(data) or NO_RESULT


def _first_message(data: object) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""
