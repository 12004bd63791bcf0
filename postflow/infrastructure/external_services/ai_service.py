"""LLM client for structured extraction over an OpenAI-compatible API"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, List

import httpx

from ...core.config import settings

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class AIServiceError(Exception):
    pass


def parse_json_reply(content: str) -> Any:
    """Decode a model reply that may be wrapped in markdown code fences."""
    cleaned = _FENCE.sub("", content.strip()).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AIServiceError(f"Model reply is not valid JSON: {e}") from e


class AIService:
    """Chat completion wrapper with retries and exponential backoff."""

    def __init__(self, http_client: httpx.AsyncClient = None) -> None:
        self.api_key = settings.OPENAI_API_KEY
        self.base_url = settings.OPENAI_BASE_URL.rstrip("/")
        self.model_id = settings.OPENAI_MODEL
        self.max_retries = settings.LLM_MAX_RETRIES
        self.retry_base = settings.LLM_RETRY_BASE_SECONDS
        self.http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(60.0, connect=10.0, read=50.0)
        )

    async def _chat(self, messages: List[dict], max_tokens: int = 1500, temperature: float = 0.1) -> str:
        """Low-level chat completion call"""
        if not self.api_key:
            raise AIServiceError("OPENAI_API_KEY is not configured")
        payload = {
            "model": self.model_id,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stream": False,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        resp = await self.http_client.post(f"{self.base_url}/chat/completions", json=payload, headers=headers)
        if resp.status_code != 200:
            raise AIServiceError(f"LLM error {resp.status_code}: {resp.text[:200]}")
        data = resp.json()
        return data["choices"][0]["message"]["content"].strip()

    async def extract_json(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        """Ask for a JSON object, retrying transport and format failures."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        last_error = None
        for attempt in range(self.max_retries):
            try:
                content = await self._chat(messages)
                return parse_json_reply(content)
            except (httpx.HTTPError, AIServiceError, KeyError) as e:
                last_error = e
                logger.warning("LLM extraction attempt %s/%s failed: %s", attempt + 1, self.max_retries, e)
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_base * (2 ** attempt))
        raise AIServiceError(f"LLM extraction failed after {self.max_retries} attempts: {last_error}")

    async def aclose(self) -> None:
        await self.http_client.aclose()
