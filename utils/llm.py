"""
LLM Client Utility
Handles communication with Large Language Models (Azure OpenAI, OpenAI,
Gemini via its OpenAI adapter, Ollama) for report content enhancement.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from agents.errors import UpstreamError
from config.settings import (
    LLM_API_KEY,
    LLM_API_VERSION,
    LLM_ENDPOINT,
    LLM_MAX_TOKENS,
    LLM_MODEL,
    LLM_PROVIDER,
    LLM_TEMPERATURE,
    LLM_TIMEOUT,
    llm_configured,
)

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Unified client for chat-completion style LLM APIs.
    Supports: 'azure', 'openai', 'gemini' (OpenAI compat), 'ollama', 'none'.
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        endpoint: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.provider = (provider or LLM_PROVIDER).lower()
        self.api_key = LLM_API_KEY if api_key is None else api_key
        self.model = model or LLM_MODEL
        self.endpoint = endpoint or LLM_ENDPOINT
        self.api_version = api_version or LLM_API_VERSION
        self.timeout = timeout or LLM_TIMEOUT

    @property
    def enabled(self) -> bool:
        return llm_configured(self.provider, self.api_key)

    def generate_text(
        self,
        user_prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = LLM_MAX_TOKENS,
        temperature: float = LLM_TEMPERATURE,
    ) -> str:
        """
        Returns the completion text.
        Raises UpstreamError if the LLM is not configured or the call fails.
        """
        if not self.enabled:
            raise UpstreamError(
                "AI service not configured",
                details=f"provider={self.provider!r}",
                status_code=503,
            )

        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        payload: Dict[str, Any] = {
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if self.provider == "azure":
            # Azure routes by deployment name in the URL, not the payload.
            url = self._azure_url()
            headers = {"Content-Type": "application/json", "api-key": self.api_key}
        else:
            url = self.endpoint
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            payload["model"] = self.model
            if self.provider == "ollama":
                payload["stream"] = False

        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"API Request Error ({url}): {e}")
            if e.response is not None:
                logger.error(f"Response: {e.response.text}")
            raise UpstreamError("AI service request failed", details=str(e)) from e
        except ValueError as e:
            raise UpstreamError("AI service returned invalid JSON", details=str(e)) from e

        return self._extract_content(data)

    def _azure_url(self) -> str:
        if "/chat/completions" in self.endpoint:
            return self.endpoint
        base = self.endpoint.rstrip("/")
        return (
            f"{base}/openai/deployments/{self.model}/chat/completions"
            f"?api-version={self.api_version}"
        )

    def _extract_content(self, data: Dict[str, Any]) -> str:
        try:
            if self.provider == "ollama" and "message" in data:
                content = data["message"].get("content")
            else:
                content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            logger.warning(f"Unexpected LLM response structure: {e}")
            raise UpstreamError("Failed to generate enhanced content", details=str(e)) from e
        return (content or "").strip()
