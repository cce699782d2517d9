"""
Advisory model client for the Taskforce engine.

Sends one chat-completion request to an OpenAI-compatible endpoint and
returns the raw reply text. The client holds no business logic and never
retries: any transport error, non-2xx status or empty reply is raised as
AdvisoryUnavailable so the caller can fall back immediately. Callers that
want retries wrap this client with their own policy.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from taskforce.config.settings import Settings, get_settings
from taskforce.errors import AdvisoryUnavailable

logger = logging.getLogger(__name__)


class AdvisoryClient:
    """
    HTTP client for the advisory text-generation service.

    The underlying httpx.Client can be injected, which lets tests plug in an
    httpx.MockTransport instead of the network.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize advisory client.

        Args:
            api_url: Chat completions endpoint
            model: Model name
            api_key: Bearer token for the endpoint
            timeout: Request timeout in seconds
            http_client: Pre-built httpx client (tests, shared pools)
            settings: Settings to read defaults from
        """
        settings = settings or get_settings()
        self.provider = settings.llm_provider
        self.api_url = api_url or settings.llm_api_url
        self.model = model or settings.llm_model
        self.api_key = api_key or settings.llm_api_key
        self.timeout = timeout or settings.llm_timeout
        self._http = http_client

        if not self.api_key:
            logger.warning("No advisory API key configured; every call will fall back")
        else:
            logger.info(f"Advisory client ready: provider={self.provider} model={self.model}")

    def _get_http(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._http is None:
            self._http = httpx.Client(timeout=self.timeout)
        return self._http

    def _build_messages(self, system_prompt: Optional[str], user_content: str) -> List[Dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_content})
        return messages

    def complete(
        self,
        user_content: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.1,
    ) -> str:
        """
        Send one prompt and return the reply text.

        Args:
            user_content: User message (usually a JSON payload or a full prompt)
            system_prompt: Optional fixed instruction for the call type
            temperature: Sampling temperature

        Returns:
            Reply text, never empty

        Raises:
            AdvisoryUnavailable: on missing credentials, transport error,
                non-2xx status, or an empty reply
        """
        if not self.api_key:
            raise AdvisoryUnavailable("Advisory API key is not configured")

        payload: Dict[str, Any] = {
            "model": self.model,
            "temperature": temperature,
            "messages": self._build_messages(system_prompt, user_content),
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = self._get_http().post(self.api_url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Advisory request rejected: status={e.response.status_code}",
                extra={"provider": self.provider, "model": self.model},
            )
            raise AdvisoryUnavailable(f"Advisory service returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Advisory request failed: {e}", extra={"provider": self.provider})
            raise AdvisoryUnavailable(f"Advisory service unreachable: {e}") from e
        except ValueError as e:
            raise AdvisoryUnavailable("Advisory service returned a non-JSON body") from e

        content = self._extract_content(data)
        if not content:
            raise AdvisoryUnavailable("Empty advisory response")

        logger.debug(f"Advisory reply ({len(content)} chars)")
        return content

    @staticmethod
    def _extract_content(data: Any) -> Optional[str]:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None
        if not isinstance(content, str):
            return None
        return content.strip() or None

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None


def create_advisory_client(settings: Optional[Settings] = None) -> AdvisoryClient:
    """Build an AdvisoryClient from settings."""
    return AdvisoryClient(settings=settings)
