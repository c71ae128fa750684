"""
Completion client - sends one corrected user turn to a chat-completion endpoint.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import openai

from ..core.config import AIConfig
from ..core.state import ChatState

logger = logging.getLogger(__name__)

class CompletionError(Exception):
    """Raised internally when a completion response carries no usable reply."""

class CompletionClient:
    """Wraps the chat completions API for a single system + user turn.

    ``fetch_reply`` never raises: any failure is logged and the configured
    fallback reply is returned instead.
    """

    def __init__(self, config: AIConfig, state: Optional[ChatState] = None, client: Optional[Any] = None):
        self.config = config
        self.state = state
        self._client = client

    def _get_client(self):
        if self._client is None:
            if not self.config.openai_api_key:
                raise CompletionError("No API key configured (set OPENAI_API_KEY)")
            self._client = openai.AsyncOpenAI(
                api_key=self.config.openai_api_key,
                base_url=self.config.api_base_url,
                timeout=None,
                max_retries=0,
            )
            logger.info(f"Completion client created for {self.config.api_base_url}")
        return self._client

    def build_messages(self, text: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.config.system_prompt},
            {"role": "user", "content": text},
        ]

    async def fetch_reply(self, text: str) -> str:
        """Return the model's reply to text, or the fallback reply on failure."""
        try:
            await self._set_loading(True)
            start_time = time.time()

            client = self._get_client()
            response = await client.chat.completions.create(
                model=self.config.model,
                messages=self.build_messages(text),
            )

            if not response.choices:
                raise CompletionError("Response contained no choices")
            content = response.choices[0].message.content
            if content is None:
                raise CompletionError("First choice has no message content")

            logger.info(f"AI reply received in {time.time() - start_time:.2f}s")
            return content

        except Exception as e:
            logger.error(f"Error fetching AI: {e}")
            return self.config.fallback_reply
        finally:
            await self._set_loading(False)

    async def _set_loading(self, loading: bool):
        if self.state:
            await self.state.set_loading(loading)
