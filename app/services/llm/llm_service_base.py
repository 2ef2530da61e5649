from abc import ABC, abstractmethod
from typing import Any, Mapping

from app.services.llm.kudo_message_schemas import CompletionOverrides, KudoMessageRequest, KudoMessageResult


class MessageCompletionService(ABC):
    """Abstract base class for kudo message completion implementations"""

    @abstractmethod
    async def complete(
        self,
        request: KudoMessageRequest | Mapping[str, Any],
        overrides: CompletionOverrides | Mapping[str, Any] | None = None,
    ) -> KudoMessageResult:
        """
        Generate a kudo message draft for `request`.
        Implementations make at most one upstream call and never retry.
        Every failure is raised as a `CompletionError` subclass; callers decide
        whether to retry based on `error.kind`.
        """
        pass
