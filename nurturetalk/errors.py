"""Exceptions raised by the NurtureTalk backend."""

from typing import List


class NurtureTalkError(Exception):
    """Base class for application errors."""


class ConfigurationError(NurtureTalkError):
    """Required credentials or settings are missing."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing configuration: {', '.join(self.missing)}")


class VectorStoreError(NurtureTalkError):
    """The vector store rejected or failed an operation."""


class LLMError(NurtureTalkError):
    """The language model returned no usable completion."""


class NothingToReportError(NurtureTalkError):
    """The conversation holds nothing a report could be built from."""


class ChatNotFoundError(NurtureTalkError):
    """No chat exists with the requested id."""

    def __init__(self, chat_id: str):
        self.chat_id = chat_id
        super().__init__(f"Chat not found: {chat_id}")
