"""Abstract interface for platform-provided on-device language models."""

from abc import ABC, abstractmethod


class PlatformModel(ABC):
    """Abstract base class for an operating system's built-in AI model."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Returns whether the platform model is enabled and supported."""

    @abstractmethod
    async def generate(self, prompt: str, instructions: str) -> str:
        """
        Generates a completion for a prompt.

        Args:
            prompt: The user prompt.
            instructions: System instructions for the model.

        Returns:
            The raw model output.
        """
