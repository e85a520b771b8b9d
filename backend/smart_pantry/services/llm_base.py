"""
Smart Pantry Backend: Abstract LLM Service Interface
=====================================================

What:  Abstract base class for recipe-generation providers.
How:   Concrete implementations inherit from LLMService and implement
       generate_recipe() and health_check().
Who:   RecipeService calls it; routes/health.py probes it.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from smart_pantry.models.food_item import FoodItem


class LLMService(ABC):
    """
    Contract for recipe generation from pantry contents.

        - generate_recipe() receives the user's items and returns recipe text
        - Implementations handle their own retry logic and error translation
        - Provider-specific errors are wrapped in LLMServiceError
    """

    @abstractmethod
    async def generate_recipe(self, items: Sequence[FoodItem]) -> str:
        """
        Suggest one recipe that uses up the given food items.

        Args:
            items: The user's food items. Never empty; callers short-circuit
                   an empty pantry before reaching the model.

        Returns:
            The recipe as plain text, stripped. An empty string means the
            model answered with nothing usable. Never None.

        Raises:
            LLMServiceError: The provider failed after all retries.
            CircuitBreakerOpenError: Too many recent consecutive failures.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the LLM service is reachable and operational.

        Lightweight; must not consume generation quota.
        """
        ...
