"""
Smart Pantry Backend: Gemini Service Unit Tests (Mocked)
=========================================================

What:  Tests for GeminiService with the google.generativeai SDK mocked.
How:   Patches the genai module and swaps the model object; no network.

What we test:
    ✅ Circuit breaker state machine
    ✅ Priority item selection and prompt layout
    ✅ Successful, blank and failing generation
    ❌ Real API calls
"""

import threading
import time
from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest

from smart_pantry.config import settings
from smart_pantry.exceptions import CircuitBreakerOpenError, LLMServiceError
from smart_pantry.services.gemini_service import (
    CircuitBreaker,
    GeminiService,
    build_recipe_prompt,
    select_priority_items,
)

TODAY = date(2026, 10, 19)


class TestCircuitBreaker:
    """Tests for the CircuitBreaker resilience pattern."""

    def test_initial_state_is_closed(self):
        cb = CircuitBreaker(failure_threshold=5, recovery_timeout=60)
        assert cb.state == "closed"
        assert cb.failure_count == 0

    def test_stays_closed_under_threshold(self):
        cb = CircuitBreaker(failure_threshold=5, recovery_timeout=60)
        for _ in range(4):
            cb.record_failure()
        assert cb.state == "closed"
        assert cb.can_execute() is True

    def test_open_circuit_rejects_calls(self):
        cb = CircuitBreaker(failure_threshold=3, recovery_timeout=60)
        for _ in range(3):
            cb.record_failure()
        assert cb.state == "open"

        with pytest.raises(CircuitBreakerOpenError) as exc_info:
            cb.can_execute()
        assert 1 <= exc_info.value.recovery_time <= 60

    def test_half_open_after_recovery_timeout(self):
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=0)
        cb.record_failure()
        time.sleep(0.01)

        assert cb.can_execute() is True
        assert cb.state == "half_open"

    def test_failure_in_half_open_reopens(self):
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=0)
        cb.record_failure()
        cb.can_execute()

        cb.record_failure()
        assert cb.state == "open"

    def test_success_resets(self):
        cb = CircuitBreaker(failure_threshold=5, recovery_timeout=60)
        cb.record_failure()
        cb.record_failure()

        cb.record_success()
        assert cb.failure_count == 0
        assert cb.state == "closed"


class TestRecipePrompt:

    def test_selects_items_expiring_within_window(self, make_food_item):
        expired = make_food_item(title="Old bread", expiry_date=TODAY - timedelta(days=1))
        today = make_food_item(title="Milk", expiry_date=TODAY)
        edge = make_food_item(title="Eggs", expiry_date=TODAY + timedelta(days=7))
        later = make_food_item(title="Rice", expiry_date=TODAY + timedelta(days=8))

        selected = select_priority_items([expired, today, edge, later], TODAY, window_days=7)

        assert [item.title for item in selected] == ["Milk", "Eggs"]

    def test_falls_back_to_all_items(self, make_food_item):
        items = [
            make_food_item(title="Rice", expiry_date=TODAY + timedelta(days=30)),
            make_food_item(title="Old bread", expiry_date=TODAY - timedelta(days=3)),
        ]
        assert select_priority_items(items, TODAY) == items

    def test_prompt_lists_items_then_conditions(self, make_food_item):
        items = [
            make_food_item(title="Spinach", quantity=2, expiry_date=date(2026, 10, 21)),
            make_food_item(title="Rice", quantity=1, expiry_date=date(2027, 3, 1)),
        ]

        prompt = build_recipe_prompt(items, TODAY)

        assert "- Spinach (x2): best before 2026/10/21" in prompt
        assert "Rice" not in prompt
        assert prompt.index("[Ingredients]") < prompt.index("[Conditions]") < prompt.index("[Output format]")
        assert "Ingredients (serves 2)" in prompt


class TestGeminiServiceMocked:

    @pytest.mark.asyncio
    async def test_generate_recipe_success(self, make_food_item):
        with patch("smart_pantry.services.gemini_service.genai"):
            mock_response = MagicMock()
            mock_response.text = "  Spinach omelette\n1. Whisk eggs  "
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(return_value=mock_response)

            service = GeminiService()
            service.model = mock_model

            result = await service.generate_recipe([make_food_item(title="Spinach")])

            assert result == "Spinach omelette\n1. Whisk eggs"
            prompt = mock_model.generate_content_async.await_args.args[0]
            assert "Spinach" in prompt
            assert service.circuit_breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_blocked_response_returns_empty_string(self, make_food_item):
        with patch("smart_pantry.services.gemini_service.genai"):
            mock_response = MagicMock()
            type(mock_response).text = PropertyMock(side_effect=ValueError("no candidates"))
            mock_model = MagicMock()
            mock_model.generate_content_async = AsyncMock(return_value=mock_response)

            service = GeminiService()
            service.model = mock_model

            assert await service.generate_recipe([make_food_item()]) == ""

    @pytest.mark.asyncio
    async def test_failure_raises_llm_error_and_counts(self, make_food_item):
        with patch("smart_pantry.services.gemini_service.genai"):
            service = GeminiService()
            service._call_gemini_with_retry = AsyncMock(side_effect=RuntimeError("quota exceeded"))

            with pytest.raises(LLMServiceError):
                await service.generate_recipe([make_food_item()])

            assert service.circuit_breaker.failure_count == 1

    @pytest.mark.asyncio
    async def test_open_circuit_skips_call(self, make_food_item):
        with patch("smart_pantry.services.gemini_service.genai"):
            service = GeminiService()
            service._call_gemini_with_retry = AsyncMock()
            for _ in range(service.circuit_breaker.failure_threshold):
                service.circuit_breaker.record_failure()

            with pytest.raises(CircuitBreakerOpenError):
                await service.generate_recipe([make_food_item()])

            service._call_gemini_with_retry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_health_check(self):
        with patch("smart_pantry.services.gemini_service.genai") as mock_genai:
            service = GeminiService()

            mock_genai.list_models.return_value = [MagicMock()]
            assert await service.health_check() is True

            mock_genai.list_models.side_effect = RuntimeError("bad key")
            assert await service.health_check() is False

    @pytest.mark.asyncio
    async def test_health_check_lists_models_off_the_event_loop(self):
        calling_threads = []

        def fake_list_models():
            calling_threads.append(threading.current_thread())
            return iter([MagicMock()])

        with patch("smart_pantry.services.gemini_service.genai") as mock_genai:
            mock_genai.list_models.side_effect = fake_list_models
            service = GeminiService()

            assert await service.health_check() is True

        assert calling_threads
        assert calling_threads[0] is not threading.main_thread()

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_llm_error(self, make_food_item):
        with patch("smart_pantry.services.gemini_service.genai"):
            service = GeminiService()
            service.model = MagicMock()
            service.model.generate_content_async = AsyncMock(side_effect=RuntimeError("503 from upstream"))

            with patch.object(GeminiService._call_gemini_with_retry.retry, "sleep", AsyncMock()):
                with pytest.raises(LLMServiceError) as exc_info:
                    await service.generate_recipe([make_food_item()])

        assert service.model.generate_content_async.await_count == settings.retry_max_attempts
        assert exc_info.value.context["error_type"] == "RuntimeError"
        assert service.circuit_breaker.failure_count == 1
