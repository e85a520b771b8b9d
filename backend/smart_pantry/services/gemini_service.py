"""
Smart Pantry Backend: Google Gemini Recipe Service
===================================================

What:  Concrete LLM service that asks Google Gemini for a recipe built
       around the food items closest to their expiry date.
How:   Selects the priority items, builds a plain-text prompt, and sends it
       with a single generate_content_async call wrapped in tenacity retry
       and a circuit breaker.
Who:   Instantiated once at import; called by RecipeService.

Resilience Strategy:
    1. Tenacity retry with exponential backoff + jitter for transient failures
    2. Circuit breaker so a Gemini outage fails fast instead of piling up
       requests that each wait through every retry
    3. Per-call timeout (GEMINI_TIMEOUT)
"""

import asyncio
import logging
import time
import uuid
from datetime import date
from typing import List, Optional, Sequence

import google.generativeai as genai
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential_jitter,
    retry_if_exception_type,
    before_sleep_log,
)

from smart_pantry.config import settings
from smart_pantry.exceptions import LLMServiceError, CircuitBreakerOpenError
from smart_pantry.models.food_item import FoodItem
from smart_pantry.schemas.food_item import utc_today
from smart_pantry.services.llm_base import LLMService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker Implementation
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Circuit breaker guarding calls to the recipe model.

    State Machine:
        CLOSED (normal operation)
            → On failure: increment failure_count
            → When failure_count >= threshold: transition to OPEN

        OPEN (rejecting all requests)
            → All calls raise CircuitBreakerOpenError immediately
            → After recovery_timeout seconds: transition to HALF_OPEN

        HALF_OPEN (testing recovery)
            → Allow ONE request through
            → On success: transition to CLOSED (reset failure_count)
            → On failure: transition back to OPEN (reset timer)

    Not thread-safe: uvicorn async workers share one event loop per process,
    and each process keeps its own breaker.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Check if a request is allowed through the circuit breaker.

        Raises:
            CircuitBreakerOpenError if the circuit is OPEN and the recovery
            timeout hasn't elapsed.
        """
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed >= self.recovery_timeout:
                logger.info(
                    "Circuit breaker transitioning to HALF_OPEN after %.1fs",
                    elapsed,
                )
                self.state = self.HALF_OPEN
                return True
            remaining = max(1, int(self.recovery_timeout - elapsed))
            raise CircuitBreakerOpenError(recovery_time=remaining)

        # HALF_OPEN: the test request goes through
        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Circuit breaker transitioning to CLOSED (service recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        """Record a failed call. May trigger CLOSED → OPEN or HALF_OPEN → OPEN."""
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Circuit breaker returning to OPEN (test request failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Prompt Construction
# ══════════════════════════════════════════════════════════════════════════

def select_priority_items(
    items: Sequence[FoodItem],
    today: date,
    window_days: int = 7,
) -> List[FoodItem]:
    """
    Items whose expiry is 0 to `window_days` days away, inclusive.

    Already-expired items are left out. When nothing falls inside the
    window, every item is returned so the prompt is never empty.
    """
    expiring = [
        item for item in items
        if 0 <= (item.expiry_date - today).days <= window_days
    ]
    if not expiring:
        logger.debug("No items expire within %d days; using all %d items", window_days, len(items))
        return list(items)
    return expiring


def build_recipe_prompt(items: Sequence[FoodItem], today: date, window_days: int = 7) -> str:
    """Plain-text recipe prompt listing the priority items, then conditions and output format."""
    selected = select_priority_items(items, today, window_days)

    lines = [
        "Please suggest a nutritionally balanced recipe that uses the following ingredients:",
        "",
        "[Ingredients]",
    ]
    for item in selected:
        lines.append(
            f"- {item.title} (x{item.quantity}): best before {item.expiry_date.strftime('%Y/%m/%d')}"
        )
    lines += [
        "",
        "[Conditions]",
        "1. Use the ingredients listed above first",
        "2. Keep the meal nutritionally balanced",
        "3. Keep the cooking steps concise",
        "4. Suggest any additional ingredients that are needed",
        "",
        "[Output format]",
        "1. Recipe name",
        "2. Ingredients (serves 2)",
        "3. Cooking steps",
        "4. Notes on nutritional balance",
    ]
    return "\n".join(lines) + "\n"


# ══════════════════════════════════════════════════════════════════════════
# Gemini Service
# ══════════════════════════════════════════════════════════════════════════

class GeminiService(LLMService):
    """
    Google Gemini implementation of recipe generation.

    Error Handling Chain:
        API call fails → tenacity retries (RETRY_MAX_ATTEMPTS with backoff)
        → All retries fail → record circuit breaker failure → LLMServiceError
        → Threshold reached → later calls rejected instantly (OPEN)
        → Recovery timeout → one test call allowed (HALF_OPEN)
        → Test succeeds → normal operation (CLOSED)
    """

    def __init__(self):
        # The SDK keeps the API key in module-level state.
        if settings.gemini_api_key and settings.gemini_api_key != "your_gemini_api_key_here":
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(settings.gemini_model)

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

        logger.info(
            "GeminiService initialized with model=%s, "
            "circuit_breaker(threshold=%d, recovery=%ds)",
            settings.gemini_model,
            settings.cb_failure_threshold,
            settings.cb_recovery_timeout,
        )

    async def generate_recipe(self, items: Sequence[FoodItem]) -> str:
        """
        Ask Gemini for one recipe built around the items expiring soonest.

        Flow:
            1. Check circuit breaker → may raise CircuitBreakerOpenError
            2. Build the prompt from the priority items
            3. Call Gemini with retry logic
            4. Record success/failure in the circuit breaker

        Raises:
            CircuitBreakerOpenError: Circuit is open (too many recent failures)
            LLMServiceError: Gemini failed after all retry attempts
        """
        request_id = str(uuid.uuid4())[:8]

        self.circuit_breaker.can_execute()

        prompt = build_recipe_prompt(items, utc_today(), settings.recipe_expiry_window_days)
        logger.info("[%s] Requesting recipe for %d food items", request_id, len(items))

        try:
            result = await self._call_gemini_with_retry(prompt, request_id)
            self.circuit_breaker.record_success()
            return result

        except Exception as e:
            # reraise=True: this is the last attempt's own exception.
            self.circuit_breaker.record_failure()
            logger.error(
                "[%s] Gemini recipe generation failed: %s",
                request_id,
                str(e),
                exc_info=True,
            )
            raise LLMServiceError(
                message="Recipe generation failed. Please try again later.",
                retry_after=self.circuit_breaker.recovery_timeout,
                context={"request_id": request_id, "error_type": type(e).__name__},
            )

    @retry(
        # The SDK raises a range of google.api_core exceptions; all are retried.
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call_gemini_with_retry(self, prompt: str, request_id: str) -> str:
        """
        The actual Gemini call. Kept separate from generate_recipe so the
        circuit-breaker check is not retried along with it.
        """
        start_time = time.time()

        try:
            response = await self.model.generate_content_async(
                prompt,
                request_options={"timeout": settings.gemini_timeout},
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(
                "[%s] Gemini API call failed after %.0fms: %s",
                request_id,
                duration_ms,
                str(e),
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        recipe = self._response_text(response)
        logger.info(
            "[%s] Gemini recipe completed in %.0fms, %d chars",
            request_id,
            duration_ms,
            len(recipe),
        )
        return recipe

    @staticmethod
    def _response_text(response) -> str:
        """
        Stripped text of the first candidate, or "" when there is none.

        `response.text` raises ValueError when the candidate list is empty or
        the answer was blocked; that is a valid but empty answer, not a
        failure worth retrying.
        """
        try:
            text = response.text
        except ValueError:
            logger.warning("Gemini returned no usable candidate")
            return ""
        return text.strip() if text else ""

    async def health_check(self) -> bool:
        """
        Check if Gemini API is reachable.

        Lists available models, which verifies the key without spending tokens.
        """
        try:
            # list_models is a blocking HTTP call.
            models = await asyncio.to_thread(lambda: list(genai.list_models()))
            model_names = [m.name for m in models]
            target = f"models/{settings.gemini_model}"
            if target not in model_names:
                logger.warning("Configured model %s not found in available models", target)
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
# Holds the circuit breaker state shared across all requests.
gemini_service = GeminiService()
