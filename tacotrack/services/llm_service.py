"""
LLM Service for forecasting and kitchen chat
Sends inventory and sales context to Claude and parses what comes back
"""
import json
import re
from datetime import date
from typing import Dict, List, Optional, Sequence

from anthropic import Anthropic

from tacotrack.config import get_settings
from tacotrack.domain import CONFIDENCE_TIERS, Ingredient, Recipe
from tacotrack.services.ingredient_metrics import avg_daily_usage, days_of_stock, is_sentinel
from tacotrack.utils.logger import log

settings = get_settings()


class LLMService:
    """
    Thin adapter over the Anthropic client. Every caller has a non-LLM path,
    so failures here are logged and reported as None rather than raised.
    """

    def __init__(self):
        self.enabled = bool(settings.enable_llm_insights and settings.anthropic_api_key)
        self.client = None

        if self.enabled:
            try:
                self.client = Anthropic(api_key=settings.anthropic_api_key)
                log.info("LLM Service initialized with Claude")
            except Exception as e:
                log.error(f"Failed to initialize Anthropic client: {str(e)}")
                self.enabled = False
        else:
            log.info("LLM features disabled (no API key or feature disabled)")

    def is_available(self) -> bool:
        """Check if LLM service is available"""
        return self.enabled

    def _complete(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        response = self.client.messages.create(
            model=settings.llm_model,
            max_tokens=max_tokens or settings.llm_max_tokens,
            messages=[{"role": "user", "content": prompt}]
        )
        return response.content[0].text

    # ─────────────────────────────────────────────
    # FORECASTING
    # ─────────────────────────────────────────────

    def forecast_sales(
        self,
        daily_sales: List[Dict],
        weekday_patterns: List[Dict],
        start_date: date,
        forecast_days: int,
    ) -> Optional[List[Dict]]:
        """
        Ask for a per-day sales forecast.

        Returns a list of {date, predicted_quantity, confidence} dicts, or None
        when the service is off or the answer cannot be used.
        """
        if not self.enabled:
            return None

        prompt = f"""You are a restaurant sales forecasting expert.

HISTORICAL DATA (daily units sold, most recent 30 days with sales):
{json.dumps(daily_sales[-30:], indent=2, default=str)}

WEEKDAY PATTERNS:
{json.dumps(weekday_patterns, indent=2)}

TASK:
Forecast sales for the next {forecast_days} days starting from {start_date.isoformat()}.

Consider:
- Weekday patterns (weekends vs weekdays)
- Recent trends (increasing/decreasing)

Return ONLY a JSON array with this exact format:
[
  {{ "date": "{start_date.isoformat()}", "predicted_quantity": 85, "confidence": "high" }}
]

Important:
- predicted_quantity must be an integer
- confidence can be "high", "medium", or "low"
- Return ONLY the JSON array, no explanation"""

        try:
            text = self._complete(prompt, max_tokens=1000)
        except Exception as e:
            log.error(f"Error generating sales forecast: {str(e)}")
            return None

        forecast = parse_forecast_response(text)
        if forecast is None:
            log.warning("LLM forecast response could not be parsed")
        else:
            log.info(f"Generated {len(forecast)}-day forecast via LLM")
        return forecast

    # ─────────────────────────────────────────────
    # CHAT
    # ─────────────────────────────────────────────

    def chat_about_inventory(
        self,
        message: str,
        ingredients: Sequence[Ingredient],
        recipes: Sequence[Recipe],
        today: Optional[date] = None,
    ) -> Optional[str]:
        """Answer a kitchen manager's question using the current stock and menu"""
        if not self.enabled:
            return None

        today = today or date.today()
        prompt = f"""You are "Taco Talk", the operations assistant for a busy taco restaurant.

Today is {today.strftime('%A')}, {today.isoformat()}.

CRITICAL: Only use data from the context below. Do NOT make up or hallucinate any numbers.

=== INVENTORY ===
{build_inventory_context(ingredients)}

=== MENU ===
{build_menu_context(recipes, ingredients)}

Question: {message}

Answer in 2-4 short sentences or a short bulleted list. Name specific items and quantities.
If stock is critical, say what to order and from which vendor."""

        try:
            answer = self._complete(prompt)
            log.info("Answered inventory chat question via LLM")
            return answer
        except Exception as e:
            log.error(f"Error answering chat question: {str(e)}")
            return None


def build_inventory_context(ingredients: Sequence[Ingredient]) -> str:
    lines = []
    for ing in ingredients:
        days = days_of_stock(ing)
        runway = "no recent usage" if is_sentinel(days) else f"{days:.1f} days"
        status = "CRITICAL LOW" if days <= settings.critical_days_threshold else "OK"
        lines.append(
            f"[{status}] ITEM: {ing.name}\n"
            f"  - Stock: {ing.on_hand} {ing.unit}\n"
            f"  - Cost: ${ing.cost_per_unit}/{ing.unit}\n"
            f"  - Vendor: {ing.vendor or 'n/a'}\n"
            f"  - Avg Usage: {avg_daily_usage(ing.daily_usage):.1f}/day\n"
            f"  - Runway: {runway}"
        )
    return "\n".join(lines) or "(no ingredients)"


def build_menu_context(recipes: Sequence[Recipe], ingredients: Sequence[Ingredient]) -> str:
    by_id = {ing.id: ing for ing in ingredients}
    lines = []
    for recipe in recipes:
        parts = []
        for line in recipe.ingredients:
            ing = by_id.get(line.ingredient_id)
            unit = line.unit or (ing.unit if ing else "units")
            parts.append(f"{line.qty} {unit} {ing.name if ing else 'Unknown Ingredient'}")
        lines.append(f"DISH: {recipe.name} (${recipe.sell_price})\n  - Ingredients: {', '.join(parts)}")
    return "\n".join(lines) or "(no recipes)"


def parse_forecast_response(text: Optional[str]) -> Optional[List[Dict]]:
    """Pull the JSON array out of a model answer; None if it is not usable."""
    if not text:
        return None
    cleaned = re.sub(r"```(?:json)?", "", text).strip()
    match = re.search(r"\[.*\]", cleaned, re.DOTALL)
    if not match:
        return None
    try:
        items = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    if not isinstance(items, list):
        return None

    parsed = []
    for item in items:
        if not isinstance(item, dict):
            return None
        try:
            target = date.fromisoformat(str(item["date"]))
            quantity = float(item["predicted_quantity"])
        except (KeyError, TypeError, ValueError):
            return None
        confidence = str(item.get("confidence", "low")).lower()
        if confidence not in CONFIDENCE_TIERS:
            confidence = "low"
        parsed.append({
            "date": target,
            "predicted_quantity": max(0.0, quantity),
            "confidence": confidence,
        })
    return parsed or None
