# src/workplan/llm/client.py

from __future__ import annotations

import json
import logging
import re
from datetime import date
from typing import Any

import httpx
import openai
from openai import OpenAI

from ..core.errors import PlanGenerationError, PlanValidationError
from ..plan.models import WorkPlan, utc_today

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

PLAN_SCHEMA_HINT = """{
  "projectName": "string",
  "summary": "string",
  "tasks": [
    {
      "id": 1,
      "name": "string",
      "description": "string",
      "assignee": "string",
      "startDate": "YYYY-MM-DD",
      "endDate": "YYYY-MM-DD",
      "status": "Not Started",
      "reminder": "None"
    }
  ]
}"""


def build_plan_prompt(document_text: str, *, today: date, max_chars: int) -> str:
    return f"""
Analyze the following document text. Identify all pending issues, action items, unresolved topics, and key deliverables. Based on this analysis, create a comprehensive and logical work plan and timeline to address and resolve everything.

Key instructions:
1. The project name should be inferred from the document's main subject.
2. Provide a high-level summary of the work plan.
3. Break down the work into specific, actionable tasks with unique integer ids starting from 1.
4. For each task, provide a description, an inferred assignee/role (e.g. 'Project Manager', 'Dev Team'), start date, end date, an initial status of 'Not Started', and a default reminder of 'None'.
5. The timeline should be logical, with sequential tasks having appropriate start and end dates.
6. Assume today's date is {today.isoformat()} for creating the timeline. Dates must be in YYYY-MM-DD format.
7. Output strictly one JSON object of this shape, with no text or markdown outside it:
{PLAN_SCHEMA_HINT}

Document Text:
---
{document_text[:max_chars]}
---
""".strip()


def parse_work_plan_json(text: str) -> WorkPlan:
    """Parse the model's reply into a WorkPlan (tolerates a ```json fence)."""
    raw = _FENCE_RE.sub("", (text or "").strip())
    if not raw:
        raise PlanGenerationError("The AI model returned an empty response.")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PlanGenerationError(f"The AI model returned invalid JSON: {e.msg}.") from e
    try:
        return WorkPlan.from_dict(payload)
    except PlanValidationError as e:
        raise PlanGenerationError(str(e)) from e


def friendly_generation_error(err: Exception) -> str:
    if isinstance(err, openai.AuthenticationError | openai.PermissionDeniedError):
        return "Your API key is not valid. Please check your configuration."
    if isinstance(err, openai.RateLimitError):
        return "The AI service is rate-limited. Please try again later."
    if isinstance(err, openai.APIConnectionError | openai.InternalServerError):
        return (
            "A network or server error occurred while contacting the AI service. "
            "Please try again later."
        )
    return str(err).strip() or "An unknown error occurred while generating the work plan."


class OpenRouterPlanGenerator:
    """
    Plan generator backed by an OpenAI-compatible chat endpoint (OpenRouter by default).

    Models from settings.llm_models are tried in order; auth errors fail fast,
    other errors fall through to the next model.
    """

    def __init__(self, settings: Any, client: OpenAI | None = None) -> None:
        self._settings = settings
        self._client = client

    def _get_client(self) -> OpenAI:
        """Lazily create the client so the app starts without an API key."""
        if self._client is not None:
            return self._client

        api_key = getattr(self._settings, "openrouter_api_key", None)
        base_url = getattr(self._settings, "openrouter_base_url", "") or ""
        if not api_key or not str(api_key).strip():
            raise PlanGenerationError(
                "LLM API key is not set. Set WORKPLAN_OPENROUTER_API_KEY in your .env."
            )

        timeout_s = float(getattr(self._settings, "llm_timeout_seconds", 60.0))
        self._client = OpenAI(
            base_url=str(base_url),
            api_key=str(api_key),
            timeout=httpx.Timeout(timeout_s, connect=5.0),
            max_retries=0,
        )
        return self._client

    def generate(self, text: str) -> WorkPlan:
        if not text or not text.strip():
            raise PlanGenerationError("The document contains no text to analyze.")

        models = [m.strip() for m in getattr(self._settings, "llm_models", []) or [] if m.strip()]
        if not models:
            raise PlanGenerationError("LLM model list is empty. Set WORKPLAN_LLM_MODELS in your .env.")

        client = self._get_client()
        headers: dict[str, str] = dict(getattr(self._settings, "extra_headers", {}) or {})
        prompt = build_plan_prompt(
            text,
            today=utc_today(),
            max_chars=int(getattr(self._settings, "max_document_chars", 200_000)),
        )

        last_error: Exception | None = None
        for model in models:
            logger.info("LLM: generating plan with model=%s", model)
            try:
                resp = client.chat.completions.create(
                    model=model,
                    messages=[{"role": "user", "content": prompt}],
                    response_format={"type": "json_object"},
                    extra_headers=headers or None,
                )
                content = resp.choices[0].message.content or ""
                plan = parse_work_plan_json(content)
                logger.info("LLM: plan from model=%s tasks=%d", model, len(plan.tasks))
                return plan
            except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
                raise PlanGenerationError(
                    f"Failed to generate a valid work plan. {friendly_generation_error(e)}"
                ) from e
            except PlanGenerationError as e:
                logger.info("LLM: unusable plan from model=%s (%s), trying next", model, e)
                last_error = e
            except openai.OpenAIError as e:
                logger.info("LLM: error on model=%s (%s), trying next", model, e.__class__.__name__)
                last_error = e

        detail = friendly_generation_error(last_error) if last_error else "All LLM models failed."
        raise PlanGenerationError(f"Failed to generate a valid work plan. {detail}") from last_error
