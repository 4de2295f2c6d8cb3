from __future__ import annotations

import json
import logging
import re
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from dataquery.chart_extractor import extract_chart_points, summarize_dataset
from dataquery.chart_type import infer_chart_type, normalize_chart_type
from dataquery.config import Settings
from dataquery.dataset import Dataset
from dataquery.schemas import ChartPoint, InsightResult


logger = logging.getLogger(__name__)

FALLBACK_INSIGHT = (
    "The data shows variation among different categories, with some showing higher values than others. "
    "For more detailed insights, please check your LLM API configuration or upload data that better "
    "matches your query."
)
MISSING_INSIGHT = "No insights available"

_FENCED_JSON_RE = re.compile(r"```(?:json)?(.*?)```", re.DOTALL)
_OBJECT_RE = re.compile(r"({.*})", re.DOTALL)


class InsightParseError(ValueError):
    """Raised when the model reply does not contain a JSON object."""


def _extract_json_text(text: str) -> str:
    match = _FENCED_JSON_RE.search(text) or _OBJECT_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def parse_insight_reply(text: str) -> dict[str, Any]:
    try:
        parsed = json.loads(_extract_json_text(text))
    except json.JSONDecodeError as exc:
        raise InsightParseError("Failed to parse AI response") from exc
    if not isinstance(parsed, dict):
        raise InsightParseError("AI response is not a JSON object")
    return parsed


def build_insight_messages(
    query: str,
    dataset_summary: dict[str, Any],
    chart_points: list[ChartPoint],
) -> list:
    chart_json = json.dumps([p.model_dump() for p in chart_points], ensure_ascii=False)
    sample_json = json.dumps(dataset_summary.get("sample", []), ensure_ascii=False, default=str)
    columns = ", ".join(dataset_summary.get("columns", []))

    return [
        SystemMessage(
            content=(
                "You are an assistant for a business analytics dashboard. "
                "Analyze the data you are given and provide insights. "
                "Only output a JSON object, no other text."
            )
        ),
        HumanMessage(
            content=(
                "Dataset Info:\n"
                f"- Total rows: {dataset_summary.get('total_rows', 0)}\n"
                f"- Columns: {columns}\n"
                f"- Sample data: {sample_json}\n\n"
                f'User Query: "{query}"\n\n'
                f"Chart data that has been extracted: {chart_json}\n\n"
                "Please provide:\n"
                "1. The most suitable chart type for this data (choose one: bar, line, pie, area)\n"
                "2. A brief insight about what this data shows. Focus on trends, patterns, and notable "
                "findings visible in the data. Be concise and business-focused.\n\n"
                "Format your response as a valid JSON object with these fields:\n"
                '{"chartType": "bar OR line OR pie OR area", '
                '"insight": "Brief analysis focusing on what the data shows and key business insights"}'
            )
        ),
    ]


class InsightRequester:
    """Ask the LLM for a chart type and insight over already extracted points.

    Every failure path returns the local fallback result; nothing is raised
    to the caller.
    """

    def __init__(self, settings: Settings, client: Any | None = None):
        self.settings = settings
        self.is_configured = settings.is_configured
        self._client = client

    def _get_client(self):
        if self._client is None:
            kwargs: dict[str, Any] = {
                "api_key": self.settings.llm_api_key,
                "model": self.settings.llm_model,
                "temperature": self.settings.temperature,
                "max_tokens": self.settings.max_tokens,
            }
            if self.settings.llm_base_url:
                kwargs["base_url"] = self.settings.llm_base_url
            self._client = ChatOpenAI(**kwargs)
        return self._client

    @staticmethod
    def fallback_result(query: str, chart_points: list[ChartPoint]) -> InsightResult:
        return InsightResult(
            chart_type=infer_chart_type(query),
            chart_data=list(chart_points),
            insight=FALLBACK_INSIGHT,
        )

    def generate_insight(
        self,
        query: str,
        dataset: Dataset,
        chart_points: list[ChartPoint] | None = None,
    ) -> InsightResult:
        if chart_points is None:
            chart_points = extract_chart_points(dataset, query, max_points=self.settings.max_chart_points)

        if not self.is_configured:
            logger.warning("LLM API key is missing; using local chart type heuristic.")
            return self.fallback_result(query, chart_points)

        if not chart_points:
            logger.warning("Unable to extract meaningful data points from the dataset.")
            return self.fallback_result(query, chart_points)

        summary = summarize_dataset(dataset, sample_size=self.settings.sample_rows)
        messages = build_insight_messages(query, summary, chart_points)

        try:
            resp = self._get_client().invoke(messages)
            raw = getattr(resp, "content", str(resp))
            if not isinstance(raw, str):
                raw = str(raw)
            logger.debug("Raw insight reply: %s", raw)
            parsed = parse_insight_reply(raw)
        except Exception as exc:
            logger.warning("Insight request failed, using fallback: %s", exc)
            return self.fallback_result(query, chart_points)

        chart_type = normalize_chart_type(parsed.get("chartType")) or infer_chart_type(query)
        insight = parsed.get("insight")
        if not isinstance(insight, str) or not insight.strip():
            insight = MISSING_INSIGHT

        return InsightResult(chart_type=chart_type, chart_data=list(chart_points), insight=insight.strip())
