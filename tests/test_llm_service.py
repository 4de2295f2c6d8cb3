import unittest

import pytest

from dataquery.chart_extractor import extract_chart_points
from dataquery.config import Settings
from dataquery.dataset import Dataset
from dataquery.llm_service import (
    FALLBACK_INSIGHT,
    MISSING_INSIGHT,
    InsightParseError,
    InsightRequester,
    parse_insight_reply,
)
from dataquery.schemas import ChartPoint


def _settings(api_key: str = "sk-test") -> Settings:
    return Settings(
        llm_api_key=api_key,
        llm_base_url="",
        llm_model="demo-model",
        temperature=0.2,
        max_tokens=256,
        history_path="unused.json",
        max_chart_points=8,
        sample_rows=5,
    )


class _Reply:
    def __init__(self, content):
        self.content = content


class FakeClient:
    def __init__(self, content=None, error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls = []

    def invoke(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return _Reply(self.content)


SALES = Dataset.from_records(
    [
        {"category": "North", "revenue": 100},
        {"category": "South", "revenue": 50},
        {"category": "North", "revenue": 30},
    ]
)


class InsightRequesterTests(unittest.TestCase):
    def test_uses_llm_chart_type_and_insight(self):
        client = FakeClient('```json\n{"chartType": "Line", "insight": "North leads."}\n```')
        requester = InsightRequester(_settings(), client=client)

        result = requester.generate_insight("compare revenue by category", SALES)

        self.assertEqual(result.chart_type, "line")
        self.assertEqual(result.insight, "North leads.")
        self.assertEqual(
            result.chart_data,
            [ChartPoint(name="North", value=130), ChartPoint(name="South", value=50)],
        )
        self.assertEqual(len(client.calls), 1)

    def test_prompt_contains_dataset_context_and_points(self):
        client = FakeClient('{"chartType": "bar", "insight": "ok"}')
        requester = InsightRequester(_settings(), client=client)

        requester.generate_insight("revenue by category", SALES)

        prompt = client.calls[0][-1].content
        self.assertIn("Total rows: 3", prompt)
        self.assertIn("Columns: category, revenue", prompt)
        self.assertIn('User Query: "revenue by category"', prompt)
        self.assertIn('{"name": "North", "value": 130.0}', prompt)

    def test_transport_failure_falls_back_with_computed_points(self):
        client = FakeClient(error=ConnectionError("network down"))
        requester = InsightRequester(_settings(), client=client)
        query = "compare revenue by category"
        points = extract_chart_points(SALES, query)

        result = requester.generate_insight(query, SALES, chart_points=points)

        self.assertEqual(result.chart_type, "pie")
        self.assertEqual(result.chart_data, points)
        self.assertEqual(result.insight, FALLBACK_INSIGHT)

    def test_non_json_reply_falls_back(self):
        requester = InsightRequester(_settings(), client=FakeClient("I think a bar chart fits."))

        result = requester.generate_insight("total revenue", SALES)

        self.assertEqual(result.chart_type, "area")
        self.assertEqual(result.insight, FALLBACK_INSIGHT)

    def test_unknown_chart_type_defers_to_heuristic(self):
        client = FakeClient('Here you go: {"chartType": "scatter", "insight": "  Spread out.  "}')
        requester = InsightRequester(_settings(), client=client)

        result = requester.generate_insight("revenue growth", SALES)

        self.assertEqual(result.chart_type, "line")
        self.assertEqual(result.insight, "Spread out.")

    def test_missing_insight_uses_placeholder(self):
        requester = InsightRequester(_settings(), client=FakeClient('{"chartType": "pie"}'))

        result = requester.generate_insight("anything", SALES)

        self.assertEqual(result.chart_type, "pie")
        self.assertEqual(result.insight, MISSING_INSIGHT)

    def test_placeholder_api_key_skips_the_request(self):
        client = FakeClient('{"chartType": "pie", "insight": "x"}')
        requester = InsightRequester(_settings(api_key="provide_API_key"), client=client)

        result = requester.generate_insight("revenue", SALES)

        self.assertFalse(requester.is_configured)
        self.assertEqual(client.calls, [])
        self.assertEqual(result.chart_type, "bar")
        self.assertEqual(result.insight, FALLBACK_INSIGHT)
        self.assertEqual([p.name for p in result.chart_data], ["North", "South"])

    def test_no_chart_points_skips_the_request(self):
        client = FakeClient('{"chartType": "pie", "insight": "x"}')
        requester = InsightRequester(_settings(), client=client)

        result = requester.generate_insight("anything", Dataset.from_records([{"name": "only text"}]))

        self.assertEqual(client.calls, [])
        self.assertEqual(result.chart_data, [])
        self.assertEqual(result.chart_type, "bar")

    def test_result_serializes_with_camel_case_aliases(self):
        result = InsightRequester.fallback_result("trend", [ChartPoint(name="a", value=1)])

        payload = result.model_dump(by_alias=True)

        self.assertEqual(payload["chartType"], "line")
        self.assertEqual(payload["chartData"], [{"name": "a", "value": 1.0}])


def test_parse_insight_reply_accepts_bare_json_and_rejects_lists():
    assert parse_insight_reply('{"chartType": "bar"}') == {"chartType": "bar"}

    with pytest.raises(InsightParseError):
        parse_insight_reply("[1, 2]")


if __name__ == "__main__":
    unittest.main()
