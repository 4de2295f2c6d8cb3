from dataquery.dataset import Dataset
from dataquery.suggestions import GENERIC_SUGGESTIONS, NO_DATA_SUGGESTIONS, suggest_queries


def test_no_data_prompts_for_an_upload():
    assert suggest_queries(Dataset()) == NO_DATA_SUGGESTIONS
    assert suggest_queries(None) == NO_DATA_SUGGESTIONS


def test_column_families_drive_suggestions():
    dataset = Dataset.from_records([{"Region": "North", "Sales": 10, "Order Date": "2024-01-01"}])

    assert suggest_queries(dataset) == [
        "Show me revenue trends",
        "Compare sales by category",
        "Compare data by region",
        "Show top performing regions",
    ]


def test_generic_suggestions_pad_without_duplicates():
    dataset = Dataset.from_records([{"sku": "A-1", "qty": 4}])

    assert suggest_queries(dataset) == [
        "What are our top products?",
        "Compare product performance",
        GENERIC_SUGGESTIONS[0],
        GENERIC_SUGGESTIONS[1],
    ]


def test_unrelated_columns_get_generic_suggestions():
    dataset = Dataset.from_records([{"alpha": 1, "beta": "x"}])

    assert suggest_queries(dataset) == GENERIC_SUGGESTIONS
