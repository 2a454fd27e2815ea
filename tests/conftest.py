"""Shared test fixtures for grade-spy tests."""

import pytest
import pandas as pd

from grade_spy.source import Category, InMemorySource, Source


class StaticSource(Source):
    """Source answering from a fixed table of responses.

    Windows missing from the table report nobody.
    """

    def __init__(self, responses, categories, group_size, timeline_end):
        self.responses = dict(responses)
        self.categories = list(categories)
        self._group_size = group_size
        self._timeline_end = timeline_end
        self.calls = []

    async def gpa_list(self, start, end, category=None):
        self.calls.append((start, end, category))
        return list(self.responses.get((start, end, category), []))

    async def relevant_categories(self):
        return list(self.categories)

    def group_size(self):
        return self._group_size

    def timeline_end(self):
        return self._timeline_end


@pytest.fixture
def static_source():
    """Factory for StaticSource."""
    return StaticSource


@pytest.fixture
def single_item_source():
    """One member, one period, one category X (id 0): a single 8."""
    return StaticSource(
        responses={
            (0, 0, None): [8.0],
            (0, 0, 0): [8.0],
        },
        categories=[Category(id=0, name="X")],
        group_size=1,
        timeline_end=0,
    )


@pytest.fixture
def small_grades():
    """Two members, two categories, three periods; period 1 is idle."""
    return pd.DataFrame(
        [
            {"member": "ann", "category_id": 0, "period": 0, "value": 9},
            {"member": "bob", "category_id": 0, "period": 0, "value": 6},
            {"member": "ann", "category_id": 1, "period": 2, "value": 4},
            {"member": "bob", "category_id": 1, "period": 2, "value": 7},
            {"member": "bob", "category_id": 0, "period": 2, "value": 10},
        ],
        columns=["member", "category_id", "period", "value"],
    )


@pytest.fixture
def small_source(small_grades):
    categories = [Category(id=0, name="maths"), Category(id=1, name="history")]
    return InMemorySource(["ann", "bob"], categories, timeline_end=2, grades=small_grades)
