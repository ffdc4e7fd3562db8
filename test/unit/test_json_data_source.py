from __future__ import annotations

from pathlib import Path

import pytest

from domain.errors import ConfigurationError
from infra.data import JsonDataSource
from test.fixtures import sample_data_path

DATA = {
    "name": "Ada",
    "address": {"city": "London", "unit": ""},
    "employment": [{"title": "Analyst"}, {"title": "Countess"}],
}


@pytest.mark.parametrize(
    "key, expected",
    [
        ("name", "Ada"),
        ("address.city", "London"),
        ("address.unit", ""),
        ("employment.1.title", "Countess"),
        ("employment.-1.title", "Countess"),
        ("employment.5.title", None),
        ("address.postcode", None),
        ("name.first", None),
        ("nickname", None),
    ],
)
def test_fetch_resolves_dotted_paths(key: str, expected: object) -> None:
    assert JsonDataSource(DATA).fetch(key) == expected


def test_instances_are_callable_as_fetch() -> None:
    source = JsonDataSource(DATA)
    assert source("address.city") == "London"


def test_from_file_reads_the_fixture() -> None:
    source = JsonDataSource.from_file(sample_data_path())
    assert source("children.2.name") == "Ralph"
    assert source("married") is True


def test_from_file_missing(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Missing data file"):
        JsonDataSource.from_file(tmp_path / "nope.json")


def test_from_file_requires_an_object(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text('["a"]')

    with pytest.raises(ConfigurationError, match="JSON object"):
        JsonDataSource.from_file(path)
