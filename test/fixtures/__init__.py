"""Test fixtures for integration and unit tests."""

from pathlib import Path

_FIXTURES_DIR = Path(__file__).parent


def fixture_path(*parts: str) -> Path:
    """Resolve a path relative to the test/fixtures/ directory."""
    return _FIXTURES_DIR.joinpath(*parts)


def sample_graph_path() -> str:
    return str(fixture_path("graphs", "sample_form.json"))


def sample_data_path() -> str:
    return str(fixture_path("data", "applicant.json"))
