from __future__ import annotations

from pathlib import Path

import pytest

from taskgrid.config import DEFAULT_CONFIG, EngineConfig, config_from_dict, find_config, load_config


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults() -> None:
    assert DEFAULT_CONFIG.is_completion("Completed")
    assert DEFAULT_CONFIG.is_completion("DONE")
    assert DEFAULT_CONFIG.is_completion("closed")
    assert not DEFAULT_CONFIG.is_completion("In Progress")
    assert not DEFAULT_CONFIG.is_completion(None)
    assert DEFAULT_CONFIG.priority_rank("Medium") == 2
    assert DEFAULT_CONFIG.priority_rank("nope") == 4
    assert DEFAULT_CONFIG.default_sort_field("project") == "name"


def test_load_config_partial_file_keeps_defaults(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "taskgrid.toml",
        """
completion_values = ["shipped", "done"]

[priority_ranks]
Critical = 0
High = 1

[default_sort]
Task = "priority"
""",
    )
    config = load_config(path)
    assert config.completion_values == ("shipped", "done")
    assert config.priority_ranks == {"Critical": 0, "High": 1}
    assert config.default_sort == {"task": "priority", "project": "name"}
    assert config.priority_rank("low") == 2


def test_empty_config_is_default(tmp_path: Path) -> None:
    assert load_config(_write(tmp_path / "taskgrid.toml", "")) == EngineConfig()


@pytest.mark.parametrize(
    "data, message",
    [
        ({"completion_values": "done"}, "must be a list of strings"),
        ({"completion_values": ["  "]}, "must not be empty"),
        ({"priority_ranks": {"High": "first"}}, "must be an integer"),
    ],
)
def test_invalid_config_values(data, message) -> None:
    with pytest.raises(ValueError, match=message):
        config_from_dict(data)


def test_invalid_toml(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="invalid TOML"):
        load_config(_write(tmp_path / "taskgrid.toml", "completion_values = ["))


def test_find_config_walks_up(tmp_path: Path) -> None:
    config_path = _write(tmp_path / "taskgrid.toml", "")
    nested = tmp_path / "exports" / "2024"
    nested.mkdir(parents=True)
    assert find_config(nested) == config_path.resolve()


def test_find_config_missing(tmp_path: Path) -> None:
    nested = tmp_path / "empty"
    nested.mkdir()
    found = find_config(nested)
    assert found is None or not found.is_relative_to(tmp_path.resolve())


def test_config_is_hashable() -> None:
    import functools

    assert hash(EngineConfig()) == hash(EngineConfig())
    assert EngineConfig() == DEFAULT_CONFIG

    calls = []

    @functools.lru_cache(maxsize=None)
    def cached(config: EngineConfig) -> int:
        calls.append(config)
        return config.priority_rank("High")

    assert cached(EngineConfig()) == 1
    assert cached(DEFAULT_CONFIG) == 1
    assert len(calls) == 1
    assert cached(EngineConfig(priority_ranks={"High": 5})) == 5
    assert len(calls) == 2
