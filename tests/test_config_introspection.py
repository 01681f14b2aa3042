from pathlib import Path

import pytest

from evosearch.evolution import EvolutionConfig
from evosearch.utils import config_reference
from evosearch.utils.profiles import get_profile, list_profiles


def test_describe_config_dict_output() -> None:
    data = config_reference.as_dict(section="engine")
    assert "engine" in data
    assert "population_size" in data["engine"]
    assert data["engine"]["population_size"]["default"] == 50


def test_describe_config_markdown_console() -> None:
    markdown = config_reference.to_markdown(section="engine")
    assert "EvoSearch Configuration Reference" in markdown
    assert "| `mutation_rate` |" in markdown
    console = config_reference.to_console()
    assert "[ENGINE]" in console and "[OPERATORS]" in console


def test_explain_config_key() -> None:
    text = EvolutionConfig.explain("population_size")
    assert "population_size" in text.lower()
    assert "genomes" in text
    assert "engine.crossover_rate" in EvolutionConfig.explain("engine.crossover_rate")
    assert "engine.seed" in EvolutionConfig.explain()


def test_explain_unknown_key_raises() -> None:
    with pytest.raises(KeyError):
        config_reference.explain("engine.bogus")


def test_generate_config_docs(tmp_path: Path) -> None:
    output = tmp_path / "CONFIG.md"
    config_reference.write_markdown(output)
    assert output.exists()
    content = output.read_text(encoding="utf-8")
    assert "Configuration Reference" in content
    assert "## Operators" in content


def test_profiles_cover_every_preset() -> None:
    assert set(list_profiles()) == {"default", "exploration", "exploitation", "balanced"}
    assert get_profile("exploitation")["engine"]["population_size"] == 30
    with pytest.raises(KeyError):
        get_profile("missing")
