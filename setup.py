from pathlib import Path

from setuptools import find_packages, setup

ROOT = Path(__file__).resolve().parent

try:
    from evosearch.utils.config_reference import write_markdown as write_config_markdown
except Exception as exc:  # pragma: no cover - setup-time safety
    print(f"Warning: unable to import config reference generator: {exc}")
    write_config_markdown = None

if write_config_markdown:
    try:
        write_config_markdown(ROOT / "docs" / "config_reference.md")
    except Exception as exc:  # pragma: no cover - setup-time safety
        print(f"Warning: unable to generate config reference: {exc}")


setup(
    name="EvoSearch",
    version="0.1.0",
    description="Generic evolutionary search engine with pluggable operators",
    packages=find_packages(exclude=("tests", "tests.*", "docs")),
    package_data={"evosearch": ["configs/*.yaml"]},
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=(ROOT / "requirements.txt").read_text(encoding="utf-8").splitlines(),
    extras_require={"test": ["pytest>=7.0"]},
)
