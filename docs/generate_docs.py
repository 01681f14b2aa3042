"""
Utility script to regenerate EvoSearch documentation artifacts.

Usage:
    python docs/generate_docs.py

The script refreshes the configuration reference markdown from the schema in
``evosearch/configs/config_default.yaml`` and adds the list of registered
operators.
"""

from __future__ import annotations

from pathlib import Path

from evosearch.evolution.operators import list_operators
from evosearch.utils.config_reference import to_markdown


def operator_markdown() -> str:
    lines = ["## Registered operators", ""]
    for family, names in list_operators().items():
        lines.append(f"- **{family}**: {', '.join(f'`{name}`' for name in names)}")
    return "\n".join(lines) + "\n"


def build_config_reference() -> Path:
    docs_dir = Path(__file__).resolve().parent
    target = docs_dir / "config_reference.md"
    target.write_text(to_markdown() + "\n" + operator_markdown(), encoding="utf-8")
    return target


def main() -> None:
    target = build_config_reference()
    print(f"Wrote {target}")


if __name__ == "__main__":
    main()
