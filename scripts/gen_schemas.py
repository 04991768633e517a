# scripts/gen_schemas.py
"""
Generate JSON Schemas for tatboard data models.

This script exports JSON Schema files for:
    - ValidatedRecord
    - AgentMetrics
    - TeamMetrics
    - Config

Output directory: schemas/
"""

import json
from pathlib import Path

from tatboard.schemas.models import AgentMetrics, Config, TeamMetrics, ValidatedRecord


def export_schema(model_cls, name: str, out_dir: Path) -> Path:
    """
    @brief
    Exports the JSON schema of a given Pydantic model.

    @details
    Writes "<name>.schema.json" (UTF-8, indented, trailing newline) into
    `out_dir`, creating the directory if needed.

    @returns
        Path to the written schema file.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    schema_path = (out_dir / f"{name}.schema.json").resolve()

    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(model_cls.model_json_schema(), f, indent=2, ensure_ascii=False)
        f.write("\n")

    try:
        rel = schema_path.relative_to(Path.cwd())
    except ValueError:
        rel = schema_path
    print(f"✅  Generated {rel}")
    return schema_path


def main(out_dir: Path | None = None) -> None:
    out_dir = (out_dir or Path("schemas")).resolve()
    export_schema(ValidatedRecord, "record", out_dir)
    export_schema(AgentMetrics, "agent_metrics", out_dir)
    export_schema(TeamMetrics, "team_metrics", out_dir)
    export_schema(Config, "config", out_dir)


if __name__ == "__main__":
    main()
