"""Export JSON schemas for the persisted entity models."""

import json
from pathlib import Path

from packing_core.models import DefaultItemRule, PackingListEntry, Person, RuleOverride, TripRule

EXPORTED = [DefaultItemRule, TripRule, RuleOverride, Person, PackingListEntry]


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for model in EXPORTED:
        path = schemas_dir / f"{model.__name__}.schema.json"
        with open(path, "w") as f:
            json.dump(model.model_json_schema(), f, indent=2)
        print(f"Exported {model.__name__} schema to {path}")


if __name__ == "__main__":
    main()
