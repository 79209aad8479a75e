"""Test JSON schema export and roundtrip validation."""

import json
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from pydantic import ValidationError

from packing_core.models import (
    Calculation,
    DayCondition,
    DefaultItemRule,
    ExtraItems,
    FieldRef,
    Operator,
    PackingListEntry,
    RuleOverride,
)


@pytest.fixture(scope="module", autouse=True)
def export_schemas() -> None:
    """Export schemas before running tests."""
    result = subprocess.run([sys.executable, "scripts/export_schemas.py"], capture_output=True, text=True)
    assert result.returncode == 0, f"Schema export failed: {result.stderr}"


def test_schemas_exist() -> None:
    """Test that schema files were created."""
    for name in ("DefaultItemRule", "TripRule", "RuleOverride", "Person", "PackingListEntry"):
        assert Path(f"docs/schemas/{name}.schema.json").exists()


def test_rule_schema_has_title() -> None:
    """Test that DefaultItemRule schema has title."""
    with open("docs/schemas/DefaultItemRule.schema.json") as f:
        schema = json.load(f)
    assert schema["title"] == "DefaultItemRule"
    assert "version" in schema["properties"]
    assert "is_deleted" in schema["properties"]


def test_rule_roundtrip(make_rule: Callable[..., DefaultItemRule]) -> None:
    """Test that a rule with every formula feature survives JSON."""
    rule = make_rule(
        "rule-diapers",
        "Diapers",
        Calculation(
            base_quantity=1,
            per_person=True,
            per_day=True,
            extra_items=ExtraItems(quantity=4),
            multiply_by=FieldRef(type="person", field="settings.diapers_per_day"),
        ),
        [DayCondition(field="travel", operator=Operator.eq, value=True)],
        version=3,
    )

    restored = DefaultItemRule.model_validate_json(rule.model_dump_json())

    assert restored == rule
    assert isinstance(restored.conditions[0], DayCondition)


def test_override_roundtrip(make_override: Callable[..., RuleOverride]) -> None:
    """Test that an override survives JSON with its scope."""
    override = make_override("o-1", "rule-1", person_id="p-1", day_index=2, override_count=0)

    restored = RuleOverride.model_validate_json(override.model_dump_json())

    assert restored == override
    assert restored.scope == override.scope


def test_entry_invalid_type_fails() -> None:
    """Test that an entry with a non-integer quantity fails validation."""
    entry = PackingListEntry(rule_id="rule-1", rule_hash="abc", item_name="Socks", quantity=2)
    data = entry.model_dump()
    data["quantity"] = "several"

    with pytest.raises(ValidationError):
        PackingListEntry(**data)
