"""Stable digest of a rule's evaluation-relevant content."""

import hashlib
import json

from packing_core.models.rules import DefaultItemRule


def rule_hash(rule: DefaultItemRule) -> str:
    """Hash name, calculation and conditions; sync fields are ignored.

    Two versions of a rule that would produce the same entries share a hash,
    so packed state survives edits that only touch metadata.
    """
    payload = rule.model_dump(mode="json", include={"name", "calculation", "conditions"})
    sorted_json = json.dumps(payload, sort_keys=True)
    return hashlib.sha256(sorted_json.encode()).hexdigest()[:16]
