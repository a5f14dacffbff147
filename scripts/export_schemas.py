"""Export JSON schemas for Checklist documents and PersistedSnapshot records."""

import json
from pathlib import Path

from flightdeck.models import Checklist, PersistedSnapshot


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    checklist_path = schemas_dir / "Checklist.schema.json"
    with open(checklist_path, "w") as f:
        json.dump(Checklist.model_json_schema(), f, indent=2)
    print(f"Exported Checklist schema to {checklist_path}")

    # Persisted records are stored with camelCase keys
    snapshot_path = schemas_dir / "PersistedSnapshot.schema.json"
    with open(snapshot_path, "w") as f:
        json.dump(PersistedSnapshot.model_json_schema(by_alias=True), f, indent=2)
    print(f"Exported PersistedSnapshot schema to {snapshot_path}")


if __name__ == "__main__":
    main()
