"""Write the ledger service's OpenAPI document to openapi/ledger-service.json."""

import importlib
import json
import sys
from pathlib import Path
from typing import Callable

from fastapi import FastAPI

SERVICES = {
    "ledger-service": "services.ledger_service.app.main:create_app",
}


def load_app(factory_path: str) -> FastAPI:
    module_path, factory_name = factory_path.split(":")
    module = importlib.import_module(module_path)
    factory: Callable[[], FastAPI] = getattr(module, factory_name)
    return factory()


def main(out_dir: str = "openapi") -> None:
    target_dir = Path(out_dir)
    target_dir.mkdir(exist_ok=True)
    for name, dotted in SERVICES.items():
        schema = load_app(dotted).openapi()
        target = target_dir / f"{name}.json"
        target.write_text(json.dumps(schema, indent=2, sort_keys=True))
        print(f"Wrote {target} ({len(schema.get('paths', {}))} paths)")


if __name__ == "__main__":
    main(*sys.argv[1:2])
