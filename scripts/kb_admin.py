"""
Operator CLI for the knowledge base store.

Works directly against the store configured through the environment
(KB_STORE_BACKEND and friends), bypassing the HTTP API:
  - export [--output FILE]   dump all collections as an export bundle
  - import FILE              sparse import of an export bundle
  - new-id [--count N]       print fresh record identifiers
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from knowledge_base.backup import export_bundle, load_bundle
from knowledge_base.config import get_settings
from knowledge_base.dependencies import build_context
from knowledge_base.ids import generate_id

logger = logging.getLogger(__name__)


def cmd_export(args, repository) -> int:
    text = json.dumps(export_bundle(repository), ensure_ascii=False, indent=2)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        logger.info("Exported to %s", args.output)
    else:
        print(text)
    return 0


def cmd_import(args, repository) -> int:
    bundle = load_bundle(Path(args.file))
    result = repository.apply_import(bundle)
    for key, outcome in result.results.items():
        print(f"{key}: {outcome}")
    if not result.ok:
        logger.error("Import failed: %s", result.error)
        return 1
    return 0


def cmd_new_id(args, repository) -> int:
    for _ in range(args.count):
        print(generate_id())
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Knowledge base store admin")
    sub = parser.add_subparsers(dest="command", required=True)

    export_parser = sub.add_parser("export", help="Write an export bundle")
    export_parser.add_argument("--output", default=None, help="Output file (stdout if omitted)")
    export_parser.set_defaults(func=cmd_export)

    import_parser = sub.add_parser("import", help="Import an export bundle")
    import_parser.add_argument("file", help="Bundle produced by export")
    import_parser.set_defaults(func=cmd_import)

    id_parser = sub.add_parser("new-id", help="Generate record identifiers")
    id_parser.add_argument("--count", type=int, default=1)
    id_parser.set_defaults(func=cmd_new_id)

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    settings = get_settings()
    if args.command != "new-id" and settings.kb_store_backend is None:
        logger.error("KB_STORE_BACKEND is not set; refusing to use an in-memory store")
        return 1
    repository = build_context(settings).repository
    return args.func(args, repository)


if __name__ == "__main__":
    raise SystemExit(main())
