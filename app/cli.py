import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from app.backend.process import (
    load_plan_file,
    process_import,
    resolve_vocabulary_path,
    write_json_output,
)
from lingovault.logger import set_level
from lingovault.store import VocabularyStore


def read_input(input_path: Optional[str]) -> str:
    if not input_path or input_path == "-":
        return sys.stdin.read()
    return Path(input_path).expanduser().read_text(encoding="utf-8")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Smart-import pasted vocabulary (CSV, TSV, JSON or text) into a word list."
    )
    parser.add_argument(
        "--input",
        default="-",
        help="File with the pasted content ('-' reads stdin).",
    )
    parser.add_argument(
        "--vocabulary",
        default=None,
        help="Vocabulary JSON file to merge into (default: env VOCABULARY_PATH or ./vocabulary.json).",
    )
    parser.add_argument(
        "--plan",
        default=None,
        help="Use this import plan JSON instead of asking the model.",
    )
    parser.add_argument(
        "--source",
        default=None,
        help="Batch label stored on every imported word (default: import-YYMMDD-HHMM).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run the import against an in-memory copy; the vocabulary file is not written.",
    )
    parser.add_argument(
        "--no-retry",
        action="store_true",
        help="Ask the model once and fail fast instead of retrying.",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Also write the import result JSON into this directory.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level.",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)
    raw_text = read_input(args.input)
    if not raw_text.strip():
        print("[error] input is empty.")
        return 1

    vocabulary_path = resolve_vocabulary_path(args.vocabulary)
    if args.dry_run:
        existing = VocabularyStore(vocabulary_path).words() if vocabulary_path.exists() else []
        store = VocabularyStore(None, words=existing)
    else:
        store = VocabularyStore(vocabulary_path)

    plan_override = load_plan_file(args.plan) if args.plan else None
    result = process_import(
        raw_text,
        store,
        plan_override=plan_override,
        source_label=args.source,
        retry=not args.no_retry,
    )

    if args.output_dir:
        print("JSON:", write_json_output(result, args.output_dir))

    if result["status"] == "failed":
        print(f"[error] import failed: {result.get('error')}")
        return 1
    if result["inserted"] == 0:
        print("No new words found.")
    else:
        print(f"Added {result['inserted']} words ({result['source']}).")
    if not args.dry_run:
        print("Vocabulary:", vocabulary_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
