"""Import a JSON array of questions into the question bank, or export it back to JSON."""
import json
import argparse
import logging
from pathlib import Path

from db import get_supabase_uncached, insert_questions_bulk, list_categories, list_questions
from engine import UNASSIGNED_CATEGORY

QUESTION_FIELDS = ("text", "type", "options", "answer", "explanation")


def parse_item(item, category: dict | None = None) -> dict | None:
    """Turn one imported object into a questions row. Returns None if it lacks text or type."""
    if not isinstance(item, dict):
        return None
    if not item.get("text") or not item.get("type"):
        return None
    row = {k: item[k] for k in QUESTION_FIELDS if k in item}
    row["explanation"] = row.get("explanation") or ""
    if category:
        row["category_id"] = category["id"]
        row["category_name"] = category["name"]
    else:
        row["category_id"] = None
        row["category_name"] = UNASSIGNED_CATEGORY
    return row


def parse_questions(text: str, category: dict | None = None) -> tuple[list[dict], int]:
    """
    Parse a JSON document of question objects.
    Returns (rows, skipped). Raises ValueError if the document is not a JSON array.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise ValueError("JSON must be an array of question objects")
    rows = []
    for item in data:
        row = parse_item(item, category)
        if row:
            rows.append(row)
    return rows, len(data) - len(rows)


def export_questions(questions: list[dict]) -> str:
    return json.dumps(questions, indent=2, ensure_ascii=False, default=str)


def run_import(json_path: Path, category_id: str | None = None, chunk_size: int = 200, dry_run: bool = False):
    if not json_path.exists():
        raise FileNotFoundError(f"JSON not found: {json_path}")
    client = get_supabase_uncached()
    category = None
    if category_id:
        category = next((c for c in list_categories(client) if str(c["id"]) == str(category_id)), None)
        if category is None:
            raise ValueError(f"Category not found: {category_id}")
    rows, skipped = parse_questions(json_path.read_text(encoding="utf-8"), category)
    if skipped:
        logging.getLogger(__name__).warning("Skipped %d items without text or type", skipped)
    if dry_run:
        print(f"Dry run: would insert {len(rows)} questions from {json_path}")
        if rows:
            print("Sample row:", rows[0])
        return
    insert_questions_bulk(client, rows, chunk_size=chunk_size)
    print(f"Inserted {len(rows)} questions from {json_path}")


def run_export(out_path: Path):
    questions = list_questions(get_supabase_uncached())
    out_path.write_text(export_questions(questions), encoding="utf-8")
    print(f"Exported {len(questions)} questions to {out_path}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    parser = argparse.ArgumentParser(description="Import/export exam questions as JSON.")
    parser.add_argument("json", nargs="?", default=None, help="Path to a JSON array of questions to import")
    parser.add_argument("--category-id", default=None, help="Category to assign to imported questions")
    parser.add_argument("--chunk-size", type=int, default=200, help="Insert chunk size (default 200)")
    parser.add_argument("--dry-run", action="store_true", help="Parse only, do not insert")
    parser.add_argument("--export", metavar="OUT", default=None, help="Write all questions to OUT as JSON")
    args = parser.parse_args()
    if args.export:
        run_export(Path(args.export))
    elif args.json:
        run_import(Path(args.json), category_id=args.category_id, chunk_size=args.chunk_size, dry_run=args.dry_run)
    else:
        parser.error("give a JSON file to import or --export OUT")
