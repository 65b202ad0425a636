"""
Import already-extracted phrases for an episode.

Reads a CSV with columns `phrase`, `translation` and optionally
`context` and `confidence_score`, drops blank and duplicate rows, and
stores the rest as one extraction for the episode. Study decks for that
episode are built from these phrases.

Usage:
    python -m scripts.data.import_phrases data/episode_01.csv --episode rtp-ep-01
    python -m scripts.data.import_phrases data/episode_01.csv --episode rtp-ep-01 --dry-run
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from legendas.fsrs.database import SqlAlchemyStudyStore, get_engine, get_session_factory, init_db
from legendas.schemas import PhraseRecord

# ---- Config ----
PHRASE_COL = "phrase"
TRANSLATION_COL = "translation"
OPTIONAL_COLS = ["context", "confidence_score"]
# ----------------


def normalize(s: pd.Series) -> pd.Series:
    s = s.astype(str).str.strip()
    # collapse multiple spaces
    s = s.str.replace(r"\s+", " ", regex=True)
    return s


def load_phrases(path: Path) -> tuple[list[PhraseRecord], int]:
    """
    Load and clean phrase rows from a CSV.

    Returns:
        (rows ready for import, number of rows skipped)
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = {PHRASE_COL, TRANSLATION_COL} - set(df.columns)
    if missing:
        raise ValueError(f"{path} is missing required column(s): {', '.join(sorted(missing))}")

    total = len(df)
    df[PHRASE_COL] = normalize(df[PHRASE_COL])
    df[TRANSLATION_COL] = normalize(df[TRANSLATION_COL])
    df = df[(df[PHRASE_COL] != "") & (df[TRANSLATION_COL] != "")]
    df = df.drop_duplicates(subset=[PHRASE_COL], keep="first")

    columns = [PHRASE_COL, TRANSLATION_COL] + [c for c in OPTIONAL_COLS if c in df.columns]
    df = df[columns].copy()
    if "confidence_score" in df.columns:
        df["confidence_score"] = pd.to_numeric(df["confidence_score"], errors="coerce")
        df["confidence_score"] = df["confidence_score"].astype(object).where(df["confidence_score"].notna(), None)

    rows = []
    for record in df.to_dict(orient="records"):
        try:
            rows.append(PhraseRecord(**record))
        except ValidationError as e:
            print(f"  Skipping {record[PHRASE_COL]!r}: {e.errors()[0]['msg']}")
    return rows, total - len(rows)


async def import_phrases(episode_id: str, rows: list[PhraseRecord]) -> int:
    engine = get_engine()
    try:
        await init_db(engine)
        store = SqlAlchemyStudyStore(get_session_factory(engine))
        phrases = await store.insert_extraction(episode_id, rows, source="csv")
        return len(phrases)
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Import extracted phrases for an episode")
    parser.add_argument("csv_path", type=Path, help="CSV file with phrase/translation columns")
    parser.add_argument("--episode", required=True, help="Episode id the phrases belong to")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and report without writing to the database"
    )
    args = parser.parse_args()

    rows, skipped = load_phrases(args.csv_path)
    print(f"Loaded {len(rows)} phrases from {args.csv_path} ({skipped} blank or duplicate rows skipped)")

    if not rows:
        print("Nothing to import.")
        return
    if args.dry_run:
        for row in rows[:5]:
            print(f"  {row.phrase} → {row.translation}")
        print("\nDry run: no changes made.")
        return

    count = asyncio.run(import_phrases(args.episode, rows))
    print(f"✓ Imported {count} phrases for episode {args.episode}")


if __name__ == "__main__":
    main()
