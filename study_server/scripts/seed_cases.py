#!/usr/bin/env python3
"""
Seed the `cases` collection from the study case list CSV.

CSV header: Basename,GroundTruth,Predict,Likelihood,IsCorrect
Rows become documents CASE-0001, CASE-0002, ... in file order:
  { case_id, basename, ground_truth, ai_prediction, ai_confidence, ai_correct, has_prediction }

Writes to the store selected by DATA_SOURCE (.env), so run it with the same
settings as the server. With DATA_SOURCE=memory nothing survives the process;
use json or firebase.

Usage:
  From repo root:
    python -m study_server.scripts.seed_cases --csv MRMC_study_200cases.csv
  Firestore with an explicit key:
    python -m study_server.scripts.seed_cases --csv cases.csv --data-source firebase --credentials secrets/firebase-credentials.json
"""

import argparse
import csv
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterable, List

from ..config import get_config
from ..services import StoreCasePoolProvider
from ..state import create_document_store

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).resolve().parent.parent.parent


def format_case_id(index: int) -> str:
    """1-based row index -> CASE-0001."""
    return f"CASE-{index:04d}"


def _likelihood(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_case_rows(lines: Iterable[str]) -> List[Dict]:
    """Parse CSV lines (header included) into case documents."""
    reader = csv.DictReader(lines)
    cases = []
    for i, row in enumerate(reader, start=1):
        predict = (row.get("Predict") or "").strip()
        cases.append({
            "case_id": format_case_id(i),
            "basename": (row.get("Basename") or "").strip(),
            "ground_truth": (row.get("GroundTruth") or "").strip(),
            "ai_prediction": predict,
            "ai_confidence": _likelihood(row.get("Likelihood")),
            "ai_correct": (row.get("IsCorrect") or "").strip() == "correct",
            "has_prediction": bool(predict),
        })
    return cases


def main():
    parser = argparse.ArgumentParser(description="Seed the cases collection from a CSV file")
    parser.add_argument("--csv", required=True, metavar="PATH", help="Case list CSV")
    parser.add_argument(
        "--data-source",
        choices=("memory", "json", "firebase"),
        default=None,
        help="Override DATA_SOURCE from the environment",
    )
    parser.add_argument(
        "--credentials",
        type=str,
        default=None,
        metavar="PATH",
        help="Path to Firebase service account JSON key. Else uses FIREBASE_CREDENTIALS_PATH / GOOGLE_APPLICATION_CREDENTIALS.",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    csv_path = Path(args.csv)
    if not csv_path.is_absolute():
        csv_path = (Path.cwd() / csv_path).resolve()
    if not csv_path.is_file():
        logger.error("CSV not found: %s", csv_path)
        sys.exit(1)

    config = get_config()
    if args.data_source:
        config = replace(config, data_source=args.data_source)
    if args.credentials:
        cred_path = Path(args.credentials)
        if not cred_path.is_absolute():
            cred_path = (_REPO_ROOT / cred_path).resolve()
        config = replace(config, firebase_credentials_path=cred_path)
    if config.data_source == "memory":
        logger.error("DATA_SOURCE=memory: cases would be lost when this script exits. Use --data-source json or firebase.")
        sys.exit(1)

    with open(csv_path, newline="", encoding="utf-8-sig") as f:
        cases = parse_case_rows(f)
    logger.info("Found %d cases in %s", len(cases), csv_path.name)

    store = create_document_store(config)
    written = StoreCasePoolProvider(store).put_cases(cases)
    logger.info("Done. Seeded %d cases into %s.", written, config.data_source)


if __name__ == "__main__":
    main()
