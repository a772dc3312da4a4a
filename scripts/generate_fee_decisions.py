"""Regenerate fee decision drafts for heads of family without going through Flask.

Usage: python scripts/generate_fee_decisions.py [--from 2022-01-01] 12 34

Without --from, decisions are regenerated for the last five years.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from src.evaka_service.evaka_service.common.datetime_utils import parse_iso_date
from src.evaka_service.evaka_service.common.logger import configure_logging
from src.evaka_service.evaka_service.container import build_container
from src.evaka_service.evaka_service.core.enums import Role
from src.evaka_service.evaka_service.settings import get_settings_module


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--from", dest="from_date", type=parse_iso_date, default=None)
    parser.add_argument("head_of_family_ids", type=int, nargs="+")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(level=getattr(settings, "LOG_LEVEL", "INFO"), json_out=bool(getattr(settings, "LOG_JSON", False)))
    container = build_container(db_config=settings.DB_CONFIG)

    for head_of_family_id in args.head_of_family_ids:
        drafts = container.fee_decision_service.generate_drafts(
            current_role=Role.ADMIN, head_of_family_id=head_of_family_id, from_date=args.from_date
        )
        print(f"{head_of_family_id}: {len(drafts)} drafts")


if __name__ == "__main__":
    main()
