import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse

import structlog

from retreat_booking.db.engine import engine
from retreat_booking.db.readers.ledger import get_ledger_drift
from retreat_booking.logging_config import setup_logging
from retreat_booking.services.payments import repair_ledger_drift

setup_logging()
logger = structlog.get_logger(__name__)


def main(dry_run: bool = False) -> None:
    """
    Re-mirror booking-income ledger entries that drifted from paid_amount.

    Safe to run repeatedly; a clean ledger is a no-op.

    Args:
        dry_run: Only report drifted reservations, write nothing
    """
    logger.info("ledger_repair_started", dry_run=dry_run)

    try:
        if dry_run:
            with engine.connect() as conn:
                drifted = get_ledger_drift(conn)
            for row in drifted:
                logger.info(
                    "ledger_drift_found",
                    reservation_id=row["id"],
                    paid_amount=str(row["paid_amount"]),
                    entry_amount=str(row["entry_amount"]) if row["entry_amount"] is not None else None,
                )
            logger.info("ledger_repair_completed", drifted=len(drifted), repaired=0)
            return

        repaired = repair_ledger_drift(engine)
        logger.info("ledger_repair_completed", repaired=len(repaired), reservation_ids=repaired)
    except Exception:
        logger.exception("ledger_repair_failed")
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Repair booking-income ledger drift.")
    parser.add_argument("--dry-run", action="store_true", help="Report drift without writing")
    args = parser.parse_args()

    main(dry_run=args.dry_run)
