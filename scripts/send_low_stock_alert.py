#!/usr/bin/env python3
"""
Run one low-stock sweep now and email the result to ALERT_EMAIL.

Usage:
  python scripts/send_low_stock_alert.py [--threshold N]
  # Requires DATABASE_URL, RESEND_API_KEY, EMAIL_FROM and ALERT_EMAIL in .env (or export)
"""
import argparse
import asyncio
import os
import sys

from dotenv import load_dotenv

# Load .env from project root
_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(_root, ".env"))

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.exceptions import AppError
from app.database import AsyncSessionLocal, close_db
from app.services.email_service import EmailNotifier
from app.services.low_stock_service import LowStockService


async def sweep(threshold):
    try:
        async with AsyncSessionLocal() as db:
            return await LowStockService.run_sweep(db, EmailNotifier(), threshold=threshold)
    finally:
        await close_db()


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--threshold", type=int, default=None)
    args = parser.parse_args()

    try:
        report = asyncio.run(sweep(args.threshold))
    except AppError as e:
        print(f"FAILED: {e.code}: {e.message}")
        sys.exit(1)

    print(report.message)
    for product in report.products:
        print(f"  {product.name} (Stock: {product.stock})")


if __name__ == "__main__":
    main()
