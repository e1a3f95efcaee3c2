#!/usr/bin/env python3
"""
Export the Action1 endpoint inventory of one client to CSV.

The Action1 org id comes from the company's ID Number field in Hudu.
Endpoints without a name are skipped; the CSV is overwritten on every run.
"""

import csv
import logging
from pathlib import Path
from typing import List, Sequence

from bridge_engine import (
    BridgeContext,
    EndpointRecord,
    RunReport,
    ask,
    endpoint_records,
    run_bridge,
    setup_logging,
)

logger = logging.getLogger(__name__)

DEFAULT_CSV_NAME = "EndpointDetails.csv"

CSV_HEADERS = ["Name", "Brand", "Disk Size", "Serial Number", "Memory", "Operating System"]


def format_endpoint(record: EndpointRecord) -> str:
    return (f"{record.name} | {record.brand} | Disk: {record.disk_size or '-'} | "
            f"Serial: {record.serial_number or '-'} | RAM: {record.memory or '-'} | "
            f"OS: {record.operating_system or '-'}")


def write_endpoints_csv(records: Sequence[EndpointRecord], path: str) -> str:
    """Write endpoint records to CSV, replacing any existing file"""
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADERS)
        for r in records:
            writer.writerow([r.name, r.brand, r.disk_size, r.serial_number, r.memory, r.operating_system])

    logger.info(f"Endpoint inventory exported to {path}")
    return path


def collect_endpoints(ctx: BridgeContext, report: RunReport) -> List[EndpointRecord]:
    print(f"\n📥 Fetching endpoints for Action1 org {ctx.action1.org_id}...")
    records = endpoint_records(ctx.action1.list_endpoints(), report)
    print(f"   ✓ {len(records)} endpoints with a name")
    return records


def export_endpoints(ctx: BridgeContext, report: RunReport) -> None:
    default_path = ctx.config.csv_path or str(Path.cwd() / DEFAULT_CSV_NAME)
    csv_path = ask("CSV output path", default=default_path)

    records = collect_endpoints(ctx, report)
    for record in records:
        print(f"   {format_endpoint(record)}")

    try:
        write_endpoints_csv(records, csv_path)
    except OSError as e:
        report.record_failure(csv_path, f"could not write CSV: {e}")
        return

    for record in records:
        report.record_success(record.name)
    print(f"\n   ✓ Wrote {len(records)} endpoints to {csv_path}")


def main() -> int:
    setup_logging()
    return run_bridge("Export Action1 endpoints", export_endpoints, need_action1=True)


if __name__ == "__main__":
    exit(main())
