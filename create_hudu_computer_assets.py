#!/usr/bin/env python3
"""
Create Hudu computer assets from the Action1 endpoint inventory.

This script will:
1. Resolve the company in Hudu and read its Action1 org id
2. Fetch every managed endpoint of that org from Action1
3. Find or create the "Computer Assets" asset layout (never duplicated)
4. Create one asset per endpoint under the company, skipping names that already exist

Each asset is processed independently: a failed create is logged and the
remaining endpoints are still processed.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Sequence

from bridge_engine import (
    EXIT_ABORTED,
    BridgeContext,
    EndpointRecord,
    RunReport,
    ask,
    endpoint_records,
    load_config,
    run_bridge,
    setup_logging,
)
from bridge_errors import BridgeError, SetupFailed
from hudu_client import HuduClient

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path(__file__).parent / "huduComputerAssetCreation.log"

ASSET_LAYOUT_NAME = "Computer Assets"

ASSET_LAYOUT_FIELDS = [
    {"label": "Brand", "field_type": "Text", "position": 1, "show_in_list": True},
    {"label": "Disk Size", "field_type": "Text", "position": 2, "show_in_list": False},
    {"label": "Serial Number", "field_type": "Text", "position": 3, "show_in_list": True},
    {"label": "Memory", "field_type": "Text", "position": 4, "show_in_list": False},
    {"label": "Operating System", "field_type": "Text", "position": 5, "show_in_list": True},
]


def asset_layout_definition() -> Dict[str, Any]:
    return {
        "name": ASSET_LAYOUT_NAME,
        "icon": "fas fa-desktop",
        "color": "#00adef",
        "icon_color": "#ffffff",
        "include_passwords": True,
        "include_photos": True,
        "include_comments": True,
        "include_files": True,
        "active": True,
        "fields": [dict(f) for f in ASSET_LAYOUT_FIELDS],
    }


def ensure_asset_layout(hudu: HuduClient) -> int:
    """Return the id of the Computer Assets layout, creating it only when absent"""
    layout = hudu.find_asset_layout(ASSET_LAYOUT_NAME)
    if layout:
        print(f"   ✓ Using existing asset layout '{ASSET_LAYOUT_NAME}' (id {layout['id']})")
        return layout["id"]

    layout = hudu.create_asset_layout(asset_layout_definition())
    layout_id = layout.get("id")
    if layout_id is None:
        raise SetupFailed(f"Hudu did not return an id for the '{ASSET_LAYOUT_NAME}' asset layout")
    logger.info(f"Created asset layout '{ASSET_LAYOUT_NAME}' with id {layout_id}")
    print(f"   ✓ Created asset layout '{ASSET_LAYOUT_NAME}' (id {layout_id})")
    return layout_id


def asset_fields(record: EndpointRecord) -> Dict[str, str]:
    """Map an endpoint onto the layout's fields (keys are snake_cased labels)"""
    return {
        "brand": record.brand,
        "disk_size": record.disk_size,
        "serial_number": record.serial_number,
        "memory": record.memory,
        "operating_system": record.operating_system,
    }


def create_assets(hudu: HuduClient, company_id: int, layout_id: int,
                  records: Sequence[EndpointRecord], report: RunReport) -> None:
    for i, record in enumerate(records, 1):
        try:
            if hudu.find_assets(company_id, layout_id, record.name):
                report.record_skip(record.name, "asset already exists in Hudu")
                continue
            asset = hudu.create_asset(company_id, layout_id, record.name, asset_fields(record))
            report.record_success(record.name)
            logger.info(f"Created asset '{record.name}' (id {asset.get('id')}) for company {company_id}")
            print(f"   ✓ [{i}/{len(records)}] Created: {record.name}")
        except BridgeError as e:
            report.record_failure(record.name, str(e))
            print(f"   ✗ [{i}/{len(records)}] Failed: {record.name}: {e}")


def create_computer_assets(ctx: BridgeContext, report: RunReport) -> None:
    print(f"\n📥 Fetching endpoints for Action1 org {ctx.action1.org_id}...")
    records = endpoint_records(ctx.action1.list_endpoints(), report)
    print(f"   ✓ {len(records)} endpoints to document")

    layout_id = ensure_asset_layout(ctx.hudu)

    print(f"\n🔄 Creating assets for {ctx.company.name}...")
    create_assets(ctx.hudu, ctx.company.id, layout_id, records, report)


def main() -> int:
    setup_logging()
    try:
        config = load_config()
    except ValueError as e:
        print(f"❌ {e}")
        return EXIT_ABORTED

    log_path = ask("Log file path", default=config.log_path or str(DEFAULT_LOG_PATH))
    try:
        setup_logging(log_path)
    except OSError as e:
        print(f"❌ Cannot write log file {log_path}: {e}")
        return EXIT_ABORTED
    logger.info(f"Logging to {log_path}")

    return run_bridge("Create Hudu computer assets", create_computer_assets,
                      config=config, need_action1=True)


if __name__ == "__main__":
    exit(main())
