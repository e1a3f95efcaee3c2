#!/usr/bin/env python3
"""
Open the standard Action1 console reports for one client.

This script will:
1. Resolve the company in Hudu and read its Action1 org id (ID Number field)
2. Build one console URL per report template, scoped with &org=<org id>
3. After confirmation, open every URL in the browser
"""

import logging
import webbrowser
from typing import List, Optional, Sequence

from action1_client import DEFAULT_REGION, region_urls
from bridge_engine import BridgeContext, RunReport, confirm, run_bridge, setup_logging
from bridge_errors import RunCancelled

logger = logging.getLogger(__name__)

DETAIL_QUERY = "details=yes&from=0&limit=100&live_only=no"

# Console report ids, in the order they are opened. Only web_browsers is a
# confirmed Action1 id; the rest are placeholders to check against the tenant
# and replace through action1.report_catalog in config.yaml.
REPORT_CATALOG = [
    f"web_browsers_1635330143409/summary?{DETAIL_QUERY}",
    f"installed_software_1635264799139/summary?{DETAIL_QUERY}",
    f"installed_updates_1635264799141/summary?{DETAIL_QUERY}",
    f"missing_updates_1635264799140/summary?{DETAIL_QUERY}",
    f"windows_services_1635330143410/summary?{DETAIL_QUERY}",
    f"startup_programs_1635330143411/summary?{DETAIL_QUERY}",
    f"local_users_1635330143412/summary?{DETAIL_QUERY}",
    f"local_groups_1635330143413/summary?{DETAIL_QUERY}",
    f"shared_folders_1635330143414/summary?{DETAIL_QUERY}",
    f"hardware_inventory_1635330143415/summary?{DETAIL_QUERY}",
    f"disk_drives_1635330143416/summary?{DETAIL_QUERY}",
    f"network_adapters_1635330143417/summary?{DETAIL_QUERY}",
    f"antivirus_status_1635330143418/summary?{DETAIL_QUERY}",
    f"bitlocker_status_1635330143419/summary?{DETAIL_QUERY}",
    f"reboot_required_1635330143420/summary?{DETAIL_QUERY}",
]


def build_report_urls(org_id: str, catalog: Optional[Sequence[str]] = None,
                      region: str = DEFAULT_REGION) -> List[str]:
    """Append &org=<org_id> to every report template, keeping catalog order"""
    console = region_urls(region)["console"]
    urls = []
    for template in catalog or REPORT_CATALOG:
        separator = "&" if "?" in template else "?"
        urls.append(f"{console}/reports/{template}{separator}org={org_id}")
    return urls


def open_urls(urls: Sequence[str], report: RunReport, browser: Optional[str] = None) -> None:
    """Hand each URL to the browser; a failed launch is recorded and the rest still open"""
    for url in urls:
        try:
            launcher = webbrowser.get(browser) if browser else webbrowser.get()
            if not launcher.open(url, new=2):
                raise webbrowser.Error("browser reported the URL was not opened")
            report.record_success(url)
            print(f"   ✓ Opened {url}")
        except (webbrowser.Error, OSError) as e:
            report.record_failure(url, str(e))
            print(f"   ✗ Failed to open {url}: {e}")


def open_reports(ctx: BridgeContext, report: RunReport) -> None:
    urls = build_report_urls(ctx.company.org_id, ctx.config.report_catalog, ctx.action1.region)

    print(f"\nReports for {ctx.company.name} (Action1 org {ctx.company.org_id}):")
    for i, url in enumerate(urls, 1):
        print(f"   {i:>2}. {url}")

    if not confirm(f"\nOpen these {len(urls)} reports in the browser?"):
        raise RunCancelled("operator declined to open the reports")

    open_urls(urls, report, browser=ctx.config.browser)


def main() -> int:
    setup_logging()
    return run_bridge("Open Action1 reports", open_reports,
                      need_action1=True, authenticate_action1=False)


if __name__ == "__main__":
    exit(main())
