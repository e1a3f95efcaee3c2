#!/usr/bin/env python3
"""
Create the standard documentation folder structure for one Hudu company.

Folders that already exist (same name and parent) are reused instead of
duplicated. A nested folder is skipped when its parent's id could not be
captured.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from bridge_engine import BridgeContext, RunReport, confirm, run_bridge, setup_logging
from bridge_errors import BridgeError, RunCancelled
from hudu_client import HuduClient

logger = logging.getLogger(__name__)


@dataclass
class FolderSpec:
    name: str
    description: str
    parent: Optional[str] = None


FOLDER_CATALOG = [
    FolderSpec("OnboardingDocumentation", "Client onboarding checklists, kickoff notes and sign-offs"),
    FolderSpec("NetworkDocumentation", "Network diagrams, VLANs, firewall rules and ISP details"),
    FolderSpec("ServerDocumentation", "Server builds, roles, and maintenance procedures"),
    FolderSpec("WorkstationDocumentation", "Workstation standards, imaging and deployment notes"),
    FolderSpec("CloudServices", "Microsoft 365, Azure and other cloud tenant documentation"),
    FolderSpec("LineOfBusinessApplications", "Line-of-business application install and support notes"),
    FolderSpec("BackupAndRecovery", "Backup jobs, retention policies and restore procedures"),
    FolderSpec("SecurityPolicies", "Security baselines, endpoint protection and access policies"),
    FolderSpec("VendorContacts", "Third-party vendors, support contracts and escalation contacts"),
    FolderSpec("StandardOperatingProcedures", "Recurring maintenance tasks and runbooks"),
    FolderSpec("PreOnboarding", "Discovery notes and information gathered before onboarding",
               parent="OnboardingDocumentation"),
]


def print_catalog(catalog: Sequence[FolderSpec]) -> None:
    for spec in catalog:
        if spec.parent:
            print(f"   - {spec.parent}/{spec.name}: {spec.description}")
        else:
            print(f"   - {spec.name}: {spec.description}")


def find_existing_folder(hudu: HuduClient, company_id: int, spec: FolderSpec,
                         parent_id: Optional[int]) -> Optional[Dict]:
    for folder in hudu.find_folders(company_id, spec.name):
        if folder.get("parent_folder_id") == parent_id:
            return folder
    return None


def provision_folders(hudu: HuduClient, company_id: int, catalog: Sequence[FolderSpec],
                      report: RunReport) -> Dict[str, int]:
    """
    Create every folder in the catalog, parents before children.

    Returns:
        Mapping of folder name to the Hudu folder id captured for it
    """
    folder_ids: Dict[str, int] = {}

    for spec in catalog:
        parent_id = None
        if spec.parent:
            parent_id = folder_ids.get(spec.parent)
            if parent_id is None:
                reason = f"parent folder '{spec.parent}' was not created, so its id is unknown"
                report.record_failure(spec.name, reason)
                print(f"   ✗ Skipped {spec.name}: {reason}")
                continue

        try:
            existing = find_existing_folder(hudu, company_id, spec, parent_id)
            if existing:
                folder_ids[spec.name] = existing["id"]
                report.record_skip(spec.name, f"already exists (id {existing['id']})")
                print(f"   • {spec.name} already exists (id {existing['id']})")
                continue

            folder = hudu.create_folder(company_id, spec.name, spec.description, parent_id)
            folder_id = folder.get("id")
            if folder_id is None:
                raise BridgeError("Hudu did not return a folder id")
        except BridgeError as e:
            report.record_failure(spec.name, str(e))
            print(f"   ✗ Failed to create {spec.name}: {e}")
            continue

        folder_ids[spec.name] = folder_id
        report.record_success(spec.name)
        logger.info(f"Created folder '{spec.name}' (id {folder_id}) for company {company_id}")
        print(f"   ✓ Created {spec.name} (id {folder_id})")

    return folder_ids


def create_folders(ctx: BridgeContext, report: RunReport) -> None:
    print(f"\nFolders to create for {ctx.company.name}:")
    print_catalog(FOLDER_CATALOG)

    if not confirm(f"\nCreate these {len(FOLDER_CATALOG)} folders?"):
        raise RunCancelled("operator declined to create the folders")

    provision_folders(ctx.hudu, ctx.company.id, FOLDER_CATALOG, report)


def main() -> int:
    setup_logging()
    return run_bridge("Create Hudu folders", create_folders, require_mapping=False)


if __name__ == "__main__":
    exit(main())
