"""
Hudu-Action1 Bridge Engine
Shared plumbing for the bridge scripts: logging, configuration, credential
prompts, company resolution, session setup and the per-run report.

Every script follows the same path:
credentials -> company resolution -> session setup -> executor -> report.
"""

import getpass
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import yaml

from action1_client import Action1Client, DEFAULT_REGION, REGIONS
from bridge_errors import (
    AmbiguousMatch,
    BridgeError,
    ItemFailure,
    MissingCredential,
    MissingOrgMapping,
    OrganizationNotFound,
    SetupFailed,
)
from hudu_client import HuduClient

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"
DEFAULT_TIMEOUT = 30

HUDU_API_KEY_ENV = "HUDU_API_KEY"
ACTION1_API_KEY_ENV = "ACTION1_API_KEY"
ACTION1_API_SECRET_ENV = "ACTION1_API_SECRET"

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_PARTIAL = 2

SECRET_CONFIG_KEYS = {"api_key", "api_secret", "secret", "token", "password"}


# --- Logging ---
def setup_logging(log_path: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """Configure console logging, plus a UTF-8 log file when a path is given"""
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_path:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding='utf-8'))

    logging.basicConfig(
        level=level,
        format=log_format,
        handlers=handlers,
        force=True,
    )
    return logging.getLogger(__name__)


# --- Configuration Management ---
@dataclass
class Config:
    """Non-secret settings; every key is optional"""
    raw: Dict[str, Any] = field(default_factory=dict)

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def hudu_base_domain(self) -> Optional[str]:
        return self._section("hudu").get("base_domain")

    @property
    def action1_region(self) -> str:
        return self._section("action1").get("region") or DEFAULT_REGION

    @property
    def report_catalog(self) -> Optional[List[str]]:
        return self._section("action1").get("report_catalog")

    @property
    def browser(self) -> Optional[str]:
        return self._section("browser").get("name")

    @property
    def timeout(self) -> float:
        return self._section("http").get("timeout", DEFAULT_TIMEOUT)

    @property
    def csv_path(self) -> Optional[str]:
        return self._section("output").get("csv_path")

    @property
    def log_path(self) -> Optional[str]:
        return self._section("output").get("log_path")

    def validate(self) -> List[str]:
        """Validate configuration"""
        errors = []

        for section, values in self.raw.items():
            if values is not None and not isinstance(values, dict):
                errors.append(f"Section '{section}' must be a mapping")
                continue
            for key in (values or {}):
                if key in SECRET_CONFIG_KEYS:
                    errors.append(
                        f"{section}.{key}: secrets must not be stored in the config file; "
                        "use environment variables or the interactive prompt"
                    )
        if errors:
            return errors

        region = self._section("action1").get("region")
        if region and str(region).lower() not in {r.lower() for r in REGIONS}:
            errors.append(f"action1.region '{region}' is not one of: {', '.join(REGIONS)}")

        timeout = self._section("http").get("timeout", DEFAULT_TIMEOUT)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            errors.append("http.timeout must be a positive number of seconds")

        catalog = self.report_catalog
        if catalog is not None:
            if not isinstance(catalog, list) or not all(isinstance(p, str) and p for p in catalog):
                errors.append("action1.report_catalog must be a list of report paths")

        return errors


def load_config(path: Optional[str] = None) -> Config:
    """Load and validate configuration; a missing file means defaults"""
    path = path or os.environ.get("BRIDGE_CONFIG") or str(DEFAULT_CONFIG_PATH)
    if not os.path.exists(path):
        logger.info(f"No configuration file at {path}, using defaults")
        return Config()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError("Config YAML must be a mapping at the top level.")

    config = Config(raw=raw)
    errors = config.validate()

    if errors:
        error_msg = "Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
        logger.error(error_msg)
        raise ValueError(error_msg)

    logger.info(f"Configuration loaded from {path}")
    return config


# --- Data Models ---
@dataclass
class Credentials:
    """API secrets held in memory for one run"""
    hudu_api_key: str
    action1_api_key: Optional[str] = None
    action1_api_secret: Optional[str] = None

    def __repr__(self) -> str:
        def mask(value):
            return "'***'" if value else "None"
        return (f"Credentials(hudu_api_key={mask(self.hudu_api_key)}, "
                f"action1_api_key={mask(self.action1_api_key)}, "
                f"action1_api_secret={mask(self.action1_api_secret)})")


@dataclass
class Company:
    """Hudu company data model"""
    id: Any
    name: str
    id_number: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def org_id(self) -> str:
        """Action1 organization id stored in the Hudu ID Number field"""
        return self.id_number


@dataclass(frozen=True)
class EndpointRecord:
    """Snapshot of one Action1 managed endpoint"""
    name: str
    brand: str
    disk_size: str
    serial_number: str
    memory: str
    operating_system: str

    @classmethod
    def from_action1(cls, payload: Dict[str, Any]) -> "EndpointRecord":
        name = safe_str(payload.get("name"))
        if not name:
            raise ValueError("endpoint record has no name")
        return cls(
            name=name,
            brand=safe_str(payload.get("manufacturer")) or "Other",
            disk_size=safe_str(payload.get("disk")),
            serial_number=safe_str(payload.get("serial")),
            memory=safe_str(payload.get("RAM")),
            operating_system=safe_str(payload.get("OS")),
        )


def safe_str(x: Any) -> str:
    """Convert any value to a stripped string, treating None as empty"""
    if x is None:
        return ""
    return str(x).strip()


# --- Run State & Report ---
class RunState:
    START = "Start"
    CREDENTIALS_ACQUIRED = "CredentialsAcquired"
    ORG_RESOLVED = "OrgResolved"
    SESSION_CONFIGURED = "SessionConfigured"
    EXECUTING = "Executing"
    COMPLETED = "Completed"
    PARTIALLY_FAILED = "PartiallyFailed"
    ABORTED = "Aborted"

    TRANSITIONS = {
        START: {CREDENTIALS_ACQUIRED, ABORTED},
        CREDENTIALS_ACQUIRED: {ORG_RESOLVED, ABORTED},
        ORG_RESOLVED: {SESSION_CONFIGURED, ABORTED},
        SESSION_CONFIGURED: {EXECUTING, ABORTED},
        EXECUTING: {COMPLETED, PARTIALLY_FAILED, ABORTED},
    }

    TERMINAL = {COMPLETED, PARTIALLY_FAILED, ABORTED}


class RunReport:
    """Tracks run state and per-item outcomes, and renders the final summary"""

    def __init__(self, title: str):
        self.title = title
        self.state = RunState.START
        self.successes: List[str] = []
        self.skipped: List[Dict[str, str]] = []
        self.failures: List[ItemFailure] = []
        self.abort_reason: Optional[str] = None

    def transition(self, new_state: str) -> None:
        allowed = RunState.TRANSITIONS.get(self.state, set())
        if new_state not in allowed:
            raise RuntimeError(f"Illegal run state transition {self.state} -> {new_state}")
        logger.debug(f"Run state: {self.state} -> {new_state}")
        self.state = new_state

    def record_success(self, item: str) -> None:
        self.successes.append(item)

    def record_skip(self, item: str, reason: str) -> None:
        logger.warning(f"Skipped {item}: {reason}")
        self.skipped.append({"item": item, "reason": reason})

    def record_failure(self, item: str, reason: str) -> None:
        logger.error(f"Failed {item}: {reason}")
        self.failures.append(ItemFailure(item, reason))

    def finish(self) -> str:
        self.transition(RunState.PARTIALLY_FAILED if self.failures else RunState.COMPLETED)
        return self.state

    def abort(self, reason: str) -> None:
        if self.state in RunState.TERMINAL:
            raise RuntimeError(f"Run already finished ({self.state})")
        self.abort_reason = reason
        self.state = RunState.ABORTED

    @property
    def exit_code(self) -> int:
        if self.state == RunState.COMPLETED:
            return EXIT_OK
        if self.state == RunState.PARTIALLY_FAILED:
            return EXIT_PARTIAL
        return EXIT_ABORTED

    def generate_report(self) -> List[str]:
        """Generate report lines for terminal display"""
        lines = []

        lines.append("")
        lines.append("═" * 70)
        lines.append(f"📊 {self.title.upper()} - {self.state}")
        lines.append("═" * 70)

        if self.state == RunState.ABORTED:
            lines.append(f"│  Run aborted: {self.abort_reason}")
            lines.append("═" * 70)
            return lines

        lines.append("┌─ SUMMARY")
        lines.append(f"│  Succeeded: {len(self.successes)}")
        lines.append(f"│  Skipped: {len(self.skipped)}")
        lines.append(f"│  Failed: {len(self.failures)}")
        lines.append("└─")

        if self.skipped:
            lines.append("┌─ SKIPPED")
            for skip in self.skipped[:10]:
                lines.append(f"│  • {skip['item']}: {skip['reason']}")
            if len(self.skipped) > 10:
                lines.append(f"│  ... and {len(self.skipped) - 10} more")
            lines.append("└─")

        if self.failures:
            lines.append("┌─ FAILURES")
            for failure in self.failures:
                lines.append(f"│  ✗ {failure.item}: {failure.reason}")
            lines.append("└─")

        lines.append("═" * 70)
        return lines


# --- Prompts ---
def ask(question: str, default: Optional[str] = None, required: bool = False) -> str:
    """Prompt for a plain value, offering a default"""
    suffix = f" [{default}]" if default else ""
    while True:
        answer = input(f"{question}{suffix}: ").strip()
        if answer:
            return answer
        if default:
            return default
        if not required:
            return ""
        print("   A value is required.")


def confirm(question: str) -> bool:
    answer = input(f"{question} [y/N]: ").strip().lower()
    return answer in ("y", "yes")


def acquire_secret(label: str, env_var: Optional[str] = None) -> str:
    """Environment variable first, then a masked prompt. Never echoed or logged."""
    if env_var:
        value = os.environ.get(env_var, "").strip()
        if value:
            logger.info(f"{label} loaded from environment ({env_var})")
            return value

    value = getpass.getpass(f"Enter {label}: ").strip()
    if not value:
        raise MissingCredential(label, env_var)
    return value


def acquire_credentials(need_action1: bool = False) -> Credentials:
    """Collect the Hudu key and, optionally, the Action1 key and secret"""
    creds = Credentials(hudu_api_key=acquire_secret("Hudu API key", HUDU_API_KEY_ENV))
    if need_action1:
        creds.action1_api_key = acquire_secret("Action1 API key", ACTION1_API_KEY_ENV)
        creds.action1_api_secret = acquire_secret("Action1 API secret", ACTION1_API_SECRET_ENV)
    return creds


# --- Company Resolution ---
def company_from_payload(payload: Dict[str, Any], require_mapping: bool = True) -> Company:
    company = Company(
        id=payload.get("id"),
        name=safe_str(payload.get("name")),
        id_number=safe_str(payload.get("id_number")),
        raw=payload,
    )
    if require_mapping and not company.id_number:
        raise MissingOrgMapping(company.name, company.id)
    return company


def resolve_company(hudu: HuduClient, company_name: str, require_mapping: bool = True) -> Company:
    """
    Resolve a company name to exactly one Hudu company.

    Raises OrganizationNotFound for zero matches, AmbiguousMatch for several,
    MissingOrgMapping when the Action1 org id is required but blank, and lets
    TransportError from the lookup propagate.
    """
    name = (company_name or "").strip()
    if not name:
        raise OrganizationNotFound(company_name or "")

    matches = hudu.find_companies_by_name(name)
    if not matches:
        raise OrganizationNotFound(name)
    if len(matches) > 1:
        raise AmbiguousMatch(name, matches)

    company = company_from_payload(matches[0], require_mapping)
    logger.info(f"Resolved '{name}' to Hudu company {company.id} (id_number={company.id_number or '-'})")
    return company


def resolve_company_interactive(hudu: HuduClient, company_name: str,
                                require_mapping: bool = True) -> Company:
    """resolve_company, letting the operator pick when several companies share the name"""
    try:
        return resolve_company(hudu, company_name, require_mapping)
    except AmbiguousMatch as e:
        print(f"\n⚠ {e}")
        for i, candidate in enumerate(e.candidates, 1):
            print(f"   {i}. {candidate.get('name')} "
                  f"(Hudu id {candidate.get('id')}, ID Number: {candidate.get('id_number') or '-'})")
        choice = ask("Select a company by number (blank to abort)")
        if not choice.isdigit() or not 1 <= int(choice) <= len(e.candidates):
            raise
        return company_from_payload(e.candidates[int(choice) - 1], require_mapping)


# --- Session Setup ---
def configure_hudu_session(base_domain: str, api_key: str, timeout: float = DEFAULT_TIMEOUT) -> HuduClient:
    """Build a Hudu client from a base domain such as acme.huducloud.com"""
    domain = (base_domain or "").strip()
    if not domain:
        raise SetupFailed("A Hudu base domain is required (e.g. yourcompany.huducloud.com)")
    domain = domain.replace("https://", "").replace("http://", "").strip("/")
    if domain.endswith("/api/v1"):
        domain = domain[: -len("/api/v1")]
    return HuduClient(f"https://{domain}/api/v1", api_key, timeout=timeout)


def configure_action1_session(credentials: Credentials, org_id: str, region: str,
                              timeout: float = DEFAULT_TIMEOUT,
                              authenticate: bool = True) -> Action1Client:
    """Create the Action1 session for one org; authentication failures are fatal"""
    if not org_id:
        raise SetupFailed("An Action1 organization id is required")
    client = Action1Client(
        region=region,
        org_id=org_id,
        api_key=credentials.action1_api_key,
        api_secret=credentials.action1_api_secret,
        timeout=timeout,
    )
    if authenticate:
        client.authenticate()
    return client


# --- Endpoint helpers ---
def endpoint_records(payloads: Iterable[Dict[str, Any]],
                     report: Optional[RunReport] = None) -> List[EndpointRecord]:
    """Map Action1 payloads to EndpointRecords, skipping any without a name"""
    records = []
    for index, payload in enumerate(payloads, 1):
        try:
            records.append(EndpointRecord.from_action1(payload))
        except ValueError as e:
            item = f"endpoint #{index} (id {payload.get('id', '?')})"
            if report is not None:
                report.record_skip(item, str(e))
            else:
                logger.warning(f"Skipped {item}: {e}")
    return records


# --- Run orchestration ---
@dataclass
class BridgeContext:
    """Everything an executor needs, passed explicitly"""
    config: Config
    company: Company
    hudu: HuduClient
    action1: Optional[Action1Client] = None


def run_bridge(title: str, executor: Callable[[BridgeContext, RunReport], None], *,
               config: Optional[Config] = None, need_action1: bool = False,
               authenticate_action1: bool = True, require_mapping: bool = True) -> int:
    """
    Run one bridge script end to end and return its exit code.

    Args:
        title: Banner shown to the operator
        executor: Callable doing the script's actual work
        config: Preloaded configuration (loaded from disk if None)
        need_action1: Whether an Action1 session is set up for the executor
        authenticate_action1: Whether that session needs API credentials
        require_mapping: Whether the company must carry an Action1 org id
    """
    report = RunReport(title)

    print("=" * 60)
    print(title.upper())
    print("=" * 60)

    try:
        if config is None:
            try:
                config = load_config()
            except ValueError as e:
                raise SetupFailed(str(e)) from e

        credentials = acquire_credentials(need_action1=need_action1 and authenticate_action1)
        report.transition(RunState.CREDENTIALS_ACQUIRED)

        base_domain = ask("Hudu base domain", default=config.hudu_base_domain, required=True)
        hudu = configure_hudu_session(base_domain, credentials.hudu_api_key, timeout=config.timeout)

        company_name = ask("Company name", required=True)
        company = resolve_company_interactive(hudu, company_name,
                                              require_mapping=require_mapping or need_action1)
        print(f"   ✓ Company: {company.name} (Hudu id {company.id}, Action1 org {company.org_id or '-'})")
        report.transition(RunState.ORG_RESOLVED)

        action1 = None
        if need_action1:
            region = ask("Action1 region", default=config.action1_region)
            action1 = configure_action1_session(credentials, company.org_id, region,
                                                timeout=config.timeout,
                                                authenticate=authenticate_action1)
        report.transition(RunState.SESSION_CONFIGURED)

        report.transition(RunState.EXECUTING)
        executor(BridgeContext(config=config, company=company, hudu=hudu, action1=action1), report)
        report.finish()

    except BridgeError as e:
        logger.error(f"{type(e).__name__}: {e}")
        report.abort(str(e))
    except KeyboardInterrupt:
        print()
        report.abort("interrupted by operator")

    for line in report.generate_report():
        print(line)
    return report.exit_code
