"""
Bridge error taxonomy.

Every failure a bridge script can report maps onto one of these classes.
Fatal ones abort the run; ItemFailure is recorded per record and the batch
keeps going.
"""

from typing import Any, Dict, List, Optional


class BridgeError(Exception):
    """Base class for every error a bridge run reports to the operator"""


class MissingCredential(BridgeError):
    """A required API key or secret was neither in the environment nor entered"""

    def __init__(self, label: str, env_var: Optional[str] = None):
        self.label = label
        self.env_var = env_var
        hint = f" Set {env_var} or enter it when prompted." if env_var else ""
        super().__init__(f"{label} is required but was not provided.{hint}")


class OrganizationNotFound(BridgeError):
    """No Hudu company matched the entered name"""

    def __init__(self, company_name: str):
        self.company_name = company_name
        super().__init__(
            f"No company named '{company_name}' was found in Hudu. "
            "Verify the spelling of the company name and try again."
        )


class AmbiguousMatch(BridgeError):
    """More than one Hudu company matched the entered name"""

    def __init__(self, company_name: str, candidates: List[Dict[str, Any]]):
        self.company_name = company_name
        self.candidates = candidates
        super().__init__(
            f"{len(candidates)} companies in Hudu match '{company_name}'. "
            "Choose one explicitly or rename the duplicates."
        )


class MissingOrgMapping(BridgeError):
    """The company exists but its Action1 organization id (id_number) is blank"""

    def __init__(self, company_name: str, company_id: Any = None):
        self.company_name = company_name
        self.company_id = company_id
        super().__init__(
            f"Company '{company_name}' exists in Hudu but has no Action1 organization id. "
            "Populate the company's 'ID Number' field in Hudu with the Action1 org id."
        )


class TransportError(BridgeError):
    """Network failure, timeout, non-2xx status or unreadable response body"""


class SetupFailed(BridgeError):
    """A client session could not be configured"""


class ItemFailure(BridgeError):
    """A single record in a batch could not be processed"""

    def __init__(self, item: str, reason: str):
        self.item = item
        self.reason = reason
        super().__init__(f"{item}: {reason}")


class RunCancelled(BridgeError):
    """The operator declined a confirmation prompt"""
