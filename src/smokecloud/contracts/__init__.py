"""Public contracts for the SmokeCloud client."""
from smokecloud.contracts.credentials import (
    Credential,
    DelegatedCredential,
    KeyCredential,
    PasswordCredential,
    TokenResponse,
    UserOrgInfo,
    credential_id,
    parse_credential,
)
from smokecloud.contracts.data import (
    CurrentUsage,
    DataVector,
    MoneyTotal,
    PublicRunningStatus,
    RunBilling,
    RunData,
    Snapshot,
    User,
)
from smokecloud.contracts.run import (
    InstanceType,
    Phase,
    PresenceAbsent,
    PresenceEmpty,
    PresenceFull,
    PresenceProgress,
    ProgressInfo,
    RunEntry,
    RunFilter,
    SimpleProgress,
    SubmitStartParams,
    cores_to_instance,
    to_simple_progress,
)

__all__ = [
    "Credential", "KeyCredential", "PasswordCredential", "DelegatedCredential",
    "TokenResponse", "UserOrgInfo", "credential_id", "parse_credential",
    "CurrentUsage", "DataVector", "MoneyTotal", "PublicRunningStatus",
    "RunBilling", "RunData", "Snapshot", "User",
    "InstanceType", "Phase", "PresenceAbsent", "PresenceEmpty", "PresenceFull",
    "PresenceProgress", "ProgressInfo", "RunEntry", "RunFilter", "SimpleProgress",
    "SubmitStartParams", "cores_to_instance", "to_simple_progress",
]
