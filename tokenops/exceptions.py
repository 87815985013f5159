class TokenOpsError(Exception):
    """Base class for precondition failures detected before any risky call."""


class MissingConfiguration(TokenOpsError):
    """Raised when required configuration values are not set."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(
            "Missing required configuration: "
            f"{', '.join(self.missing)}. Check your .env file."
        )


class RecordNotFound(TokenOpsError):
    """Raised when no deployment record exists for a network and contract type."""

    def __init__(self, network: str, contract_type: str, filepath):
        self.network = network
        self.contract_type = contract_type
        self.filepath = filepath
        super().__init__(
            f"No {contract_type} deployment record found for network '{network}' "
            f"(expected {filepath}). Deploy the contract first."
        )


class NotOwner(TokenOpsError):
    """Raised when the caller is not the owner required for a privileged call."""

    def __init__(self, owner: str, caller: str, action: str):
        self.owner = owner
        self.caller = caller
        super().__init__(
            f"{caller} is not the owner of this contract ({owner}); "
            f"only the owner can {action}."
        )


class ConfirmationTimeout(TokenOpsError):
    """Raised when the confirmation depth is not reached in time."""


class ConfirmationCancelled(TokenOpsError):
    """Raised when waiting for confirmations is cancelled."""


class DeploymentExists(TokenOpsError):
    """Raised when a deployment record already exists for a network and contract type."""

    def __init__(self, network: str, contract_type: str, filepath):
        self.network = network
        self.contract_type = contract_type
        self.filepath = filepath
        super().__init__(
            f"A {contract_type} deployment is already recorded for network '{network}' "
            f"at {filepath}. Upgrade it instead, or move the record aside manually."
        )
