"""Exceptions raised by IP Registry Tools."""


class RegistryToolsError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(RegistryToolsError):
    """A required setting is missing or invalid."""


class DeploymentError(RegistryToolsError):
    """Deployment file, chain entry or contract address is missing."""


class RegistryNotFoundError(RegistryToolsError):
    """The franchise has no IP asset registry."""

    def __init__(self, franchise_id: int):
        super().__init__(f"IP asset registry not found for franchise id: {franchise_id}")
        self.franchise_id = franchise_id


class InvalidBlockTypeError(RegistryToolsError, ValueError):
    """Unknown IP asset block type."""

    def __init__(self, block_type: object):
        super().__init__(f"Invalid IP asset block type: {block_type!r}")
        self.block_type = block_type


class DuplicateRecordError(RegistryToolsError):
    """Two pending records share a name within the same block type."""


class UnresolvedReferenceError(RegistryToolsError):
    """A relationship points at a record that is missing or has no id."""


class ChunkSubmissionError(RegistryToolsError):
    """A multicall chunk failed to submit or reverted."""

    def __init__(self, message: str, chain_id: int | None = None, chunk_index: int | None = None):
        super().__init__(message)
        self.chain_id = chain_id
        self.chunk_index = chunk_index


class ReceiptNotFoundError(RegistryToolsError):
    """The receipt for a transaction hash could not be fetched."""

    def __init__(self, tx_hash: str, reason: str | None = None):
        message = f"Receipt not found for tx {tx_hash}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.tx_hash = tx_hash


class EventDecodeError(RegistryToolsError):
    """A log matched a known event but its payload did not fit the event shape."""


class ReconciliationError(RegistryToolsError):
    """Confirmed events could not be mapped back to submitted entries."""


class TransactionFailedError(RegistryToolsError):
    """A mined transaction reverted."""

    def __init__(self, tx_hash: str):
        super().__init__(f"Transaction {tx_hash} reverted")
        self.tx_hash = tx_hash
