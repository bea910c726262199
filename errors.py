# /errors.py
"""
Error taxonomy for the airdrop core.

Each error carries a short `kind` label and the HTTP status the routers answer
with. ParseFailure raised while loading the record list is recovered inside the
record store; everything else reaches the caller.
"""
from typing import Optional


class AirdropError(Exception):
    """Base class for every failure surfaced by the airdrop core."""
    kind = "unknown"
    status_code = 500
    default_message = "Unknown error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NotConnected(AirdropError):
    kind = "not_connected"
    status_code = 401
    default_message = "Please connect wallet first"


class RemoteUnavailable(AirdropError):
    kind = "remote_unavailable"
    status_code = 503
    default_message = "Failed to load data"


class ParseFailure(AirdropError):
    kind = "parse_failure"
    status_code = 422
    default_message = "Malformed persisted payload"


class CodecError(ParseFailure):
    default_message = "Ciphertext could not be decoded"


class UserDeclined(AirdropError):
    kind = "user_declined"
    status_code = 403
    default_message = "Transaction rejected by user"


class NotEligible(AirdropError):
    kind = "not_eligible"
    status_code = 403
    default_message = "You are not eligible for this airdrop"


class AlreadyClaimed(AirdropError):
    kind = "already_claimed"
    status_code = 409
    default_message = "Airdrop already claimed"


class RecordNotFound(AirdropError):
    kind = "record_not_found"
    status_code = 404
    default_message = "Airdrop record not found"


class StaleWrite(AirdropError):
    kind = "stale_write"
    status_code = 409
    default_message = "Airdrop records changed since they were read; retry the operation"


class OperationInProgress(AirdropError):
    kind = "operation_in_progress"
    status_code = 429
    default_message = "Another operation of this kind is still running"


class Unknown(AirdropError):
    """Wraps a remote error; the remote message is passed through unchanged."""
    kind = "unknown"
    status_code = 502
