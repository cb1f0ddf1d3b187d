"""Exception hierarchy for recon_audit.

Four failure categories surface to callers:
- validation / eligibility rejections (user-correctable, no state change)
- external service failures (AI analysis, document digestion)
- persistence write failures
- local store capacity exhaustion (user-actionable: delete old records)
"""


class ReconAuditError(Exception):
    """Base class for all recon_audit errors."""


class EligibilityError(ReconAuditError):
    """A requested program/status is not allowed for the vehicle."""

    def __init__(self, status: str, reason: str):
        self.status = status
        self.reason = reason
        super().__init__(f"Vehicle ineligible for {status}: {reason}")


class CaseNotFoundError(ReconAuditError):
    """No case exists with the given id."""

    def __init__(self, case_id: str):
        self.case_id = case_id
        super().__init__(f"Case {case_id} not found")


class AnalysisError(ReconAuditError):
    """The AI analysis collaborator failed; nothing was persisted."""


class DocumentDigestionError(ReconAuditError):
    """A standards document could not be digested into usable rule text."""


class StorageError(ReconAuditError):
    """Generic record store failure."""


class StorageWriteError(StorageError):
    """A write to the record store failed; the user action must be aborted."""


class StorageQuotaExceededError(StorageError):
    """The local store ran out of capacity.

    Distinct from StorageWriteError because it is recoverable by deleting
    old records.
    """

    def __init__(self, message: str = "", *, used_bytes: int = 0, quota_bytes: int = 0):
        self.used_bytes = used_bytes
        self.quota_bytes = quota_bytes
        super().__init__(
            message
            or "Local storage is full. Delete old cases or configure cloud storage."
        )
