"""Certificate lifecycle audit trail with tamper-evident chaining."""

import hashlib
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Audit event types."""
    CERTIFICATE_ISSUED = "certificate_issued"
    CERTIFICATE_RENEWED = "certificate_renewed"
    CERTIFICATE_REUSED = "certificate_reused"
    CERTIFICATE_GENERATION_FAILED = "certificate_generation_failed"
    CERTIFICATE_DOWNLOADED = "certificate_downloaded"
    CERTIFICATE_DOWNLOAD_FAILED = "certificate_download_failed"


@dataclass
class AuditEvent:
    """
    Tamper-evident audit event.

    Includes chain hash to detect tampering.
    """
    event_id: str
    event_type: EventType
    timestamp: datetime
    service_id: str
    target: Optional[str]  # What was affected
    action: str
    result: str  # success, failure
    details: Dict[str, Any] = field(default_factory=dict)
    previous_hash: Optional[str] = None
    event_hash: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary (without event_hash)."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "service_id": self.service_id,
            "target": self.target,
            "action": self.action,
            "result": self.result,
            "details": self.details,
            "previous_hash": self.previous_hash,
        }

    def compute_hash(self) -> str:
        """Compute event hash for chaining."""
        return _hash_record(self.to_dict())


def _hash_record(data: dict) -> str:
    canonical = json.dumps(data, sort_keys=True)
    return hashlib.sha256(canonical.encode()).hexdigest()


class AuditLogger:
    """
    Audit logger for certificate lifecycle events.

    Each event includes hash of previous event, creating a chain
    that makes tampering detectable.
    """

    def __init__(
        self,
        service_id: str,
        log_file: Optional[Path] = None,
        enable_chaining: bool = True
    ):
        """
        Initialize audit logger.

        Args:
            service_id: Identity of this service (certificate hostname)
            log_file: Path to audit log file (optional)
            enable_chaining: Enable hash chaining for tamper detection
        """
        self.service_id = service_id
        self.log_file = Path(log_file) if log_file else None
        self.enable_chaining = enable_chaining

        self._last_hash: Optional[str] = None
        self._event_count = 0
        self._unterminated = False

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            self._last_hash = self._read_last_hash()

    def _read_last_hash(self) -> Optional[str]:
        """
        Continue the chain of an existing log file.

        Unreadable lines (e.g. a record cut short by a crash) are skipped;
        the chain continues from the last intact record.
        """
        if not self.log_file.exists():
            return None

        last_hash = None
        try:
            with open(self.log_file, 'r') as f:
                for line_number, line in enumerate(f, start=1):
                    # New records must not be glued onto a cut-off last line
                    self._unterminated = not line.endswith('\n')
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        record = json.loads(line)
                    except ValueError as e:
                        logger.error(f"Skipping unreadable audit record at {self.log_file}:{line_number}: {e}")
                        continue
                    if isinstance(record, dict) and record.get("event_hash"):
                        last_hash = record["event_hash"]
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read audit log {self.log_file}: {e}")
        return last_hash

    def log_event(
        self,
        event_type: EventType,
        action: str,
        result: str,
        target: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> AuditEvent:
        """
        Log an audit event.

        Args:
            event_type: Type of event
            action: Action description
            result: Result (success, failure)
            target: What was affected
            details: Additional details

        Returns:
            Created audit event
        """
        event = AuditEvent(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            timestamp=datetime.now(timezone.utc),
            service_id=self.service_id,
            target=target,
            action=action,
            result=result,
            details=details or {},
            previous_hash=self._last_hash if self.enable_chaining else None
        )

        if self.enable_chaining:
            event.event_hash = event.compute_hash()
            self._last_hash = event.event_hash

        self._event_count += 1

        self._write_event(event)

        logger.info(
            f"AUDIT: {event.event_type.value} | {event.action} | {event.result} | "
            f"target={event.target}"
        )

        return event

    def _write_event(self, event: AuditEvent):
        """Append event to the audit log file."""
        if not self.log_file:
            return

        record = event.to_dict()
        record["event_hash"] = event.event_hash
        try:
            with open(self.log_file, 'a') as f:
                if self._unterminated:
                    f.write('\n')
                    self._unterminated = False
                json.dump(record, f)
                f.write('\n')
        except OSError as e:
            logger.error(f"Failed to write audit event: {e}")

    # Convenience methods for lifecycle events

    def log_certificate_issued(self, cert_path: str, subject: str, sans: List[str], not_after: Optional[datetime]):
        """Log first-time certificate generation."""
        return self.log_event(
            EventType.CERTIFICATE_ISSUED,
            action=f"Issued self-signed certificate for {subject}",
            result="success",
            target=cert_path,
            details={
                "subject": subject,
                "sans": sans,
                "not_after": not_after.isoformat() if not_after else None,
            }
        )

    def log_certificate_renewed(self, cert_path: str, previous_state: str, not_after: Optional[datetime]):
        """Log regeneration of an expiring, expired or replaced certificate."""
        return self.log_event(
            EventType.CERTIFICATE_RENEWED,
            action=f"Renewed certificate ({previous_state})",
            result="success",
            target=cert_path,
            details={
                "previous_state": previous_state,
                "not_after": not_after.isoformat() if not_after else None,
            }
        )

    def log_certificate_reused(self, cert_path: str, days_remaining: int):
        """Log reuse of a still valid certificate."""
        return self.log_event(
            EventType.CERTIFICATE_REUSED,
            action="Reused existing certificate",
            result="success",
            target=cert_path,
            details={"days_remaining": days_remaining}
        )

    def log_generation_failed(self, cert_path: str, error: str):
        """Log a failed generation attempt."""
        return self.log_event(
            EventType.CERTIFICATE_GENERATION_FAILED,
            action="Certificate generation failed",
            result="failure",
            target=cert_path,
            details={"error": error}
        )

    def log_certificate_downloaded(self, cert_path: str, client: Optional[str]):
        """Log a trust bootstrap download."""
        return self.log_event(
            EventType.CERTIFICATE_DOWNLOADED,
            action=f"Certificate downloaded by {client or 'unknown client'}",
            result="success",
            target=cert_path,
            details={"client": client}
        )

    def log_certificate_download_failed(self, cert_path: str, client: Optional[str]):
        """Log a download request for a missing certificate."""
        return self.log_event(
            EventType.CERTIFICATE_DOWNLOAD_FAILED,
            action="Certificate download failed: not found",
            result="failure",
            target=cert_path,
            details={"client": client}
        )

    def verify_chain(self) -> bool:
        """
        Verify audit log chain integrity.

        Returns:
            True if chain is intact, False if tampered
        """
        if not self.log_file or not self.enable_chaining:
            return True

        if not self.log_file.exists():
            return True

        try:
            with open(self.log_file, 'r') as f:
                events = [json.loads(line) for line in f if line.strip()]
        except (OSError, ValueError) as e:
            logger.error(f"Error reading audit log: {e}")
            return False

        previous_hash = None
        for i, event_data in enumerate(events):
            if event_data.get("previous_hash") != previous_hash:
                logger.error(f"Chain break at event {i}")
                return False

            event_data = dict(event_data)
            event_hash = event_data.pop("event_hash", None)
            if _hash_record(event_data) != event_hash:
                logger.error(f"Hash mismatch at event {i}")
                return False

            previous_hash = event_hash

        return True

    def get_event_count(self) -> int:
        """Get number of events logged by this instance."""
        return self._event_count

    def get_last_hash(self) -> Optional[str]:
        """Get hash of last event."""
        return self._last_hash
