"""Document status state machine for the member document lifecycle

State flow:
    (new) -> PENDING -> READY | FAILED
    READY / FAILED -> PENDING (file replaced) | DELETED
    DELETED is terminal
"""

from enum import Enum
from typing import Dict, List, Optional


class DocumentStatus(str, Enum):
    """Document lifecycle status"""
    PENDING = "PENDING"    # Upload URL issued, bytes not confirmed
    READY = "READY"        # Object verified in storage
    FAILED = "FAILED"      # Missing object or size verification failed
    DELETED = "DELETED"    # Object removed (terminal)


class DocumentType(str, Enum):
    """Business classification of a member document"""
    PASSPORT = "passport"
    NATIONAL_ID = "national_id"
    VISA_PERMIT = "visa_permit"
    CONTRACT = "contract"
    TAX_FORM = "tax_form"
    OTHER = "other"


# State transition rules
ALLOWED_TRANSITIONS: Dict[Optional[DocumentStatus], List[DocumentStatus]] = {
    None: [DocumentStatus.PENDING],
    DocumentStatus.PENDING: [
        DocumentStatus.PENDING,  # replaced before the first upload completed
        DocumentStatus.READY,
        DocumentStatus.FAILED,
        DocumentStatus.DELETED,
    ],
    DocumentStatus.READY: [DocumentStatus.PENDING, DocumentStatus.DELETED],
    DocumentStatus.FAILED: [DocumentStatus.PENDING, DocumentStatus.DELETED],
    DocumentStatus.DELETED: [],
}


def can_transition(from_status: Optional[DocumentStatus], to_status: DocumentStatus) -> bool:
    """Validate if status transition is allowed

    Args:
        from_status: Current status (None for new documents)
        to_status: Target status

    Returns:
        True if transition is allowed, False otherwise

    Example:
        >>> can_transition(DocumentStatus.PENDING, DocumentStatus.READY)
        True
        >>> can_transition(DocumentStatus.DELETED, DocumentStatus.PENDING)
        False
    """
    allowed = ALLOWED_TRANSITIONS.get(from_status, [])
    return to_status in allowed


def get_allowed_transitions(from_status: Optional[DocumentStatus]) -> List[DocumentStatus]:
    """Get list of allowed transitions from current status"""
    return ALLOWED_TRANSITIONS.get(from_status, [])
