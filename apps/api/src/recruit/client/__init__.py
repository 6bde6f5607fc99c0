"""
Client components for the recruitment API.

- FormStore / DraftStorage: editable form state with a local draft slot
- ChallengeGate: holds the bot-prevention token until submission
- SubmissionClient: validate locally, then submit with endpoint fallback
- AdminGatewayClient: list, delete and export applications
"""

from .admin import AdminGatewayClient, DeleteSummary
from .challenge import ChallengeGate, ChallengeRequiredError
from .drafts import DraftStorage, FormStore, draft_key
from .fallback import EndpointError, RequestSpec, call_with_fallback
from .submission import FormValidationError, SubmissionClient, SubmissionInProgressError

__all__ = [
    "AdminGatewayClient",
    "ChallengeGate",
    "ChallengeRequiredError",
    "DeleteSummary",
    "DraftStorage",
    "EndpointError",
    "FormStore",
    "FormValidationError",
    "RequestSpec",
    "SubmissionClient",
    "SubmissionInProgressError",
    "call_with_fallback",
    "draft_key",
]
