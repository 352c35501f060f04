"""
Slack Request Signature Verification

Wraps slack_sdk's SignatureVerifier (v0 HMAC-SHA256 over "v0:<timestamp>:<raw body>",
five minute replay window) and turns a rejection into a SlackSignatureError
carrying the reason.
"""

import logging
from typing import Optional, Union

from slack_sdk.signature import SignatureVerifier, Clock

logger = logging.getLogger(__name__)

TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"
SIGNATURE_HEADER = "X-Slack-Signature"

# Fixed by slack_sdk's SignatureVerifier
REPLAY_WINDOW_SECONDS = 60 * 5


class SlackSignatureError(Exception):
    """Raised when a request does not carry a valid Slack signature"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class SlackSignatureVerifier:
    """Verifies X-Slack-Signature headers against the raw request body"""

    def __init__(self, signing_secret: Optional[str], clock: Clock = Clock()):
        self.signing_secret = signing_secret
        self.clock = clock
        self._verifier = SignatureVerifier(signing_secret, clock=clock) if signing_secret else None

    def compute_signature(self, timestamp: str, body: Union[bytes, str]) -> str:
        return self._verifier.generate_signature(timestamp=timestamp, body=body)

    def verify(self, body: Union[bytes, str], timestamp: Optional[str], signature: Optional[str]) -> None:
        """Raise SlackSignatureError unless the signature is valid and fresh"""
        if self._verifier is None:
            raise SlackSignatureError("signing secret not configured")
        if not timestamp or not signature:
            raise SlackSignatureError("missing signature headers")

        try:
            request_time = int(timestamp)
        except ValueError:
            raise SlackSignatureError(f"invalid timestamp: {timestamp!r}")

        # compare_digest raises on non-ASCII str input
        if not signature.isascii():
            raise SlackSignatureError("signature mismatch")

        if self._verifier.is_valid(body, timestamp, signature):
            return
        if abs(self.clock.now() - request_time) > REPLAY_WINDOW_SECONDS:
            raise SlackSignatureError("timestamp outside replay window")
        raise SlackSignatureError("signature mismatch")

    def is_valid(self, body: Union[bytes, str], timestamp: Optional[str], signature: Optional[str]) -> bool:
        try:
            self.verify(body, timestamp, signature)
            return True
        except SlackSignatureError as e:
            logger.warning(f"Rejected Slack request: {e.reason}")
            return False
