"""eBay notification endpoint verification helpers.

The challenge handshake hashes ``challengeCode + verificationToken +
endpointUrl`` with plain SHA-256. Notifications may carry an
``X-EBAY-SIGNATURE`` header holding base64 HMAC-SHA256 of the raw body,
keyed with the verification token.
"""

import base64
import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-EBAY-SIGNATURE"

# Accepted query keys for each input, camelCase first
CHALLENGE_CODE_KEYS = ("challengeCode", "challenge_code")
VERIFICATION_TOKEN_KEYS = ("verificationToken", "verification_token")
ENDPOINT_URL_KEYS = ("endpointUrl", "endpoint_url")


class WebhookError(Exception):
    """Request-level failure that maps to an HTTP error response"""

    status_code = 400
    code = "bad_request"

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"error": self.code, "message": self.message}


class MissingParameter(WebhookError):
    code = "missing_parameter"

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing required parameters: {', '.join(self.missing)}")


class InvalidSignature(WebhookError):
    code = "invalid_signature"

    def __init__(self):
        super().__init__("Invalid signature")


class UnsupportedMethod(WebhookError):
    status_code = 405
    code = "method_not_allowed"

    def __init__(self, method):
        self.method = method
        super().__init__("Method not allowed")


def first_param(params, keys):
    """Return the first non-empty value among the given keys"""
    for key in keys:
        value = params.get(key)
        if value:
            return value
    return None


def compute_challenge_response(challenge_code, verification_token, endpoint_url):
    """SHA-256 hex digest of challenge_code + verification_token + endpoint_url"""
    to_hash = challenge_code + verification_token + endpoint_url
    return hashlib.sha256(to_hash.encode("utf-8")).hexdigest()


def compute_signature(secret, body):
    """Base64 HMAC-SHA256 of the raw body keyed with secret"""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(body, signature, secret):
    """Constant-time check of a signature header against the raw body.

    Returns False instead of raising when the header holds characters
    that cannot be a base64 signature.
    """
    if not signature or not secret:
        logger.warning("❌ Signature check failed: missing signature or secret")
        return False

    expected = compute_signature(secret, body)
    valid = hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
    if not valid:
        logger.warning("❌ Signature mismatch")
    return valid
