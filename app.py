import logging
from datetime import datetime, timezone

from flask import Flask, request, jsonify, json

import webhook_settings
from webhook_settings import HOST, PORT, LOG_LEVEL
from ebay_verification import (
    SIGNATURE_HEADER,
    CHALLENGE_CODE_KEYS,
    VERIFICATION_TOKEN_KEYS,
    ENDPOINT_URL_KEYS,
    WebhookError,
    MissingParameter,
    InvalidSignature,
    UnsupportedMethod,
    first_param,
    compute_challenge_response,
    verify_signature,
)

# Set up logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = Flask(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-EBAY-SIGNATURE",
}
ALLOWED_METHODS = "GET, POST"


def empty_response(status=200):
    return app.response_class("", status=status, mimetype="text/plain")


def error_response(error):
    response = jsonify(error.to_dict())
    response.status_code = error.status_code
    if isinstance(error, UnsupportedMethod):
        response.headers["Allow"] = ALLOWED_METHODS
    return response


def internal_error_response():
    response = jsonify({"error": "internal_error", "message": "Internal server error"})
    response.status_code = 500
    return response


@app.after_request
def add_cors_headers(response):
    """Every response carries the CORS headers, errors included"""
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


@app.errorhandler(405)
def method_not_allowed(error):
    logger.warning(f"❌ Unsupported method: {request.method}")
    return error_response(UnsupportedMethod(request.method))


@app.route("/", defaults={"path": ""}, methods=["GET", "POST", "OPTIONS"], provide_automatic_options=False)
@app.route("/<path:path>", methods=["GET", "POST", "OPTIONS"], provide_automatic_options=False)
def ebay_webhook(path):
    logger.info(f"📥 {request.method} /{path}")

    try:
        if request.method == "OPTIONS":
            return empty_response(200)
        if request.method == "GET":
            return handle_challenge()
        if request.method == "POST":
            return handle_notification()
        raise UnsupportedMethod(request.method)
    except WebhookError as e:
        logger.warning(f"❌ {request.method} rejected ({e.status_code}): {e.message}")
        return error_response(e)
    except Exception as e:
        logger.error(f"❌ Error handling {request.method} request: {type(e).__name__}")
        return internal_error_response()


def handle_challenge():
    """eBay endpoint validation: answer the challenge with its SHA-256 hash"""
    args = request.args
    challenge_code = first_param(args, CHALLENGE_CODE_KEYS)
    # Query values win, environment configuration fills the gaps
    verification_token = first_param(args, VERIFICATION_TOKEN_KEYS) or webhook_settings.get_verification_token()
    endpoint_url = first_param(args, ENDPOINT_URL_KEYS) or webhook_settings.get_endpoint_url()

    if not challenge_code:
        logger.info("🏓 GET without challengeCode, treating as ping")
        return empty_response(200)

    logger.info(
        f"🔍 Challenge received (token: {'present' if verification_token else 'absent'}, "
        f"endpoint: {'present' if endpoint_url else 'absent'})"
    )

    missing = []
    if not verification_token:
        missing.append("verificationToken")
    if not endpoint_url:
        missing.append("endpointUrl")
    if missing:
        raise MissingParameter(missing)

    try:
        challenge_response = compute_challenge_response(challenge_code, verification_token, endpoint_url)
    except Exception as e:
        logger.error(f"❌ Error computing challenge response: {type(e).__name__}")
        return internal_error_response()

    logger.info("✅ Challenge answered")
    return jsonify({"challengeResponse": challenge_response}), 200


def handle_notification():
    """eBay notification: verify the optional signature, then acknowledge"""
    try:
        # Raw bytes first, the signature covers the unparsed body
        raw_body = request.get_data(cache=True)
    except Exception as e:
        logger.error(f"❌ Error reading notification body: {type(e).__name__}")
        return internal_error_response()

    signature = request.headers.get(SIGNATURE_HEADER)
    if signature is not None:
        verification_token = webhook_settings.get_verification_token()
        if not verification_token:
            raise MissingParameter(["VERIFICATION_TOKEN"])
        if not verify_signature(raw_body, signature, verification_token):
            raise InvalidSignature()
        logger.info("🔐 Signature verified")
    else:
        logger.info("📭 Notification without signature header")

    log_notification(parse_notification_body(raw_body))

    return jsonify({
        "status": "success",
        "message": "Notification received successfully",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), 200


def parse_notification_body(raw_body):
    """Parse the raw body as JSON; an empty or malformed body becomes {}"""
    if not raw_body:
        return {}
    try:
        return json.loads(raw_body)
    except ValueError:
        logger.warning("⚠️ Notification body is not valid JSON, acknowledging anyway")
        return {}


def log_notification(payload):
    """Log notification topic and id only, never the user data"""
    if not isinstance(payload, dict):
        logger.info(f"📨 Notification received ({type(payload).__name__} payload)")
        return

    metadata = payload.get("metadata")
    notification = payload.get("notification")
    topic = metadata.get("topic") if isinstance(metadata, dict) else None
    notification_id = notification.get("notificationId") if isinstance(notification, dict) else None
    logger.info(f"📨 Notification received (topic: {topic or 'unknown'}, id: {notification_id or 'unknown'})")


if __name__ == "__main__":
    webhook_settings.log_settings_status()
    app.run(host=HOST, port=PORT)
