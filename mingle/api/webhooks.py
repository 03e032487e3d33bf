"""
Clerk webhook endpoint — keeps the profile store in sync with identity.

Validates the Svix signature headers, then upserts the profile on
``user.created`` / ``user.updated`` and deletes it on ``user.deleted``.
Other event types are acknowledged and ignored.
"""

import base64
import binascii
import hashlib
import hmac
import logging

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from mingle.config import settings
from mingle.schemas.webhook import ClerkEvent
from mingle.services.profile_service import profile_service

logger = logging.getLogger(__name__)

router = APIRouter()

SECRET_PREFIX = "whsec_"


def _validate_signature(payload: bytes, msg_id: str, timestamp: str, signature_header: str) -> bool:
    """
    Validate Svix ``svix-signature`` against the raw request body.

    Svix signs ``{svix-id}.{svix-timestamp}.{body}`` with HMAC-SHA256,
    keyed by the base64 part of the ``whsec_`` secret. The header holds
    one or more space-separated ``v1,<base64 digest>`` entries.
    """
    secret = settings.CLERK_WEBHOOK_SECRET
    if not secret:
        # No secret configured, skip validation (dev mode)
        return True

    if not (msg_id and timestamp and signature_header):
        return False

    try:
        key = base64.b64decode(secret.removeprefix(SECRET_PREFIX), validate=True)
    except binascii.Error:
        logger.error("CLERK_WEBHOOK_SECRET is not valid base64; rejecting webhook")
        return False
    signed = f"{msg_id}.{timestamp}.".encode() + payload
    expected = base64.b64encode(hmac.new(key, signed, hashlib.sha256).digest()).decode()

    for candidate in signature_header.split():
        version, _, digest = candidate.partition(",")
        if version == "v1" and hmac.compare_digest(expected, digest):
            return True
    return False


@router.post("/clerk")
async def clerk_webhook(request: Request):
    """Sync a Clerk user event into ``user_profiles``."""
    body_bytes = await request.body()

    if not _validate_signature(
        body_bytes,
        request.headers.get("svix-id", ""),
        request.headers.get("svix-timestamp", ""),
        request.headers.get("svix-signature", ""),
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid signature")

    try:
        event = ClerkEvent.model_validate_json(body_bytes)
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed event")

    try:
        if event.type in ("user.created", "user.updated"):
            user_id, fields = event.data.profile_fields()
            await profile_service.upsert(user_id, fields)
            logger.info("Synced user data: %s", user_id)
        elif event.type == "user.deleted":
            await profile_service.delete(event.data.id)
            logger.info("Deleted user profile: %s", event.data.id)
    except SQLAlchemyError as exc:
        logger.exception("Webhook store error for %s", event.data.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc.__class__.__name__),
        )

    return {"received": True}
