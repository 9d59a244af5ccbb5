import logging
from datetime import datetime

logger = logging.getLogger(__name__)


def notify_quotation_status_changed(quotation, from_status, actor_user, comment=None):
    """
    Notify about a quotation status change (sent / accepted / rejected).
    Args:
        quotation: Quotation instance
        from_status: str, status before the change
        actor_user: User instance or identifier
        comment: Optional string
    Behavior:
        - Log a one-line [NOTIFY] event
        - Build a payload for the email integration
        - Never break main flow (catch and log all exceptions)
    Returns:
        payload dict, or None when building it failed
    """
    try:
        contact = getattr(quotation, "customer_contact", None) or {}
        actor_user_id = getattr(actor_user, "id", None)
        actor_user_name = getattr(actor_user, "display_name", None) or getattr(actor_user, "login_id", None) or str(actor_user)

        payload = {
            "quotation_id": getattr(quotation, "id", None),
            "quotation_number": getattr(quotation, "quotation_number", None),
            "deal_id": getattr(quotation, "deal_id", None),
            "customer_name": contact.get("name") or getattr(quotation, "customer_name", None),
            "customer_email": contact.get("email"),
            "from_status": from_status,
            "to_status": getattr(quotation, "status", None),
            "total_rent": getattr(quotation, "total_rent", None),
            "actor_user_id": actor_user_id,
            "actor_user_name": actor_user_name,
            "comment": comment,
            "comment_len": len(comment) if comment else 0,
            "timestamp_utc": datetime.utcnow().isoformat(),
        }
        logger.info(
            "[NOTIFY] quotation=%s %s->%s actor_user_id=%s",
            payload["quotation_number"], payload["from_status"], payload["to_status"], payload["actor_user_id"],
        )
        if payload["to_status"] == "sent":
            send_email(payload)
        return payload
    except Exception as e:
        logger.exception("[NOTIFY] Notification failed: %s", e)
        return None


def send_email(payload):
    """
    Email hand-off point. Delivery is not wired up; the payload is logged
    so the outgoing message can be traced.
    """
    if not payload.get("customer_email") or "@" not in payload["customer_email"]:
        logger.info("[NOTIFY] email skipped quotation=%s: no valid customer email", payload.get("quotation_number"))
        return
    logger.info(
        "[NOTIFY] email queued to=%s subject=Quotation %s",
        payload["customer_email"], payload.get("quotation_number"),
    )
