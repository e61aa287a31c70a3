import logging

logger = logging.getLogger(__name__)


def send_whatsapp_notification(phone_number, message):
    """Log the message that would go to the given WhatsApp number.

    Returns True when a message was "sent", False when there was no number.
    """
    if not phone_number:
        logger.debug('WhatsApp notification skipped, no number: %s', message)
        return False
    logger.info('WhatsApp to %s: %s', phone_number, message)
    return True
