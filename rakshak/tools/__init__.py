# Tools Package
from rakshak.tools.twilio_client import NotificationGateway, TwilioSMSGateway

__all__ = ["NotificationGateway", "TwilioSMSGateway"]
