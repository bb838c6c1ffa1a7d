import logging
import smtplib
import ssl
from email.message import EmailMessage
from urllib.parse import urlencode

from auction_api.core.config import Settings

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 15
VERIFICATION_SUBJECT = "Verify your email - Auto Auction"
VERIFICATION_BODY = """Hello, {name}!

Please confirm your Auto Auction email address by opening the link below:

{url}

The link expires in 24 hours.

Thanks,
The Auto Auction team
"""


class EmailService:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def verification_url(self, token: str) -> str:
        return f"{self.settings.app_base_url}/verify-email?{urlencode({'token': token})}"

    def build_verification_message(self, *, to_email: str, to_name: str, token: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.settings.smtp_from
        message["To"] = to_email
        message["Subject"] = VERIFICATION_SUBJECT
        message.set_content(VERIFICATION_BODY.format(name=to_name, url=self.verification_url(token)))
        return message

    def send_verification_email(self, to_email: str, to_name: str, token: str) -> None:
        """Deliver the verification link.

        Runs as a background task after the response is sent, so delivery
        problems are logged here and never reach the client.
        """
        if not self.settings.smtp_enabled:
            logger.debug("SMTP not configured, skipping verification email to %s.", to_email)
            return

        message = self.build_verification_message(to_email=to_email, to_name=to_name, token=token)
        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=SMTP_TIMEOUT_SECONDS) as smtp:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls(context=ssl.create_default_context())
                    smtp.ehlo()
                smtp.login(self.settings.smtp_user or "", self.settings.smtp_password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send verification email to %s.", to_email)
            return

        logger.info("Verification email sent to %s.", to_email)
