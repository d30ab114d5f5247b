import emails
from emails.template import JinjaTemplate

from storefront.config import settings
from storefront.utils.logger import get_logger, log_email_operation
from storefront.exceptions import EmailError, handle_email_error

logger = get_logger("email")

VERIFICATION_OTP_TEMPLATE = """
<html>
<body>
    <p>Hi {{ display_name }},</p>
    <p>Welcome! Use the code below to verify your email address:</p>
    <p style="font-size: 24px; letter-spacing: 4px;"><strong>{{ otp_code }}</strong></p>
    <p>This code will expire in {{ expire_minutes }} minutes.</p>
</body>
</html>
"""

PASSWORD_RESET_OTP_TEMPLATE = """
<html>
<body>
    <p>Hi,</p>
    <p>You requested a password reset. Your one-time code is:</p>
    <p style="font-size: 24px; letter-spacing: 4px;"><strong>{{ otp_code }}</strong></p>
    <p>This code will expire in {{ expire_minutes }} minutes.</p>
    <p>If you didn't request this, please ignore this email.</p>
</body>
</html>
"""


def send_email(
    email_to: str,
    subject: str = "",
    html_content: str = None,
    template_name: str = None,
    environment: dict = None,
) -> bool:
    """
    Send email with either direct HTML content or a template

    Args:
        email_to: Recipient email address
        subject: Email subject
        html_content: Direct HTML content
        template_name: Template string to render
        environment: Template variables

    Returns:
        bool: True if email sent successfully

    Raises:
        EmailError: If email configuration is missing or sending fails
    """
    required = {
        "SMTP_HOST": settings.SMTP_HOST,
        "SMTP_PORT": settings.SMTP_PORT,
        "SMTP_USER": settings.SMTP_USER,
        "SMTP_PASSWORD": settings.SMTP_PASSWORD,
        "EMAILS_FROM": settings.EMAILS_FROM,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        error_msg = "Email configuration not set - skipping email sending"
        logger.warning(error_msg)
        raise EmailError(message=error_msg, details={"missing_settings": missing})

    try:
        if html_content:
            message = emails.Message(
                mail_from=settings.EMAILS_FROM,
                subject=subject,
                html=html_content,
            )
        elif template_name:
            message = emails.Message(
                mail_from=settings.EMAILS_FROM,
                subject=subject,
                html=JinjaTemplate(template_name).render(**(environment or {})),
            )
        else:
            raise ValueError("Either html_content or template_name must be provided")
    except ValueError as e:
        raise handle_email_error(e, "create email message")

    smtp_options = {
        "host": settings.SMTP_HOST,
        "port": settings.SMTP_PORT,
        "user": settings.SMTP_USER,
        "password": settings.SMTP_PASSWORD,
    }
    if settings.SMTP_TLS:
        smtp_options["tls"] = True
    if settings.SMTP_SSL:
        smtp_options["ssl"] = True

    try:
        logger.info(f"Sending email to {email_to} with subject: {subject}")
        response = message.send(to=email_to, smtp=smtp_options)
    except Exception as e:
        raise handle_email_error(e, "send email")

    if not response.success:
        logger.error(f"Failed to send email to {email_to}: {response.error}")
        raise EmailError(
            message=f"Failed to send email: {response.error}",
            details={"recipient": email_to, "subject": subject}
        )

    logger.info(f"Email sent successfully to {email_to}")
    return True


class EmailSender:
    """Delivers OTP emails over SMTP"""

    @log_email_operation("send verification OTP")
    def send_verification_otp(self, email: str, code: str, display_name: str) -> bool:
        return send_email(
            email_to=email,
            subject="Verify your email address",
            template_name=VERIFICATION_OTP_TEMPLATE,
            environment={
                "display_name": display_name or email,
                "otp_code": code,
                "expire_minutes": settings.OTP_EXPIRE_MINUTES,
            },
        )

    @log_email_operation("send password reset OTP")
    def send_password_reset_otp(self, email: str, code: str) -> bool:
        return send_email(
            email_to=email,
            subject="Your password reset code",
            template_name=PASSWORD_RESET_OTP_TEMPLATE,
            environment={
                "otp_code": code,
                "expire_minutes": settings.OTP_EXPIRE_MINUTES,
            },
        )


email_sender = EmailSender()


def get_email_sender() -> EmailSender:
    return email_sender
