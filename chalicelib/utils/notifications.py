from typing import Dict, List, Optional

from chalicelib.utils import email_templates
from chalicelib.utils.logger import logger


class EmailNotifier:
    """
    Sends café e-mails through SES.
    Every send is best-effort: failures are logged and never reach the caller.
    """

    def __init__(self, ses_client, email_from: Optional[str], cafe_email: Optional[str] = None,
                 enabled: bool = True):
        self.ses_client = ses_client
        self.email_from = email_from
        self.cafe_email = cafe_email
        self.enabled = enabled and bool(email_from) and ses_client is not None

    def send_email_ses(self, emails_to: List, subject: str, message: str) -> bool:
        emails_to = [email for email in emails_to if email]
        if not self.enabled or not emails_to:
            logger.info(f'send_email_ses ::: skipped, enabled={self.enabled}, {emails_to=}')
            return False
        logger.info(f'Sending message to emails {emails_to=}, {subject=}')
        charset = "UTF-8"
        try:
            response = self.ses_client.send_email(
                Destination={"ToAddresses": emails_to},
                Message={
                    "Body": {"Text": {"Charset": charset, "Data": message}},
                    "Subject": {"Charset": charset, "Data": subject},
                },
                Source=self.email_from,
            )
        except Exception as error:
            logger.warning(f'send_email_ses ::: failed to send {subject=} to {emails_to=}, {error=}')
            return False
        logger.info(f'Message has been sent, message_id={response.get("MessageId")}')
        return True

    def notify_order_created(self, order_record: Dict) -> bool:
        subject = f'Order confirmation - {order_record.get("order_number")}'
        return self.send_email_ses(
            [order_record.get('customer', {}).get('email'), self.cafe_email],
            subject,
            email_templates.get_new_order_notification_message(order_record)
        )

    def notify_reservation_created(self, reservation_record: Dict) -> bool:
        subject = f'Table reservation received - {reservation_record.get("date")} {reservation_record.get("time")}'
        return self.send_email_ses(
            [reservation_record.get('email'), self.cafe_email],
            subject,
            email_templates.get_new_reservation_message(reservation_record)
        )

    def notify_contact_message(self, contact_record: Dict) -> bool:
        subject = f'New contact message - {contact_record.get("subject") or contact_record.get("name")}'
        return self.send_email_ses(
            [self.cafe_email],
            subject,
            email_templates.get_new_contact_message(contact_record)
        )
