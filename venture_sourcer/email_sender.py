"""Outbound email - compose a draft for a person and send it over SMTP.

The transport accepts (recipient, subject, body, attachments) and returns
a message id, or raises EmailDeliveryError.
"""

import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Dict, List, Optional, Sequence

from . import config
from .errors import EmailDeliveryError, InvalidRequestError
from .interest import CompanyLike
from .llm_client import LLMClient
from .models import Person
from .template_engine import resolve_template

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Quick question"


@dataclass
class Attachment:
    """A file to attach, already loaded into memory."""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class EmailTransport(ABC):
    """Sends a composed message and returns its id."""

    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        body: str,
        attachments: Optional[Sequence[Attachment]] = None,
    ) -> str:
        """Send the message and return its Message-ID; raise EmailDeliveryError on failure."""


def build_message(
    from_address: str,
    to: str,
    subject: str,
    body: str,
    attachments: Optional[Sequence[Attachment]] = None,
) -> MIMEMultipart:
    msg = MIMEMultipart()
    msg['From'] = from_address
    msg['To'] = to
    msg['Subject'] = subject
    msg['Message-ID'] = make_msgid()
    msg.attach(MIMEText(body, 'plain'))

    for attachment in attachments or []:
        subtype = attachment.content_type.split('/', 1)[-1]
        part = MIMEApplication(attachment.content, _subtype=subtype)
        part.add_header('Content-Disposition', 'attachment', filename=attachment.filename)
        msg.attach(part)
    return msg


class SMTPTransport(EmailTransport):
    """SMTP with STARTTLS and app-password login (Gmail by default)."""

    def __init__(
        self,
        login_address: Optional[str] = None,
        password: Optional[str] = None,
        send_as_address: Optional[str] = None,
        server: Optional[str] = None,
        port: Optional[int] = None,
    ):
        self.login_address = login_address or config.EMAIL_ADDRESS
        self.password = password or config.EMAIL_APP_PASSWORD
        self.send_as_address = send_as_address or config.EMAIL_SEND_AS or self.login_address
        self.server = server or config.SMTP_SERVER
        self.port = port or config.SMTP_PORT

    def send(self, to, subject, body, attachments=None) -> str:
        if not self.login_address or not self.password:
            raise EmailDeliveryError("SMTP credentials are not configured")

        msg = build_message(self.send_as_address, to, subject, body, attachments)
        try:
            with smtplib.SMTP(self.server, self.port) as server:
                server.starttls()
                server.login(self.login_address, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            # SMTP errors carry (code, bytes) tuples
            if isinstance(e.args, tuple) and len(e.args) >= 2:
                detail = e.args[1].decode() if isinstance(e.args[1], bytes) else e.args[1]
                error_msg = f"{e.args[0]}: {detail}"
            else:
                error_msg = str(e)
            logger.error(f"[Email] Failed to send to {to}: {error_msg}")
            raise EmailDeliveryError(error_msg) from e

        logger.info(f"[Email] Sent to {to}")
        return msg['Message-ID']


async def compose_draft(
    person: Person,
    company: CompanyLike,
    body_template: str,
    mapping: Optional[Dict[str, Optional[str]]] = None,
    subject_template: Optional[str] = None,
    llm: Optional[LLMClient] = None,
    researcher: Optional[LLMClient] = None,
) -> Dict[str, str]:
    """Resolve subject and body for one person.

    Returns:
        dict with 'to', 'subject' and 'body'
    """
    subject = DEFAULT_SUBJECT
    if subject_template:
        subject = await resolve_template(subject_template, mapping, person, company,
                                         llm=llm, researcher=researcher)
    body = await resolve_template(body_template, mapping, person, company,
                                  llm=llm, researcher=researcher)
    return {'to': person.email or '', 'subject': subject, 'body': body}


async def send_draft(
    person: Person,
    company: CompanyLike,
    body_template: str,
    transport: EmailTransport,
    mapping: Optional[Dict[str, Optional[str]]] = None,
    subject_template: Optional[str] = None,
    attachments: Optional[List[Attachment]] = None,
    llm: Optional[LLMClient] = None,
    researcher: Optional[LLMClient] = None,
) -> str:
    """Compose and send a draft; returns the transport's message id.

    Raises:
        InvalidRequestError: the person has no revealed email
        EmailDeliveryError: the transport failed
    """
    if not person.email:
        raise InvalidRequestError(f"{person.name} has no email; unlock them first",
                                  missing_fields=["email"])

    draft = await compose_draft(person, company, body_template, mapping, subject_template,
                                llm=llm, researcher=researcher)
    return await asyncio.to_thread(
        transport.send, draft['to'], draft['subject'], draft['body'], attachments
    )
