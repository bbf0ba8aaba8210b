"""Gmail API client: the mailbox gateway the agent reads from and acts on."""

from __future__ import annotations

import base64
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import logging
from typing import List, Optional

from googleapiclient.discovery import build

from email_agent.exceptions import (
    GmailError,
    GmailFetchError,
    GmailModifyError,
    GmailSendError,
)
from email_agent.gmail import label
from email_agent.gmail import query
from email_agent.gmail.label import Label
from email_agent.gmail.models import Email, SentMessage
from email_agent.gmail.parser import extract_bodies, extract_headers, html_to_text, parse_message

logger = logging.getLogger(__name__)

_PAGE_SIZE = 100
_REPLY_SEARCH_LIMIT = 10


class GmailClient:
    """Entrypoint for the Gmail service API.

    Every network call goes through :meth:`_execute`, which turns API and
    transport failures into the matching :class:`GmailError` subclass.

    Args:
        credentials: google.oauth2.credentials.Credentials with gmail.modify
            and gmail.send scopes.
        max_results: default cap on messages returned by the list methods.
        user_id: mailbox owner, ``'me'`` for the authorized account.
    """

    def __init__(
        self,
        credentials,
        max_results: int = 50,
        user_id: str = 'me',
    ) -> None:
        self.creds = credentials
        self.max_results = max_results
        self.user_id = user_id
        self._service = build(
            'gmail', 'v1', credentials=credentials,
            cache_discovery=False,
        )

    @property
    def service(self) -> 'googleapiclient.discovery.Resource':
        return self._service

    def _execute(self, request, error_cls: type[GmailError], action: str):
        try:
            return request.execute()
        except Exception as e:
            raise error_cls(f"Failed to {action}: {e}") from e

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def list_recent_emails(
        self,
        hours_back: int = 24,
        max_results: Optional[int] = None,
    ) -> List[Email]:
        """Messages received in the last ``hours_back`` hours, newest first.

        Reference tokens are assigned by position in the returned list.
        """
        q = query.construct_query(newer_than=(hours_back, 'hour'))
        return self._fetch_batch(q, max_results)

    def list_unread_emails(self, max_results: Optional[int] = None) -> List[Email]:
        q = query.construct_query(unread=True)
        return self._fetch_batch(q, max_results)

    def get_email(self, message_id: str, index: int = 0) -> Email:
        raw = self._get_raw(message_id)
        return parse_message(raw, index)

    def get_message_content(self, message_id: str) -> str:
        """The plain-text body of a message."""
        raw = self._get_raw(message_id)
        plain, _ = extract_bodies(raw.get('payload', {}))
        return plain

    def search_replies(self, subject: str, after: datetime) -> List[str]:
        """Ids of messages we sent replying to ``subject`` after ``after``."""
        q = query.construct_query(
            folder='sent',
            subject=f'Re: {subject}',
            after=after,
        )
        logger.debug(f"Searching replies with query: {q}")
        return self._list_message_ids(q, _REPLY_SEARCH_LIMIT)

    def _fetch_batch(self, q: str, max_results: Optional[int]) -> List[Email]:
        limit = max_results or self.max_results
        logger.info(f"Fetching emails with query: {q}")
        message_ids = self._list_message_ids(q, limit)
        logger.info(f"Found {len(message_ids)} messages")
        return [
            self.get_email(msg_id, index)
            for index, msg_id in enumerate(message_ids)
        ]

    def _list_message_ids(self, q: str, max_results: int) -> List[str]:
        """List message ids matching the query, handling pagination."""
        ids: List[str] = []
        page_token = None

        while len(ids) < max_results:
            kwargs: dict = {
                'userId': self.user_id,
                'q': q,
                'maxResults': min(max_results - len(ids), _PAGE_SIZE),
            }
            if page_token:
                kwargs['pageToken'] = page_token

            response = self._execute(
                self.service.users().messages().list(**kwargs),
                GmailFetchError, 'list messages',
            )
            messages = response.get('messages', [])
            if not messages:
                break

            ids.extend(msg['id'] for msg in messages)
            page_token = response.get('nextPageToken')
            if not page_token:
                break

        return ids[:max_results]

    def _get_raw(self, message_id: str, format: str = 'full', **kwargs) -> dict:
        return self._execute(
            self.service.users().messages().get(
                userId=self.user_id, id=message_id, format=format, **kwargs,
            ),
            GmailFetchError, f'fetch message {message_id}',
        )

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        plain_body: Optional[str] = None,
    ) -> SentMessage:
        """Send a multipart/alternative message (plain part first, then HTML)."""
        msg = self._create_message(to, subject, html_body, plain_body)
        res = self._execute(
            self.service.users().messages().send(userId=self.user_id, body=msg),
            GmailSendError, f'send message to {to}',
        )
        return SentMessage(id=res.get('id', ''), thread_id=res.get('threadId'))

    def reply_to_email(
        self,
        original_message_id: str,
        thread_id: str,
        to: str,
        subject: str,
        html_body: str,
        plain_body: Optional[str] = None,
    ) -> SentMessage:
        """Reply in-thread, linking to the original's Message-ID header."""
        original = self._get_raw(
            original_message_id, format='metadata', metadataHeaders=['Message-ID'],
        )
        headers = extract_headers(original.get('payload', {}))
        rfc_message_id = headers.get('message-id', '')

        if not subject.lower().startswith('re:'):
            subject = f'Re: {subject}'

        msg = self._create_message(
            to, subject, html_body, plain_body, in_reply_to=rfc_message_id or None,
        )
        msg['threadId'] = thread_id
        res = self._execute(
            self.service.users().messages().send(userId=self.user_id, body=msg),
            GmailSendError, f'reply to message {original_message_id}',
        )
        return SentMessage(id=res.get('id', ''), thread_id=res.get('threadId', thread_id))

    def _create_message(
        self,
        to: str,
        subject: str,
        html_body: str,
        plain_body: Optional[str] = None,
        in_reply_to: Optional[str] = None,
    ) -> dict:
        # MIMEMultipart generates a fresh boundary for every message
        msg = MIMEMultipart('alternative')
        msg['To'] = to
        msg['Subject'] = subject
        if in_reply_to:
            msg['In-Reply-To'] = in_reply_to
            msg['References'] = in_reply_to

        msg.attach(MIMEText(plain_body or html_to_text(html_body), 'plain', 'utf-8'))
        msg.attach(MIMEText(html_body, 'html', 'utf-8'))

        return {
            'raw': base64.urlsafe_b64encode(msg.as_bytes()).decode()
        }

    # -------------------------------------------------------------------------
    # Message state
    # -------------------------------------------------------------------------

    def archive_email(self, message_id: str) -> None:
        self._modify(message_id, remove=[label.INBOX])

    def delete_email(self, message_id: str) -> None:
        """Move to trash. Gmail purges trash after 30 days."""
        self._execute(
            self.service.users().messages().trash(userId=self.user_id, id=message_id),
            GmailModifyError, f'trash message {message_id}',
        )

    def mark_as_read(self, message_id: str) -> None:
        self._modify(message_id, remove=[label.UNREAD])

    def mark_as_unread(self, message_id: str) -> None:
        self._modify(message_id, add=[label.UNREAD])

    def star_email(self, message_id: str) -> None:
        self._modify(message_id, add=[label.STARRED])

    def unstar_email(self, message_id: str) -> None:
        self._modify(message_id, remove=[label.STARRED])

    def add_label(self, message_id: str, label_name: str) -> Label:
        """Apply a user label by name, creating it first if needed."""
        lbl = self.find_label(label_name)
        if lbl is None:
            lbl = self.create_label(label_name)
            logger.info(f"Created label {lbl.name!r}")
        self._modify(message_id, add=[lbl])
        return lbl

    def _modify(
        self,
        message_id: str,
        add: Optional[List[Label]] = None,
        remove: Optional[List[Label]] = None,
    ) -> None:
        body = {
            'addLabelIds': [lbl.id for lbl in add or []],
            'removeLabelIds': [lbl.id for lbl in remove or []],
        }
        self._execute(
            self.service.users().messages().modify(
                userId=self.user_id, id=message_id, body=body,
            ),
            GmailModifyError, f'modify labels on message {message_id}',
        )

    # -------------------------------------------------------------------------
    # Labels
    # -------------------------------------------------------------------------

    def list_labels(self) -> List[Label]:
        res = self._execute(
            self.service.users().labels().list(userId=self.user_id),
            GmailFetchError, 'list labels',
        )
        return [Label(name=x['name'], id=x['id']) for x in res.get('labels', [])]

    def find_label(self, name: str) -> Optional[Label]:
        for lbl in self.list_labels():
            if lbl.matches_name(name):
                return lbl
        return None

    def create_label(self, name: str) -> Label:
        body = {
            'name': name,
            'labelListVisibility': 'labelShow',
            'messageListVisibility': 'show',
        }
        res = self._execute(
            self.service.users().labels().create(userId=self.user_id, body=body),
            GmailModifyError, f'create label {name!r}',
        )
        return Label(res.get('name', name), res['id'])
