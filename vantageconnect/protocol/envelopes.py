"""
XML envelopes for the configuration (discovery) protocol.

Requests and responses are XML documents named after the controller
interface they address:

    -> <ILogin><Login><call><User>u</User><Password>p</Password></call></Login></ILogin>
    <- <ILogin><Login><return>true</return></Login></ILogin>

    -> <IBackup><GetFile><call>Backup\\Project.dc</call></GetFile></IBackup>
    <- <IBackup><GetFile><return><?File Encode="Base64" /PD94bWwg...?></return></GetFile></IBackup>

The backup payload arrives wrapped in a processing-instruction-like
construct rather than an element, so it is rewritten to ``<File>`` before
the envelope is parsed. Responses can span many network reads; the reader
only attempts a decode once a closing envelope tag has arrived.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from typing import Final
from xml.etree.ElementTree import ParseError as XMLParseError
from xml.sax.saxutils import escape

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from vantageconnect.exceptions import ProtocolError
from vantageconnect.protocol.constants import ProtocolConstants

logger = logging.getLogger(__name__)

LOGIN_CLOSING_TAG: Final[str] = "</ILogin>"
BACKUP_CLOSING_TAG: Final[str] = "</IBackup>"

BACKUP_REQUEST: Final[bytes] = (
    "<IBackup><GetFile><call>"
    f"{ProtocolConstants.BACKUP_FILE_NAME}"
    "</call></GetFile></IBackup>\n"
).encode("utf-8")
"""Request for the project backup file."""

_BYTE_ORDER_MARK: Final[str] = "\ufeff"
_FILE_PI_PATTERN: Final[re.Pattern[str]] = re.compile(
    r'<\?File\s+Encode="Base64"\s*/(.*?)\?>',
    re.DOTALL,
)


def build_login_request(username: str, password: str) -> bytes:
    """
    Build the login request envelope.

    Credentials are XML-escaped.

    Example:
        >>> build_login_request("admin", "a&b")
        b'<ILogin><Login><call><User>admin</User><Password>a&amp;b</Password></call></Login></ILogin>\\n'
    """
    return (
        "<ILogin><Login><call>"
        f"<User>{escape(username)}</User>"
        f"<Password>{escape(password)}</Password>"
        "</call></Login></ILogin>\n"
    ).encode("utf-8")


@dataclass(frozen=True)
class LoginResponse:
    """Decoded login reply; success mirrors the ``return`` field."""

    success: bool


@dataclass(frozen=True)
class BackupResponse:
    """Decoded backup reply carrying the backup document text."""

    document: str

    @property
    def size(self) -> int:
        """Length of the decoded document in characters."""
        return len(self.document)


EnvelopeResponse = LoginResponse | BackupResponse


def decode_backup_payload(payload: str) -> str:
    """
    Decode the base64 backup payload into document text.

    Args:
        payload: Base64 text, whitespace allowed.

    Returns:
        Decoded document (UTF-8, BOM stripped).

    Raises:
        ProtocolError: If the payload is not valid base64.
    """
    compact = "".join(payload.split())
    try:
        raw = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ProtocolError(f"Backup payload is not valid base64: {e}") from e
    return raw.decode("utf-8", errors="replace").lstrip(_BYTE_ORDER_MARK)


def _slice_envelope(text: str) -> str:
    """Cut the first complete envelope out of text, dropping stray text around it."""
    for opening, closing in (("<ILogin", LOGIN_CLOSING_TAG), ("<IBackup", BACKUP_CLOSING_TAG)):
        end = text.find(closing)
        if end < 0:
            continue
        start = text.rfind(opening, 0, end)
        if start >= 0:
            return text[start:end + len(closing)]
    return text.strip()


class EnvelopeReader:
    """
    Accumulates response text and decodes complete envelopes.

    Example:
        >>> reader = EnvelopeReader()
        >>> reader.feed("<ILogin><Login><return>tr")
        >>> reader.has_envelope
        False
        >>> reader.feed("ue</return></Login></ILogin>")
        >>> reader.decode()
        LoginResponse(success=True)
    """

    def __init__(self) -> None:
        self._buffer = ""

    @property
    def buffered(self) -> int:
        """Number of buffered characters."""
        return len(self._buffer)

    @property
    def has_envelope(self) -> bool:
        """Check if a closing envelope tag has been received."""
        return LOGIN_CLOSING_TAG in self._buffer or BACKUP_CLOSING_TAG in self._buffer

    def feed(self, text: str) -> None:
        """Append received text."""
        self._buffer += text.replace(_BYTE_ORDER_MARK, "")

    def clear(self) -> None:
        """Discard buffered text."""
        self._buffer = ""

    def decode(self) -> EnvelopeResponse | None:
        """
        Decode the buffered envelope.

        Returns:
            LoginResponse or BackupResponse, or None if no complete
            envelope is buffered or the envelope is not recognized.

        Raises:
            ProtocolError: If the envelope is malformed or its payload
                cannot be decoded.
        """
        if not self.has_envelope:
            return None

        text = _FILE_PI_PATTERN.sub(r"<File>\1</File>", self._buffer)
        try:
            root = ET.fromstring(_slice_envelope(text))
        except (XMLParseError, DefusedXmlException) as e:
            raise ProtocolError(f"Malformed response envelope: {e}") from e

        if root.tag == "ILogin":
            result = root.findtext("Login/return", default="")
            return LoginResponse(success=result.strip().lower() == "true")

        if root.tag == "IBackup":
            payload = root.findtext("GetFile/return/File")
            if payload is None:
                logger.debug("Backup response without file payload")
                return None
            return BackupResponse(document=decode_backup_payload(payload))

        logger.debug("Unrecognized response envelope <%s>", root.tag)
        return None

    def __repr__(self) -> str:
        return f"EnvelopeReader(buffered={len(self._buffer)})"
