"""REST transport interface and its requests-based implementation."""

import base64
import hashlib
import hmac
import secrets
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any
from xml.etree import ElementTree

import requests
import structlog

from kayako_client.exceptions import InvalidResponse, TransportError

if TYPE_CHECKING:
    from kayako_client.config import Config

logger = structlog.get_logger()


class RESTTransport(ABC):
    """Abstract base class for REST transports.

    Controllers are ``/<Module>/<Controller>`` paths; positional parameters
    are appended to them in order (``/Tickets/TicketNote/123/45``).
    """

    @abstractmethod
    def get(self, controller: str, parameters: list[Any]) -> dict[str, Any]:
        """Issue a GET request and return the decoded response."""
        pass

    @abstractmethod
    def post(
        self,
        controller: str,
        parameters: list[Any],
        data: dict[str, Any],
        files: dict[str, tuple[str, bytes]] | None = None,
    ) -> dict[str, Any]:
        """Issue a POST request and return the decoded response."""
        pass

    @abstractmethod
    def put(self, controller: str, parameters: list[Any], data: dict[str, Any]) -> dict[str, Any]:
        """Issue a PUT request and return the decoded response."""
        pass

    @abstractmethod
    def delete(self, controller: str, parameters: list[Any]) -> None:
        """Issue a DELETE request."""
        pass


def decode_element(element: ElementTree.Element) -> Any:
    """Decode an XML element into nested dicts.

    Attributes are stored under ``@name`` and element text under ``#text``.
    A child tag occurring once maps to its value, a repeated tag to a list
    of values. Elements without attributes and children decode to their
    text.
    """
    children = list(element)
    if not children and not element.attrib:
        return element.text or ""

    data: dict[str, Any] = {f"@{name}": value for name, value in element.attrib.items()}
    for child in children:
        value = decode_element(child)
        if child.tag in data:
            existing = data[child.tag]
            if isinstance(existing, list):
                existing.append(value)
            else:
                data[child.tag] = [existing, value]
        else:
            data[child.tag] = value

    text = element.text or ""
    if not children:
        data["#text"] = text
    elif text.strip():
        data["#text"] = text.strip()
    return data


def decode_xml(payload: str | bytes) -> dict[str, Any]:
    """Decode a response document; an empty root decodes to an empty dict.

    Raises:
        InvalidResponse: If the payload is not well-formed XML
    """
    if isinstance(payload, bytes):
        text = payload.strip()
    else:
        text = payload.strip().encode("utf-8")
    if not text:
        return {}
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError as e:
        raise InvalidResponse(f"Failed to parse XML response: {e}", body=text.decode("utf-8", "replace")) from e
    data = decode_element(root)
    return data if isinstance(data, dict) else {}


def sign(secret_key: str, salt: str) -> str:
    """Return the base64 HMAC-SHA256 signature of ``salt``."""
    digest = hmac.new(secret_key.encode("utf-8"), salt.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def flatten_fields(data: dict[str, Any]) -> list[tuple[str, str]]:
    """Flatten request data into form fields; lists become ``key[]`` entries."""
    fields: list[tuple[str, str]] = []
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            for item in value:
                fields.append((f"{key}[]", str(item)))
        else:
            fields.append((key, str(value)))
    return fields


class RESTClient(RESTTransport):
    """Signed HTTP transport talking to a Kayako REST API endpoint."""

    def __init__(self, config: "Config", session: requests.Session | None = None) -> None:
        """Initialize the REST client.

        Args:
            config: Configuration providing URL, credentials and request options
            session: Optional preconfigured requests session
        """
        self.config = config
        self.session = session or requests.Session()
        logger.debug("REST client initialized", base_url=config.base_url)

    def build_url(self, controller: str, parameters: list[Any]) -> str:
        path = "/".join([controller.rstrip("/")] + [str(parameter) for parameter in parameters])
        if self.config.standard_url_type:
            return f"{self.config.base_url}index.php?{path}"
        return f"{self.config.base_url}index.php?e={path}"

    def signature_fields(self) -> dict[str, str]:
        salt = str(secrets.randbelow(10**10))
        return {
            "apikey": self.config.api_key,
            "salt": salt,
            "signature": sign(self.config.secret_key, salt),
        }

    def _request(
        self,
        method: str,
        controller: str,
        parameters: list[Any],
        data: dict[str, Any] | None = None,
        files: dict[str, tuple[str, bytes]] | None = None,
    ) -> requests.Response:
        url = self.build_url(controller, parameters)
        kwargs: dict[str, Any] = {"timeout": self.config.timeout}
        if method in ("GET", "DELETE"):
            kwargs["params"] = self.signature_fields()
        else:
            kwargs["data"] = flatten_fields(data or {}) + list(self.signature_fields().items())
            if files:
                kwargs["files"] = {name: (file_name, contents) for name, (file_name, contents) in files.items()}

        if self.config.debug:
            logger.debug("REST request", method=method, url=url, data=data, files=list((files or {}).keys()))

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error("REST request failed", method=method, url=url, error=str(e))
            raise TransportError(f"{method} {controller} failed: {e}") from e

        if self.config.debug:
            logger.debug("REST response", method=method, url=url, status=response.status_code, body=response.text)

        if not response.ok:
            raise TransportError(
                f"{method} {controller} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    def get(self, controller: str, parameters: list[Any]) -> dict[str, Any]:
        return decode_xml(self._request("GET", controller, parameters).content)

    def post(
        self,
        controller: str,
        parameters: list[Any],
        data: dict[str, Any],
        files: dict[str, tuple[str, bytes]] | None = None,
    ) -> dict[str, Any]:
        return decode_xml(self._request("POST", controller, parameters, data, files).content)

    def put(self, controller: str, parameters: list[Any], data: dict[str, Any]) -> dict[str, Any]:
        return decode_xml(self._request("PUT", controller, parameters, data).content)

    def delete(self, controller: str, parameters: list[Any]) -> None:
        self._request("DELETE", controller, parameters)
