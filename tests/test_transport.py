"""Tests for the requests-based REST transport."""

from unittest.mock import MagicMock, Mock

import pytest
import requests

from kayako_client.config import Config
from kayako_client.exceptions import InvalidResponse, TransportError
from kayako_client.transport import RESTClient, decode_xml, flatten_fields, sign

NOTES_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<notes>
    <note type="ticket" id="1" ticketid="42">first</note>
    <note type="ticket" id="2" ticketid="42"><![CDATA[second]]></note>
</notes>
"""


@pytest.fixture
def mock_session() -> Mock:
    """Create a mock requests session."""
    session = MagicMock(spec=requests.Session)
    response = MagicMock(spec=requests.Response)
    response.ok = True
    response.status_code = 200
    response.content = NOTES_XML
    response.text = NOTES_XML.decode("utf-8")
    session.request.return_value = response
    return session


@pytest.fixture
def rest_client(mock_session: Mock) -> RESTClient:
    """Create a REST client using the mocked session."""
    config = Config("https://helpdesk.example.com/api/index.php", "api-key", "secret-key", timeout=5)
    return RESTClient(config, session=mock_session)


def test_decode_repeated_and_single_elements() -> None:
    """Test repeated tags decode to lists and attributes to @keys."""
    data = decode_xml(NOTES_XML)

    assert data["note"] == [
        {"@type": "ticket", "@id": "1", "@ticketid": "42", "#text": "first"},
        {"@type": "ticket", "@id": "2", "@ticketid": "42", "#text": "second"},
    ]


def test_decode_nested_elements() -> None:
    """Test child elements without attributes decode to their text."""
    data = decode_xml(
        "<departments><department><id>1</id><title>Sales</title>"
        "<usergroups><id>3</id><id>4</id></usergroups></department></departments>"
    )

    assert data["department"] == {"id": "1", "title": "Sales", "usergroups": {"id": ["3", "4"]}}


def test_decode_empty_and_invalid() -> None:
    """Test empty payloads and malformed XML."""
    assert decode_xml(b"") == {}
    assert decode_xml("<notes/>") == {}
    with pytest.raises(InvalidResponse):
        decode_xml("<notes><note></notes>")


def test_flatten_fields() -> None:
    """Test list values are sent as repeated key[] fields."""
    assert flatten_fields({"title": "A", "usergroupid": [1, 2], "skip": None}) == [
        ("title", "A"),
        ("usergroupid[]", "1"),
        ("usergroupid[]", "2"),
    ]


def test_sign_is_deterministic() -> None:
    """Test request signatures depend on the secret and the salt."""
    assert sign("secret", "123") == sign("secret", "123")
    assert sign("secret", "123") != sign("secret", "124")
    assert sign("other", "123") != sign("secret", "123")


def test_build_url(rest_client: RESTClient) -> None:
    """Test both URL styles."""
    assert rest_client.build_url("/Tickets/TicketNote", [42, 7]) == (
        "https://helpdesk.example.com/api/index.php?/Tickets/TicketNote/42/7"
    )
    rest_client.config.standard_url_type = False
    assert rest_client.build_url("/Base/Department", []) == (
        "https://helpdesk.example.com/api/index.php?e=/Base/Department"
    )


def test_get_signs_query(rest_client: RESTClient, mock_session: Mock) -> None:
    """Test GET requests carry the signature in the query string."""
    data = rest_client.get("/Tickets/TicketNote", ["ListAll", 42])

    assert len(data["note"]) == 2
    args, kwargs = mock_session.request.call_args
    assert args == ("GET", "https://helpdesk.example.com/api/index.php?/Tickets/TicketNote/ListAll/42")
    assert kwargs["timeout"] == 5
    assert kwargs["params"]["apikey"] == "api-key"
    assert kwargs["params"]["signature"] == sign("secret-key", kwargs["params"]["salt"])


def test_post_sends_form_fields_and_files(rest_client: RESTClient, mock_session: Mock) -> None:
    """Test POST requests send data, signature fields and files."""
    rest_client.post("/Tickets/TicketNote", [], {"ticketid": 42, "contents": "hello"}, {"file": ("a.txt", b"abc")})

    args, kwargs = mock_session.request.call_args
    assert args[0] == "POST"
    fields = dict(kwargs["data"])
    assert fields["ticketid"] == "42"
    assert fields["contents"] == "hello"
    assert fields["apikey"] == "api-key"
    assert kwargs["files"] == {"file": ("a.txt", b"abc")}


def test_http_error_raises_transport_error(rest_client: RESTClient, mock_session: Mock) -> None:
    """Test non-2xx responses surface as TransportError."""
    mock_session.request.return_value.ok = False
    mock_session.request.return_value.status_code = 404
    mock_session.request.return_value.text = "Not found"

    with pytest.raises(TransportError) as excinfo:
        rest_client.delete("/Tickets/TicketNote", [42, 7])

    assert excinfo.value.status_code == 404
    assert excinfo.value.body == "Not found"


def test_network_error_raises_transport_error(rest_client: RESTClient, mock_session: Mock) -> None:
    """Test connection failures are wrapped, not retried."""
    mock_session.request.side_effect = requests.ConnectionError("refused")

    with pytest.raises(TransportError):
        rest_client.get("/Base/Department", [])

    assert mock_session.request.call_count == 1
