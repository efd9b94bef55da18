import httpx
import pytest

from app.storage import schemas
from app.whatsapp.client import WhatsAppError, WhatsAppNotConfiguredError
from app.whatsapp.service import WhatsAppService
from conftest import TEST_CONFIG


def _incoming_value(message: dict, wa_id: str = "5511987654321") -> dict:
    return {
        "messaging_product": "whatsapp",
        "contacts": [{"wa_id": wa_id, "profile": {"name": "Ana"}}],
        "messages": [message],
    }


def test_send_text_message_records_outgoing(whatsapp, graph, storage):
    whatsapp.set_config(TEST_CONFIG)
    result = whatsapp.send_text_message("5511987654321", "Ola!", guest_id="g-1")

    assert result["messages"][0]["id"] == "wamid.TEST1"
    sent = graph.requests[0]
    assert sent["method"] == "POST"
    assert sent["url"] == "https://graph.facebook.com/v18.0/1234567890/messages"
    assert sent["headers"]["authorization"] == "Bearer token-1"
    assert sent["body"] == {"messaging_product": "whatsapp", "to": "5511987654321", "text": {"body": "Ola!"}}

    stored = storage.list_messages()
    assert len(stored) == 1
    assert stored[0].channel == "whatsapp"
    assert stored[0].direction == "outgoing"
    assert stored[0].whatsapp_status == "sent"
    assert stored[0].whatsapp_message_id == "wamid.TEST1"
    assert stored[0].from_number == "1234567890"
    assert stored[0].to_number == "5511987654321"
    assert stored[0].guest_id == "g-1"


def test_send_template_message_body(whatsapp, graph, storage):
    whatsapp.set_config(TEST_CONFIG)
    whatsapp.send_template_message("5511987654321", "boas_vindas", parameters=["Ana", "10/01"])

    template = graph.requests[0]["body"]["template"]
    assert graph.requests[0]["body"]["type"] == "template"
    assert template["name"] == "boas_vindas"
    assert template["language"] == {"code": "pt_BR"}
    assert template["components"][0]["parameters"] == [
        {"type": "text", "text": "Ana"},
        {"type": "text", "text": "10/01"},
    ]
    assert storage.list_messages()[0].content == "Template: boas_vindas"


def test_send_template_without_parameters_has_no_components(whatsapp, graph):
    whatsapp.set_config(TEST_CONFIG)
    whatsapp.send_template_message("5511987654321", "hello_world", language_code="en_US")
    template = graph.requests[0]["body"]["template"]
    assert "components" not in template
    assert template["language"] == {"code": "en_US"}


def test_send_without_config_fails_before_calling_provider(whatsapp, graph, storage):
    with pytest.raises(WhatsAppNotConfiguredError):
        whatsapp.send_text_message("5511987654321", "Ola!")
    assert graph.requests == []
    assert storage.list_messages() == []


def test_provider_error_is_surfaced_and_nothing_is_recorded(whatsapp, graph, storage):
    whatsapp.set_config(TEST_CONFIG)
    graph.status_code = 400
    graph.payload = {"error": {"message": "(#100) Invalid parameter", "code": 100}}

    with pytest.raises(WhatsAppError) as exc_info:
        whatsapp.send_text_message("5511987654321", "Ola!")
    assert str(exc_info.value) == "(#100) Invalid parameter"
    assert exc_info.value.status_code == 400
    assert storage.list_messages() == []


def test_persistence_failure_does_not_fail_the_send(whatsapp, storage, monkeypatch):
    whatsapp.set_config(TEST_CONFIG)

    def broken_create(payload):
        raise RuntimeError("disk full")

    monkeypatch.setattr(storage, "create_message", broken_create)
    result = whatsapp.send_text_message("5511987654321", "Ola!")
    assert result["messages"][0]["id"] == "wamid.TEST1"


def test_incoming_text_is_linked_to_guest_by_phone(whatsapp, storage):
    whatsapp.set_config(TEST_CONFIG)
    guest = storage.create_guest(schemas.GuestCreate(name="Ana", email="ana@example.com", phone="(11) 98765-4321"))

    stored = whatsapp.process_incoming_message(
        _incoming_value({"id": "wamid.IN1", "from": "5511987654321", "type": "text", "text": {"body": "Oi"}})
    )
    assert stored.guest_id == guest.id
    assert stored.content == "Oi"
    assert stored.direction == "incoming"
    assert stored.whatsapp_status == "received"
    assert stored.from_number == "5511987654321"
    assert stored.to_number == "1234567890"
    assert stored.booking_id is None


def test_incoming_without_config_or_guest(whatsapp):
    stored = whatsapp.process_incoming_message(
        _incoming_value({"id": "wamid.IN2", "from": "5521999999999", "text": {"body": "Oi"}}, wa_id="5521999999999")
    )
    assert stored.guest_id is None
    assert stored.to_number == ""


@pytest.mark.parametrize(
    "message, expected",
    [
        ({"image": {"id": "m1"}}, "[Imagem]"),
        ({"document": {"id": "m2"}}, "[Documento]"),
        ({"audio": {"id": "m3"}}, "[Áudio]"),
        ({"sticker": {"id": "m4"}}, "[Mensagem não suportada]"),
    ],
)
def test_incoming_media_placeholders(whatsapp, message, expected):
    message = dict(message, id="wamid.MEDIA", **{"from": "5511987654321"})
    stored = whatsapp.process_incoming_message(_incoming_value(message))
    assert stored.content == expected


def test_incoming_errors_are_swallowed(whatsapp, storage, monkeypatch):
    def broken_create(payload):
        raise RuntimeError("db down")

    monkeypatch.setattr(storage, "create_message", broken_create)
    assert whatsapp.process_incoming_message(_incoming_value({"id": "x", "text": {"body": "Oi"}})) is None
    assert whatsapp.process_incoming_message({}) is None


def test_status_update_only_touches_status(whatsapp, storage):
    whatsapp.set_config(TEST_CONFIG)
    whatsapp.send_text_message("5511987654321", "Ola!")
    before = storage.list_messages()[0]

    updated = whatsapp.process_status_update({"statuses": [{"id": "wamid.TEST1", "status": "delivered"}]})
    assert updated.whatsapp_status == "delivered"
    after = storage.list_messages()[0]
    assert after.model_dump(exclude={"whatsapp_status", "guest", "booking"}) == before.model_dump(
        exclude={"whatsapp_status", "guest", "booking"}
    )


def test_status_update_for_unknown_message(whatsapp, storage):
    assert whatsapp.process_status_update({"statuses": [{"id": "wamid.NOPE", "status": "read"}]}) is None
    assert storage.list_messages() == []


def test_verify_webhook(whatsapp):
    assert whatsapp.verify_webhook("subscribe", "verify-me", "123") is None
    whatsapp.set_config(TEST_CONFIG)
    assert whatsapp.verify_webhook("subscribe", "verify-me", "123") == "123"
    assert whatsapp.verify_webhook("subscribe", "wrong", "123") is None
    assert whatsapp.verify_webhook("unsubscribe", "verify-me", "123") is None


def test_business_profile(whatsapp, graph):
    whatsapp.set_config(TEST_CONFIG)
    graph.payload = {"id": "1234567890", "name": "Casa da Praia", "status": "CONNECTED"}
    profile = whatsapp.get_business_profile()
    assert profile["name"] == "Casa da Praia"
    assert graph.requests[0]["method"] == "GET"
    assert graph.requests[0]["url"] == "https://graph.facebook.com/v18.0/1234567890"


def test_transport_error_carries_its_message(storage):
    def unreachable(request):
        raise httpx.ConnectError("boom")

    service = WhatsAppService(storage, transport=httpx.MockTransport(unreachable))
    service.set_config(TEST_CONFIG)
    with pytest.raises(WhatsAppError) as exc_info:
        service.send_text_message("5511987654321", "Ola!")
    assert str(exc_info.value) == "boom"
    assert exc_info.value.status_code is None
    assert storage.list_messages() == []


def test_accepted_send_without_message_id_is_still_recorded(whatsapp, graph, storage):
    whatsapp.set_config(TEST_CONFIG)
    graph.payload = {"messaging_product": "whatsapp", "messages": []}

    result = whatsapp.send_text_message("5511987654321", "Ola!")
    assert result == {"messaging_product": "whatsapp", "messages": []}
    stored = storage.list_messages()
    assert len(stored) == 1
    assert stored[0].whatsapp_message_id is None
    assert stored[0].whatsapp_status == "sent"


def test_process_webhook_dispatches_messages_and_statuses(whatsapp, storage):
    whatsapp.set_config(TEST_CONFIG)
    whatsapp.process_webhook(
        {
            "object": "whatsapp_business_account",
            "entry": [
                {
                    "changes": [
                        {"field": "account_update", "value": {"messages": [{"id": "skip", "text": {"body": "x"}}]}},
                        {"field": "messages", "value": _incoming_value({"id": "wamid.IN9", "text": {"body": "Oi"}})},
                    ]
                }
            ],
        }
    )
    whatsapp.process_webhook(
        {
            "object": "whatsapp_business_account",
            "entry": [{"changes": [{"field": "messages", "value": {"statuses": [{"id": "wamid.IN9", "status": "read"}]}}]}],
        }
    )
    stored = storage.list_messages()
    assert [m.whatsapp_message_id for m in stored] == ["wamid.IN9"]
    assert stored[0].whatsapp_status == "read"


@pytest.mark.parametrize(
    "body",
    [
        {"object": "whatsapp_business_account", "entry": 5},
        {"object": "whatsapp_business_account", "entry": [{"changes": 3}]},
        {"object": "whatsapp_business_account", "entry": ["bad", {"changes": ["bad"]}]},
        {"object": "page", "entry": []},
        None,
    ],
)
def test_process_webhook_ignores_malformed_payloads(whatsapp, storage, body):
    whatsapp.process_webhook(body)
    assert storage.list_messages() == []
