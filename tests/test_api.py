import unittest

from fastapi.testclient import TestClient

from app.main import create_app
from app.whatsapp.service import WhatsAppService
from conftest import FakeGraph, make_storage

WEBHOOK_URL = "/api/whatsapp/webhook"


def _property_payload(**overrides):
    payload = {"name": "Casa Azul", "address": "Rua das Flores, 10", "dailyRate": "250.00", "maxGuests": 4}
    payload.update(overrides)
    return payload


def _booking_payload(property_id, **overrides):
    payload = {
        "propertyId": property_id,
        "checkIn": "2024-01-10T14:00:00Z",
        "checkOut": "2024-01-15T11:00:00Z",
        "numberOfGuests": 2,
        "totalAmount": "1250.00",
    }
    payload.update(overrides)
    return payload


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.storage = make_storage()
        self.graph = FakeGraph()
        self.whatsapp = WhatsAppService(self.storage, transport=self.graph.transport)
        self.client = TestClient(create_app(storage=self.storage, whatsapp=self.whatsapp))

    def configure_whatsapp(self):
        res = self.client.post(
            "/api/whatsapp/config",
            json={"accessToken": "token-1", "phoneNumberId": "1234567890", "verifyToken": "verify-me"},
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["message"], "WhatsApp configurado com sucesso")


class CrudApiTests(ApiTestCase):
    def test_health(self):
        res = self.client.get("/api/health")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"status": "ok"})

    def test_property_crud_uses_camel_case(self):
        res = self.client.post("/api/properties", json=_property_payload())
        self.assertEqual(res.status_code, 201)
        body = res.json()
        self.assertEqual(body["dailyRate"], "250.00")
        self.assertEqual(body["maxGuests"], 4)
        self.assertIn("createdAt", body)

        res = self.client.patch(f"/api/properties/{body['id']}", json={"dailyRate": "300"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["dailyRate"], "300")
        self.assertEqual(res.json()["name"], "Casa Azul")

        self.assertEqual(self.client.delete(f"/api/properties/{body['id']}").status_code, 204)
        self.assertEqual(self.client.get(f"/api/properties/{body['id']}").status_code, 404)
        self.assertEqual(self.client.delete(f"/api/properties/{body['id']}").status_code, 404)

    def test_invalid_payload_is_rejected(self):
        res = self.client.post("/api/properties", json=_property_payload(dailyRate="abc"))
        self.assertEqual(res.status_code, 422)
        res = self.client.post(
            "/api/expenses",
            json={"propertyId": "p", "category": "parties", "description": "x", "amount": "1", "date": "2024-01-01"},
        )
        self.assertEqual(res.status_code, 422)

    def test_guest_email_filter(self):
        self.client.post("/api/guests", json={"name": "Ana", "email": "ana@example.com", "phone": "11987654321"})
        found = self.client.get("/api/guests", params={"email": "ana@example.com"}).json()
        self.assertEqual(len(found), 1)
        self.assertEqual(found[0]["name"], "Ana")
        self.assertEqual(self.client.get("/api/guests", params={"email": "x@example.com"}).json(), [])

    def test_booking_creates_guest_from_data(self):
        prop = self.client.post("/api/properties", json=_property_payload()).json()
        res = self.client.post(
            "/api/bookings",
            json=_booking_payload(
                prop["id"],
                guestEmail="bia@example.com",
                guestData={"name": "Bia", "email": "bia@example.com", "phone": "(11) 91234-5678"},
            ),
        )
        self.assertEqual(res.status_code, 201)
        booking = res.json()
        self.assertEqual(booking["status"], "confirmed")
        self.assertEqual(booking["totalAmount"], "1250.00")

        guest = self.storage.get_guest_by_email("bia@example.com")
        self.assertEqual(booking["guestId"], guest.id)

        # second booking reuses the guest found by email
        res = self.client.post(
            "/api/bookings",
            json=_booking_payload(
                prop["id"],
                guestEmail="bia@example.com",
                guestData={"name": "Bia", "email": "bia@example.com", "phone": "(11) 91234-5678"},
            ),
        )
        self.assertEqual(res.json()["guestId"], guest.id)
        self.assertEqual(len(self.storage.list_guests()), 1)

        joined = self.client.get(f"/api/bookings/{booking['id']}").json()
        self.assertEqual(joined["guest"]["email"], "bia@example.com")
        self.assertEqual(joined["property"]["name"], "Casa Azul")
        self.assertEqual(joined["checkIn"], "2024-01-10T14:00:00")

    def test_booking_without_guest_is_rejected(self):
        prop = self.client.post("/api/properties", json=_property_payload()).json()
        res = self.client.post("/api/bookings", json=_booking_payload(prop["id"], guestId="missing"))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(self.storage.list_bookings(), [])

    def test_booking_filters(self):
        prop = self.client.post("/api/properties", json=_property_payload()).json()
        guest = self.client.post(
            "/api/guests", json={"name": "Ana", "email": "ana@example.com", "phone": "11987654321"}
        ).json()
        self.client.post("/api/bookings", json=_booking_payload(prop["id"], guestId=guest["id"]))

        in_range = self.client.get(
            "/api/bookings", params={"startDate": "2024-01-12T00:00:00", "endDate": "2024-01-20T00:00:00"}
        ).json()
        self.assertEqual(len(in_range), 1)
        out_of_range = self.client.get(
            "/api/bookings", params={"startDate": "2024-01-20T00:00:00", "endDate": "2024-01-25T00:00:00"}
        ).json()
        self.assertEqual(out_of_range, [])
        self.assertEqual(len(self.client.get("/api/bookings", params={"propertyId": prop["id"]}).json()), 1)
        self.assertEqual(self.client.get("/api/bookings", params={"guestId": "other"}).json(), [])

    def test_messages_whatsapp_route_is_not_shadowed(self):
        self.client.post(
            "/api/messages",
            json={"content": "Oi", "channel": "whatsapp", "direction": "incoming", "fromNumber": "5511987654321"},
        )
        res = self.client.get("/api/messages/whatsapp", params={"phoneNumber": "5511987654321"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.json()), 1)
        self.assertEqual(res.json()[0]["fromNumber"], "5511987654321")
        self.assertEqual(self.client.get("/api/messages/unknown").status_code, 404)


class WhatsAppApiTests(ApiTestCase):
    def test_webhook_verification(self):
        params = {"hub.mode": "subscribe", "hub.verify_token": "verify-me", "hub.challenge": "42"}
        self.assertEqual(self.client.get(WEBHOOK_URL, params=params).status_code, 403)

        self.configure_whatsapp()
        res = self.client.get(WEBHOOK_URL, params=params)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.text, "42")

        params["hub.verify_token"] = "wrong"
        res = self.client.get(WEBHOOK_URL, params=params)
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.text, "Forbidden")

    def test_webhook_stores_incoming_and_status(self):
        self.configure_whatsapp()
        incoming = {
            "object": "whatsapp_business_account",
            "entry": [
                {
                    "changes": [
                        {
                            "field": "messages",
                            "value": {
                                "contacts": [{"wa_id": "5511987654321"}],
                                "messages": [{"id": "wamid.IN1", "from": "5511987654321", "text": {"body": "Oi"}}],
                            },
                        }
                    ]
                }
            ],
        }
        res = self.client.post(WEBHOOK_URL, json=incoming)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.text, "EVENT_RECEIVED")
        stored = self.storage.get_whatsapp_messages("5511987654321")
        self.assertEqual(len(stored), 1)
        self.assertEqual(stored[0].content, "Oi")

        status_update = {
            "object": "whatsapp_business_account",
            "entry": [
                {"changes": [{"field": "messages", "value": {"statuses": [{"id": "wamid.IN1", "status": "read"}]}}]}
            ],
        }
        self.client.post(WEBHOOK_URL, json=status_update)
        self.assertEqual(self.storage.get_whatsapp_messages()[0].whatsapp_status, "read")

    def test_webhook_always_acknowledges(self):
        res = self.client.post(WEBHOOK_URL, json={"object": "page"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.text, "EVENT_RECEIVED")
        res = self.client.post(WEBHOOK_URL, json={"object": "whatsapp_business_account", "entry": ["bad"]})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(self.storage.list_messages(), [])

    def test_webhook_acknowledges_payloads_with_non_list_entries(self):
        self.configure_whatsapp()
        payloads = [
            {"object": "whatsapp_business_account", "entry": 5},
            {"object": "whatsapp_business_account", "entry": [{"changes": 3}]},
            {"object": "whatsapp_business_account", "entry": [{"changes": [{"field": "messages", "value": 7}]}]},
            [1, 2, 3],
        ]
        for payload in payloads:
            res = self.client.post(WEBHOOK_URL, json=payload)
            self.assertEqual(res.status_code, 200)
            self.assertEqual(res.text, "EVENT_RECEIVED")
        res = self.client.post(WEBHOOK_URL, content=b"not json", headers={"content-type": "application/json"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(self.storage.list_messages(), [])

    def test_send_requires_configuration(self):
        res = self.client.post("/api/whatsapp/send", json={"to": "5511987654321", "message": "Ola"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(self.graph.requests, [])

    def test_send_and_send_template(self):
        self.configure_whatsapp()
        res = self.client.post("/api/whatsapp/send", json={"to": "5511987654321", "message": "Ola"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"success": True, "messageId": "wamid.TEST1", "status": "sent"})

        res = self.client.post(
            "/api/whatsapp/send-template", json={"to": "5511987654321", "templateName": " hello_world "}
        )
        self.assertEqual(res.status_code, 200)
        template = self.graph.requests[-1]["body"]["template"]
        self.assertEqual(template["name"], "hello_world")
        self.assertEqual(template["language"], {"code": "pt_BR"})
        self.assertEqual(len(self.storage.get_whatsapp_messages()), 2)

    def test_send_accepted_without_message_id_is_not_a_failure(self):
        self.configure_whatsapp()
        self.graph.payload = {"messaging_product": "whatsapp"}
        res = self.client.post("/api/whatsapp/send", json={"to": "5511987654321", "message": "Ola"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"success": True, "messageId": None, "status": "sent"})
        self.assertEqual(len(self.storage.get_whatsapp_messages()), 1)

    def test_send_provider_error_maps_to_bad_gateway(self):
        self.configure_whatsapp()
        self.graph.status_code = 401
        self.graph.payload = {"error": {"message": "Invalid OAuth access token"}}
        res = self.client.post("/api/whatsapp/send", json={"to": "5511987654321", "message": "Ola"})
        self.assertEqual(res.status_code, 502)
        self.assertEqual(res.json()["detail"], "Invalid OAuth access token")

    def test_status(self):
        self.assertEqual(self.client.get("/api/whatsapp/status").json(), {"configured": False, "profile": None})
        self.configure_whatsapp()
        self.graph.payload = {"name": "Casa da Praia", "status": "CONNECTED", "messaging_product": "whatsapp"}
        body = self.client.get("/api/whatsapp/status").json()
        self.assertTrue(body["configured"])
        self.assertEqual(body["profile"]["name"], "Casa da Praia")

        self.graph.status_code = 500
        self.graph.payload = {"error": {"message": "boom"}}
        self.assertEqual(self.client.get("/api/whatsapp/status").json(), {"configured": True, "profile": None})
