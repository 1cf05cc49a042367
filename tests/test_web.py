import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from luckydraw.config import Settings
from luckydraw.db.engine import get_sessionmaker, make_engine
from luckydraw.draw import scripted_chooser
from luckydraw.models import Base
from luckydraw.web import create_app


class WebAppTests(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        db_path = Path(self._tmpdir.name) / "web.db"
        self.engine = make_engine(f"sqlite:///{db_path}")
        Base.metadata.create_all(self.engine)
        app = create_app(
            Settings(spin_duration_ms=2500),
            session_factory=get_sessionmaker(self.engine),
            chooser=scripted_chooser([0, 0, 0]),
        )
        self._client_cm = TestClient(app)
        self.client = self._client_cm.__enter__()

    def tearDown(self):
        self._client_cm.__exit__(None, None, None)
        self.engine.dispose()
        self._tmpdir.cleanup()

    def _create_campaign(self, **overrides):
        body = {
            "name": "Year End Party",
            "type": "OFFLINE",
            "prizes": [{"name": "Bike", "quantity": 1}, {"name": "Phone", "quantity": 2}],
        }
        body.update(overrides)
        resp = self.client.post("/api/campaigns", json=body)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def _register(self, campaign_id, name, **extra):
        return self.client.post(
            "/api/participants", json={"campaign_id": campaign_id, "name": name, **extra}
        )

    def test_campaign_crud(self):
        created = self._create_campaign()
        self.assertEqual(created["current_prize_index"], 0)
        self.assertEqual([p["name"] for p in created["prizes"]], ["Bike", "Phone"])

        listing = self.client.get("/api/campaigns").json()
        self.assertEqual([c["id"] for c in listing], [created["id"]])

        resp = self.client.put(
            f"/api/campaigns/{created['id']}", json={"name": "Gala"}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["name"], "Gala")
        self.assertEqual(len(resp.json()["prizes"]), 2)

        resp = self.client.delete(f"/api/campaigns/{created['id']}")
        self.assertEqual(resp.json(), {"id": created["id"], "deleted": True})
        self.assertEqual(self.client.get(f"/api/campaigns/{created['id']}").status_code, 404)

    def test_invalid_campaign_payloads(self):
        resp = self.client.post("/api/campaigns", json={"name": "Gala", "type": "HYBRID"})
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["code"], "invalid")

        resp = self.client.post("/api/campaigns", json={"name": ""})
        self.assertEqual(resp.status_code, 422)

    def test_unknown_ids_return_404(self):
        for method, path in (
            ("get", "/api/campaigns/missing"),
            ("delete", "/api/campaigns/missing"),
            ("post", "/api/campaigns/missing/draw"),
            ("post", "/api/campaigns/missing/advance"),
            ("post", "/api/campaigns/missing/reset"),
            ("delete", "/api/participants/missing"),
        ):
            resp = getattr(self.client, method)(path)
            self.assertEqual(resp.status_code, 404, path)
            self.assertEqual(resp.json()["code"], "not_found")

        resp = self._register("missing", "Alice")
        self.assertEqual(resp.status_code, 404)

    def test_register_accepts_phone_alias_and_rejects_duplicates(self):
        campaign = self._create_campaign()

        resp = self._register(campaign["id"], "Alice", phone="0900")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["contact"], "0900")
        self.assertEqual(resp.json()["status"], "CHECKED_IN")

        resp = self._register(campaign["id"], "Alice", contact="0900")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["code"], "duplicate_contact")
        self.assertNotIn("0900", resp.json()["error"])

        listing = self.client.get(f"/api/participants/{campaign['id']}").json()
        self.assertEqual([p["name"] for p in listing], ["Alice"])

    def test_draw_advance_reset_flow(self):
        campaign = self._create_campaign()
        cid = campaign["id"]
        self.assertEqual(self.client.post(f"/api/campaigns/{cid}/draw").status_code, 409)

        alice = self._register(cid, "Alice").json()
        bob = self._register(cid, "Bob").json()

        winner = self.client.post(f"/api/campaigns/{cid}/draw").json()
        self.assertEqual((winner["id"], winner["won_prize"]), (alice["id"], "Bike"))

        resp = self.client.post(f"/api/campaigns/{cid}/advance")
        self.assertEqual(resp.json()["current_prize"], {"name": "Phone", "quantity": 2})

        winner = self.client.post(f"/api/campaigns/{cid}/draw").json()
        self.assertEqual((winner["id"], winner["won_prize"]), (bob["id"], "Phone"))

        resp = self.client.post(f"/api/campaigns/{cid}/draw")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["code"], "no_eligible_participants")

        resp = self.client.post(f"/api/campaigns/{cid}/advance")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["code"], "no_more_prizes")

        state = self.client.get(f"/api/campaigns/{cid}").json()
        self.assertEqual(state["eligible_count"], 0)
        self.assertEqual(len(state["winners"]), 2)
        self.assertFalse(state["draw_in_progress"])

        resp = self.client.post(f"/api/campaigns/{cid}/reset")
        self.assertEqual(
            resp.json(), {"campaign_id": cid, "cleared": 2, "current_prize_index": 0}
        )
        state = self.client.get(f"/api/campaigns/{cid}").json()
        self.assertEqual(state["eligible_count"], 2)
        self.assertEqual(state["current_prize"]["name"], "Bike")

    def test_websocket_room(self):
        campaign = self._create_campaign()
        cid = campaign["id"]

        with self.client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join_campaign", "campaign_id": cid})
            self.assertEqual(ws.receive_json(), {"type": "joined", "campaign_id": cid})

            alice = self._register(cid, "Alice").json()
            message = ws.receive_json()
            self.assertEqual(message["event"], "participant_joined")
            self.assertEqual(message["data"]["id"], alice["id"])

            ws.send_json({"type": "trigger_spin", "campaign_id": cid})
            self.assertEqual(
                ws.receive_json(), {"event": "start_spin", "data": {"duration": 2500}}
            )

            self.client.post(f"/api/campaigns/{cid}/draw")
            message = ws.receive_json()
            self.assertEqual(message["event"], "winner_selected")
            self.assertEqual(message["data"]["won_prize"], "Bike")

            self.client.delete(f"/api/participants/{alice['id']}")
            self.assertEqual(
                ws.receive_json(),
                {"event": "participant_deleted", "data": {"id": alice["id"]}},
            )

            ws.send_json({"type": "select_winner", "campaign_id": cid})
            self.assertEqual(ws.receive_json()["type"], "error")


if __name__ == "__main__":
    unittest.main()
