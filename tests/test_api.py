"""
Tests API — routes pages, catalogue, tracking, stats (TestClient + DB temporaire).
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from pagelab.assignment import VariantAllocation, assign_variant
from pagelab.visitor import VISITOR_COOKIE_NAME, VISITOR_ID_LENGTH


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


# ── Pages ──────────────────────────────────────────────────────────────

class TestResolvedEndpoint:
    def test_page_resolue(self, client, landing):
        r = client.get("/api/pages/home/resolved")
        assert r.status_code == 200
        data = r.json()
        assert data["slug"] == "home"
        assert [b["blockType"] for b in data["content"]] == ["contentBlock", "contentBlock"]
        assert data["content"][1]["_resolvedFrom"] == "R1"
        assert data["content"][1]["settings"]["blockId"] == "ref-block-01"

    def test_champs_nuls_omis(self, client, landing):
        data = client.get("/api/pages/other/resolved").json()
        assert "content" not in data
        assert "hero" not in data

    def test_404(self, client, landing):
        assert client.get("/api/pages/nope/resolved").status_code == 404

    def test_slug_vide(self, client, landing):
        assert client.get("/api/pages/%20/resolved").status_code == 400

    def test_bloc_inline_restitue_a_l_identique(self, client, landing):
        block = {
            "blockType": "accordionBlock", "id": "blk-1", "blockName": "Intro",
            "items": [{"id": "row-1", "title": "Q", "content": {"root": "R"}}],
            "settings": {"blockId": "acc-000000001"},
        }
        landing.create("pages", {"slug": "faq", "title": "FAQ", "content": [block]})
        stored = landing.find_by_slug("pages", "faq")["content"][0]
        resolved = client.get("/api/pages/faq/resolved").json()["content"][0]
        assert resolved == stored == block


class TestPreviewEndpoint:
    def test_preview(self, client, landing):
        r = client.get("/api/pages/home/variants/var-b/preview")
        assert r.status_code == 200
        data = r.json()
        assert data["_variant"] == {"id": "var-b", "name": "Treatment"}
        assert data["hero"][0]["headline"] == "Nouvelle offre"

    def test_variant_d_une_autre_page(self, client, landing):
        r = client.get("/api/pages/home/variants/var-other/preview")
        assert r.status_code == 400

    def test_404(self, client, landing):
        assert client.get("/api/pages/home/variants/ghost/preview").status_code == 404
        assert client.get("/api/pages/nope/variants/var-a/preview").status_code == 404

    def test_variant_vide(self, client, landing):
        assert client.get("/api/pages/home/variants/%20/preview").status_code == 400


class TestAssignedEndpoint:
    def test_cookie_pose_au_premier_passage(self, client, landing):
        r = client.get("/api/pages/home/assigned")
        assert r.status_code == 200
        visitor_id = r.cookies.get(VISITOR_COOKIE_NAME)
        assert visitor_id and len(visitor_id) == VISITOR_ID_LENGTH
        assert r.json()["visitorId"] == visitor_id
        assert "httponly" in r.headers["set-cookie"].lower()

    def test_visiteur_stable(self, client, landing):
        first = client.get("/api/pages/home/assigned").json()
        second = client.get("/api/pages/home/assigned")
        assert second.json()["visitorId"] == first["visitorId"]
        assert second.json()["variantId"] == first["variantId"]
        # Cookie existant : pas de nouveau Set-Cookie
        assert "set-cookie" not in second.headers

    def test_cookie_existant(self, client, landing):
        client.cookies.set(VISITOR_COOKIE_NAME, "visitor-42")
        data = client.get("/api/pages/home/assigned").json()
        expected = assign_variant("visitor-42", "exp-1", [
            VariantAllocation(variant_id="var-a", traffic_percent=50),
            VariantAllocation(variant_id="var-b", traffic_percent=50),
        ]).variant_id
        assert data["experimentId"] == "exp-1"
        assert data["variantId"] == expected
        assert data["resolvedPage"]["_variant"]["id"] == expected

    def test_sans_experience(self, client, landing):
        data = client.get("/api/pages/other/assigned").json()
        assert data["experimentId"] is None
        assert data["variantId"] is None
        assert data["resolvedPage"]["slug"] == "other"

    def test_404(self, client, landing):
        assert client.get("/api/pages/nope/assigned").status_code == 404


# ── Catalogue ──────────────────────────────────────────────────────────

class TestCatalogEndpoint:
    def test_catalogue(self, client):
        r = client.get("/api/blocks/catalog")
        assert r.status_code == 200
        assert r.headers["cache-control"] == "public, max-age=3600"
        blocks = r.json()["blocks"]
        assert {b["slug"] for b in blocks} >= {"heroBlock", "reusableBlockRef"}
        assert all("schema" in b for b in blocks)

    def test_filtre_section(self, client):
        r = client.get("/api/blocks/catalog", params={"section": "hero"})
        assert r.status_code == 200
        assert [b["slug"] for b in r.json()["blocks"]] == ["heroBlock"]

    def test_filtre_slugs(self, client):
        r = client.get("/api/blocks/catalog", params={"section": "content", "allowed": "faqBlock, heroBlock"})
        assert [b["slug"] for b in r.json()["blocks"]] == ["faqBlock"]

    def test_section_inconnue(self, client):
        assert client.get("/api/blocks/catalog", params={"section": "sidebar"}).status_code == 400

    def test_slug_inconnu(self, client):
        r = client.get("/api/blocks/catalog", params={"allowed": "heroBlock,carouselBlock"})
        assert r.status_code == 400
        assert "carouselBlock" in r.json()["detail"]


# ── Tracking ───────────────────────────────────────────────────────────

class TestTracking:
    def test_evenement(self, client, landing):
        r = client.post("/api/events", json={
            "eventType": "impression", "experiment": "exp-1", "variant": "var-a", "visitorId": "v1",
        })
        assert r.status_code == 201
        data = r.json()
        assert data["id"]
        assert data["timestamp"]
        assert data["variant"] == "var-a"

    def test_type_invalide(self, client, landing):
        assert client.post("/api/events", json={"eventType": "hover"}).status_code == 422

    def test_lead(self, client, landing):
        r = client.post("/api/leads", json={
            "email": "lea@example.com", "variant": "var-b", "formData": {"company": "ACME"},
        })
        assert r.status_code == 201
        assert r.json()["convertedAt"]
        assert r.json()["formData"] == {"company": "ACME"}

    def test_lead_sans_email(self, client, landing):
        assert client.post("/api/leads", json={"name": "Léa"}).status_code == 422


# ── Stats ──────────────────────────────────────────────────────────────

class TestStatsEndpoint:
    def test_stats(self, client, landing):
        for variant, event_type in [("var-a", "impression"), ("var-a", "impression"),
                                    ("var-b", "impression"), ("var-b", "conversion")]:
            client.post("/api/events", json={"eventType": event_type, "experiment": "exp-1", "variant": variant})
        [stats] = client.get("/api/experiments/stats").json()
        assert stats["experimentId"] == "exp-1"
        assert stats["winningVariantId"] == "var-b"
        b = next(v for v in stats["variants"] if v["variantId"] == "var-b")
        assert (b["impressions"], b["conversions"], b["conversionRate"]) == (1, 1, 100.0)

    def test_vide(self, client):
        assert client.get("/api/experiments/stats").json() == []
