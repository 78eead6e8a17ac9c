from decimal import Decimal

import pytest

from app.dependencies import get_document_renderer, get_notifier, get_risk_scorer
from app.main import app
from app.models.policy import RiskDecision
from app.services.collaborators import RiskAssessment, TemplateKind
from app.services.derivation import compute_premium
from tests.conftest import (
    create_claim,
    create_landlord,
    create_policy,
    create_property,
    create_tenant,
    insured_chain,
)


class FixedScorer:
    def __init__(self, score: str, decision: RiskDecision):
        self.calls = []
        self.assessment = RiskAssessment(score=Decimal(score), decision=decision)

    def assess(self, property_, tenant):
        self.calls.append((property_.id, tenant.id))
        return self.assessment


class FakeRenderer:
    media_type = "application/pdf"

    def render(self, detail):
        return f"%PDF-1.4 {detail.policy.policy_number} {detail.tenant.name}".encode()


def _parties(client, headers):
    landlord = create_landlord(client, headers)
    property_ = create_property(client, headers, landlord["id"])
    tenant = create_tenant(client, headers, property_["id"])
    return landlord, property_, tenant


class TestPolicyIssuance:
    def test_issue_policy_derives_terms(self, client, auth_headers):
        landlord, property_, tenant = _parties(client, auth_headers)

        policy = create_policy(client, auth_headers, landlord["id"], property_["id"], tenant["id"])

        assert policy["status"] == "active"
        assert policy["premium_amount"] == 540.00
        assert policy["start_date"] == "2024-01-31"
        assert policy["end_date"] == "2025-01-31"
        assert policy["policy_number"].startswith("POL-")
        assert policy["decision"] == "accept"

    def test_low_risk_discount(self, client, auth_headers):
        landlord, property_, tenant = _parties(client, auth_headers)

        policy = create_policy(
            client, auth_headers, landlord["id"], property_["id"], tenant["id"], risk_score=80
        )
        assert policy["premium_amount"] == 288.00

    def test_one_month_from_january_31_ends_in_february(self, client, auth_headers):
        landlord, property_, tenant = _parties(client, auth_headers)

        policy = create_policy(
            client, auth_headers, landlord["id"], property_["id"], tenant["id"], coverage_months=1
        )

        assert policy["end_date"] == "2024-02-29"
        assert policy["premium_amount"] == 45.00

    def test_derived_fields_cannot_be_sent(self, client, auth_headers):
        landlord, property_, tenant = _parties(client, auth_headers)
        base = {
            "landlord_id": landlord["id"],
            "property_id": property_["id"],
            "tenant_id": tenant["id"],
            "coverage_months": 12,
            "risk_score": 40,
            "decision": "accept",
            "start_date": "2024-01-31",
        }

        for field, value in (("end_date", "2030-01-01"), ("premium_amount", 1), ("policy_number", "X")):
            response = client.post("/api/policies", headers=auth_headers, json={**base, field: value})
            assert response.status_code == 422, field

    def test_zero_coverage_rejected(self, client, auth_headers):
        landlord, property_, tenant = _parties(client, auth_headers)
        response = client.post(
            "/api/policies",
            headers=auth_headers,
            json={
                "landlord_id": landlord["id"],
                "property_id": property_["id"],
                "tenant_id": tenant["id"],
                "coverage_months": 0,
                "risk_score": 40,
                "decision": "accept",
                "start_date": "2024-01-31",
            },
        )
        assert response.status_code == 422

    def test_score_without_decision_rejected(self, client, auth_headers):
        landlord, property_, tenant = _parties(client, auth_headers)
        response = client.post(
            "/api/policies",
            headers=auth_headers,
            json={
                "landlord_id": landlord["id"],
                "property_id": property_["id"],
                "tenant_id": tenant["id"],
                "coverage_months": 12,
                "risk_score": 40,
                "start_date": "2024-01-31",
            },
        )
        assert response.status_code == 422


class TestPolicyReferences:
    def test_other_users_tenant_is_reference_error(self, client, user_a_headers, user_b_headers):
        _, _, foreign_tenant = _parties(client, user_a_headers)
        landlord = create_landlord(client, user_b_headers)
        property_ = create_property(client, user_b_headers, landlord["id"])

        response = client.post(
            "/api/policies",
            headers=user_b_headers,
            json={
                "landlord_id": landlord["id"],
                "property_id": property_["id"],
                "tenant_id": foreign_tenant["id"],
                "coverage_months": 12,
                "risk_score": 40,
                "decision": "accept",
                "start_date": "2024-01-31",
            },
        )

        assert response.status_code == 403
        assert response.json() == {
            "ok": False,
            "error": {"kind": "reference_error", "message": "Invalid tenant."},
        }

    def test_property_of_another_landlord_rejected(self, client, auth_headers):
        landlord, property_, tenant = _parties(client, auth_headers)
        other = create_landlord(client, auth_headers, name="Other")

        response = client.post(
            "/api/policies",
            headers=auth_headers,
            json={
                "landlord_id": other["id"],
                "property_id": property_["id"],
                "tenant_id": tenant["id"],
                "coverage_months": 12,
                "risk_score": 40,
                "decision": "accept",
                "start_date": "2024-01-31",
            },
        )

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Invalid property."

    def test_tenant_of_another_property_rejected(self, client, auth_headers):
        landlord, property_, _ = _parties(client, auth_headers)
        other_property = create_property(client, auth_headers, landlord["id"], name="Annex")
        other_tenant = create_tenant(client, auth_headers, other_property["id"], email="o@example.com")

        response = client.post(
            "/api/policies",
            headers=auth_headers,
            json={
                "landlord_id": landlord["id"],
                "property_id": property_["id"],
                "tenant_id": other_tenant["id"],
                "coverage_months": 12,
                "risk_score": 40,
                "decision": "accept",
                "start_date": "2024-01-31",
            },
        )

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Invalid tenant."

    def test_tenant_already_insured(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)

        response = client.post(
            "/api/policies",
            headers=auth_headers,
            json={
                "landlord_id": chain["landlord"]["id"],
                "property_id": chain["property"]["id"],
                "tenant_id": chain["tenant"]["id"],
                "coverage_months": 6,
                "risk_score": 40,
                "decision": "accept",
                "start_date": "2024-06-01",
            },
        )

        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "conflict"
        assert client.get("/api/policies", headers=auth_headers).json()["total"] == 1


class TestRiskScoring:
    def test_missing_score_without_scorer(self, client, auth_headers):
        landlord, property_, tenant = _parties(client, auth_headers)

        response = client.post(
            "/api/policies",
            headers=auth_headers,
            json={
                "landlord_id": landlord["id"],
                "property_id": property_["id"],
                "tenant_id": tenant["id"],
                "coverage_months": 12,
                "start_date": "2024-01-31",
            },
        )

        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "validation_error"

    def test_scorer_fills_missing_score(self, client, auth_headers):
        landlord, property_, tenant = _parties(client, auth_headers)
        scorer = FixedScorer("80", RiskDecision.CONDITIONAL_ACCEPT)
        app.dependency_overrides[get_risk_scorer] = lambda: scorer

        response = client.post(
            "/api/policies",
            headers=auth_headers,
            json={
                "landlord_id": landlord["id"],
                "property_id": property_["id"],
                "tenant_id": tenant["id"],
                "coverage_months": 12,
                "start_date": "2024-01-31",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["risk_score"] == 80.0
        assert body["decision"] == "conditional_accept"
        assert body["premium_amount"] == 288.00
        assert scorer.calls == [(property_["id"], tenant["id"])]

    def test_caller_score_wins_over_scorer(self, client, auth_headers):
        landlord, property_, tenant = _parties(client, auth_headers)
        scorer = FixedScorer("80", RiskDecision.ACCEPT)
        app.dependency_overrides[get_risk_scorer] = lambda: scorer

        policy = create_policy(client, auth_headers, landlord["id"], property_["id"], tenant["id"])

        assert policy["premium_amount"] == 540.00
        assert scorer.calls == []

    def _scored_request(self, client, headers, scorer):
        landlord, property_, tenant = _parties(client, headers)
        app.dependency_overrides[get_risk_scorer] = lambda: scorer
        return client.post(
            "/api/policies",
            headers=headers,
            json={
                "landlord_id": landlord["id"],
                "property_id": property_["id"],
                "tenant_id": tenant["id"],
                "coverage_months": 12,
                "start_date": "2024-01-31",
            },
        )

    def test_scorer_score_rounded_before_pricing(self, client, auth_headers):
        """49.999 is stored as 50.00, so the premium uses the 50+ bracket"""
        response = self._scored_request(client, auth_headers, FixedScorer("49.999", RiskDecision.ACCEPT))

        assert response.status_code == 201
        body = response.json()
        assert body["risk_score"] == 50.0
        assert body["premium_amount"] == 360.00
        assert Decimal(str(body["premium_amount"])) == compute_premium(
            Decimal("1000"), body["coverage_months"], Decimal(str(body["risk_score"]))
        )

    @pytest.mark.parametrize("score", ["120", "-1", "NaN"])
    def test_out_of_range_scorer_score_rejected(self, client, auth_headers, score):
        response = self._scored_request(client, auth_headers, FixedScorer(score, RiskDecision.ACCEPT))

        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "validation_error"
        assert client.get("/api/policies", headers=auth_headers).json()["total"] == 0


class TestPolicyLifecycle:
    def test_cancel_active_policy(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)

        response = client.patch(
            f"/api/policies/{chain['policy']['id']}/status",
            headers=auth_headers,
            json={"status": "cancelled"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_final_status_logged(self, client, auth_headers, caplog):
        chain = insured_chain(client, auth_headers)

        with caplog.at_level("INFO", logger="app.services.policy_service"):
            client.patch(
                f"/api/policies/{chain['policy']['id']}/status",
                headers=auth_headers,
                json={"status": "expired"},
            )

        assert "moved from active to expired (final)" in caplog.text

    def test_terminal_status_cannot_reactivate(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        url = f"/api/policies/{chain['policy']['id']}/status"
        client.patch(url, headers=auth_headers, json={"status": "expired"})

        response = client.patch(url, headers=auth_headers, json={"status": "active"})
        assert response.status_code == 409

        response = client.patch(url, headers=auth_headers, json={"status": "cancelled"})
        assert response.status_code == 409

    def test_same_status_is_noop(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)

        response = client.patch(
            f"/api/policies/{chain['policy']['id']}/status",
            headers=auth_headers,
            json={"status": "active"},
        )
        assert response.status_code == 200

    def test_other_fields_not_patchable(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)

        response = client.patch(
            f"/api/policies/{chain['policy']['id']}", headers=auth_headers, json={"coverage_months": 3}
        )
        assert response.status_code == 405


class TestPolicyDeletion:
    def test_delete_policy_without_claims(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)

        response = client.delete(f"/api/policies/{chain['policy']['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert client.get(f"/api/policies/{chain['policy']['id']}", headers=auth_headers).status_code == 404
        # tenant can be insured again
        create_policy(
            client,
            auth_headers,
            chain["landlord"]["id"],
            chain["property"]["id"],
            chain["tenant"]["id"],
        )

    def test_any_claim_blocks_deletion(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])
        client.patch(f"/api/claims/{claim['id']}", headers=auth_headers, json={"status": "rejected"})

        response = client.delete(f"/api/policies/{chain['policy']['id']}", headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["error"]["message"] == "Cannot delete policy with active claims."
        assert client.get(f"/api/policies/{chain['policy']['id']}", headers=auth_headers).status_code == 200

    def test_delete_other_users_policy(self, client, user_a_headers, user_b_headers):
        chain = insured_chain(client, user_a_headers)

        response = client.delete(f"/api/policies/{chain['policy']['id']}", headers=user_b_headers)
        assert response.status_code == 404


class TestPolicyNotifications:
    def test_issue_notifies_landlord(self, client, auth_headers, notifier):
        chain = insured_chain(client, auth_headers)

        recipient, template_kind, payload = notifier.sent[-1]
        assert recipient == "sami@example.com"
        assert template_kind == TemplateKind.POLICY_ISSUED
        assert payload["policy_number"] == chain["policy"]["policy_number"]
        assert payload["end_date"] == "2025-01-31"
        assert payload["currency"] == "TND"

    def test_failing_notifier_does_not_undo_issuance(self, client, auth_headers):
        class BrokenNotifier:
            def send(self, recipient, template_kind, payload):
                raise ConnectionError("smtp down")

        app.dependency_overrides[get_notifier] = lambda: BrokenNotifier()
        chain = insured_chain(client, auth_headers)

        assert client.get(f"/api/policies/{chain['policy']['id']}", headers=auth_headers).status_code == 200


class TestPolicyDocument:
    def test_document_unavailable_without_renderer(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)

        response = client.get(f"/api/policies/{chain['policy']['id']}/document", headers=auth_headers)

        assert response.status_code == 503
        assert response.json()["error"]["kind"] == "collaborator_unavailable"

    def test_document_rendered_from_detail(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        app.dependency_overrides[get_document_renderer] = lambda: FakeRenderer()

        response = client.get(f"/api/policies/{chain['policy']['id']}/document", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert chain["policy"]["policy_number"].encode() in response.content
        assert b"Amira Trabelsi" in response.content

    def test_document_of_unknown_policy(self, client, auth_headers):
        app.dependency_overrides[get_document_renderer] = lambda: FakeRenderer()

        response = client.get("/api/policies/9999/document", headers=auth_headers)
        assert response.status_code == 404
