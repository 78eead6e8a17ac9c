from app.services.collaborators import TemplateKind
from tests.conftest import create_claim, insured_chain


class TestClaimFiling:
    def test_file_claim_against_active_policy(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)

        claim = create_claim(client, auth_headers, chain["policy"]["id"])

        assert claim["status"] == "pending"
        assert claim["policy_id"] == chain["policy"]["id"]
        assert claim["claim_number"].startswith("CLM-")
        assert claim["amount_requested"] == 2000.0
        assert claim["evidence_links"] == ["https://files.example.com/claims/lease.pdf"]

    def test_status_cannot_be_set_on_filing(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)

        response = client.post(
            "/api/claims",
            headers=auth_headers,
            json={"policy_id": chain["policy"]["id"], "amount_requested": 100, "status": "paid"},
        )
        assert response.status_code == 422

    def test_non_positive_amount_rejected(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)

        response = client.post(
            "/api/claims",
            headers=auth_headers,
            json={"policy_id": chain["policy"]["id"], "amount_requested": 0},
        )
        assert response.status_code == 422

    def test_invalid_evidence_link_rejected(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)

        response = client.post(
            "/api/claims",
            headers=auth_headers,
            json={
                "policy_id": chain["policy"]["id"],
                "amount_requested": 100,
                "evidence_links": ["not a url"],
            },
        )
        assert response.status_code == 422

    def test_cancelled_policy_rejects_claims(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        client.patch(
            f"/api/policies/{chain['policy']['id']}/status",
            headers=auth_headers,
            json={"status": "cancelled"},
        )

        response = client.post(
            "/api/claims",
            headers=auth_headers,
            json={"policy_id": chain["policy"]["id"], "amount_requested": 500},
        )

        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "conflict"

    def test_other_users_policy_is_reference_error(self, client, user_a_headers, user_b_headers):
        chain = insured_chain(client, user_a_headers)

        response = client.post(
            "/api/claims",
            headers=user_b_headers,
            json={"policy_id": chain["policy"]["id"], "amount_requested": 500},
        )

        assert response.status_code == 403
        assert response.json()["error"] == {"kind": "reference_error", "message": "Invalid policy."}

    def test_claim_numbers_are_unique(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)

        first = create_claim(client, auth_headers, chain["policy"]["id"])
        second = create_claim(client, auth_headers, chain["policy"]["id"])

        assert first["claim_number"] != second["claim_number"]


class TestClaimReview:
    def test_pending_cannot_jump_to_paid(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])

        response = client.patch(f"/api/claims/{claim['id']}", headers=auth_headers, json={"status": "paid"})

        assert response.status_code == 409
        assert client.get(f"/api/claims/{claim['id']}", headers=auth_headers).json()["claim"]["status"] == "pending"

    def test_review_approve_pay(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])
        url = f"/api/claims/{claim['id']}"

        for target in ("under_review", "approved", "paid"):
            response = client.patch(url, headers=auth_headers, json={"status": target})
            assert response.status_code == 200, target
            assert response.json()["status"] == target

    def test_rejected_is_final(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])
        url = f"/api/claims/{claim['id']}"
        client.patch(url, headers=auth_headers, json={"status": "rejected"})

        response = client.patch(url, headers=auth_headers, json={"status": "under_review"})
        assert response.status_code == 409

    def test_policy_id_not_patchable(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])

        response = client.patch(f"/api/claims/{claim['id']}", headers=auth_headers, json={"policy_id": 99})
        assert response.status_code == 422

    def test_update_evidence_and_notes(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])

        response = client.patch(
            f"/api/claims/{claim['id']}",
            headers=auth_headers,
            json={
                "evidence_links": [
                    "https://files.example.com/claims/lease.pdf",
                    "https://files.example.com/claims/notice.pdf",
                ],
                "notes": "Formal notice sent",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["evidence_links"]) == 2
        assert body["notes"] == "Formal notice sent"
        assert body["status"] == "pending"

    def test_rejected_transition_applies_no_other_field(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])

        response = client.patch(
            f"/api/claims/{claim['id']}",
            headers=auth_headers,
            json={"status": "paid", "notes": "should not stick"},
        )

        assert response.status_code == 409
        detail = client.get(f"/api/claims/{claim['id']}", headers=auth_headers).json()
        assert detail["claim"]["notes"] == claim["notes"]


class TestClaimDeletion:
    def test_delete_pending_claim(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])

        response = client.delete(f"/api/claims/{claim['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert client.get(f"/api/claims/{claim['id']}", headers=auth_headers).status_code == 404

    def test_approved_claim_is_kept(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])
        client.patch(f"/api/claims/{claim['id']}", headers=auth_headers, json={"status": "approved"})

        response = client.delete(f"/api/claims/{claim['id']}", headers=auth_headers)
        assert response.status_code == 409

    def test_policy_deletable_after_last_claim_removed(self, client, auth_headers):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])
        client.delete(f"/api/claims/{claim['id']}", headers=auth_headers)

        response = client.delete(f"/api/policies/{chain['policy']['id']}", headers=auth_headers)
        assert response.status_code == 204


class TestClaimNotifications:
    def test_filing_notifies_landlord(self, client, auth_headers, notifier):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])

        recipient, template_kind, payload = notifier.sent[-1]
        assert recipient == "sami@example.com"
        assert template_kind == TemplateKind.CLAIM_FILED
        assert payload["claim_number"] == claim["claim_number"]
        assert payload["policy_number"] == chain["policy"]["policy_number"]

    def test_status_change_notifies_with_previous_status(self, client, auth_headers, notifier):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])

        client.patch(f"/api/claims/{claim['id']}", headers=auth_headers, json={"status": "under_review"})

        _, template_kind, payload = notifier.sent[-1]
        assert template_kind == TemplateKind.CLAIM_STATUS_CHANGED
        assert payload["previous_status"] == "pending"
        assert payload["status"] == "under_review"

    def test_notes_only_update_sends_nothing(self, client, auth_headers, notifier):
        chain = insured_chain(client, auth_headers)
        claim = create_claim(client, auth_headers, chain["policy"]["id"])
        sent_before = len(notifier.sent)

        client.patch(f"/api/claims/{claim['id']}", headers=auth_headers, json={"notes": "call tenant"})

        assert len(notifier.sent) == sent_before
