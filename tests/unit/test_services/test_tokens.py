"""Unit tests for token service."""
import pytest

from reelvote.db.models import Token
from reelvote.schemas import TokenIssue
from reelvote.services import attach_voter, claim_token, get_token_by_code, issue_tokens


@pytest.mark.unit
class TestTokenLookup:

    def test_lookup_by_code(self, db_session, audience_token):
        token = get_token_by_code(db_session, "AUD123")
        assert token.id == audience_token.id
        assert token.person_name == "Maya Lin"

    def test_lookup_unknown_code(self, db_session, audience_token):
        assert get_token_by_code(db_session, "NOPE99") is None


@pytest.mark.unit
class TestClaimToken:

    def test_first_claim_binds_device(self, db_session, audience_token):
        token = claim_token(db_session, audience_token.id, "device-a")

        assert token.is_used is True
        assert token.device_id == "device-a"
        assert token.used_at is not None

    def test_second_device_loses(self, db_session, audience_token):
        """Only the first claim matches the is_used = false row."""
        claim_token(db_session, audience_token.id, "device-a")
        token = claim_token(db_session, audience_token.id, "device-b")

        assert token.device_id == "device-a"
        assert db_session.query(Token).filter(Token.device_id == "device-b").count() == 0

    def test_same_device_claim_is_idempotent(self, db_session, audience_token):
        first = claim_token(db_session, audience_token.id, "device-a")
        first_used_at = first.used_at

        again = claim_token(db_session, audience_token.id, "device-a")

        assert again.device_id == "device-a"
        assert again.used_at == first_used_at

    def test_claim_unknown_token(self, db_session):
        assert claim_token(db_session, 9999, "device-a") is None


@pytest.mark.unit
class TestAttachVoter:

    def test_attach(self, db_session, audience_token, voter):
        token = attach_voter(db_session, audience_token.id, voter.id)
        assert token.voter_id == voter.id

    def test_attach_unknown_token(self, db_session, voter):
        assert attach_voter(db_session, 9999, voter.id) is None


@pytest.mark.unit
class TestIssueTokens:

    def test_issue_creates_unused_tokens(self, db_session):
        issued = issue_tokens(db_session, [
            TokenIssue(person_name="Judge Okoye", token_type="judge"),
            TokenIssue(person_name="Sam Park", category="Fiction"),
        ])

        assert len(issued) == 2
        assert len({token.token for token in issued}) == 2
        assert all(not token.is_used for token in issued)
        assert issued[0].token_type == "judge"
        assert issued[1].category == "Fiction"
        assert get_token_by_code(db_session, issued[0].token).person_name == "Judge Okoye"
