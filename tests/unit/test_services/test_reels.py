"""Unit tests for reel service."""
import pytest

from reelvote.db.models import Reel as ReelRow
from reelvote.schemas import ReelCreate
from reelvote.services import create_reel, derive_categories, get_active_reels


@pytest.mark.unit
class TestReels:

    def test_active_reels_in_screening_order(self, db_session, reels):
        result = get_active_reels(db_session)
        assert [reel.id for reel in result] == ["doc-1", "doc-2", "fic-1", "fic-2"]
        assert result[0].contestant == "Ana Ruiz"
        assert result[0].duration == 180

    def test_inactive_reels_hidden(self, db_session, reels):
        db_session.query(ReelRow).filter(ReelRow.id == "doc-2").update({"is_active": False})
        db_session.commit()

        assert "doc-2" not in [reel.id for reel in get_active_reels(db_session)]

    def test_categories_in_first_seen_order(self, db_session, reels):
        assert derive_categories(get_active_reels(db_session)) == ["Documentary", "Fiction"]

    def test_create_reel(self, db_session):
        reel = create_reel(db_session, ReelCreate(id="ani-1", number=1, contestant="Eve Sato", category="Animation"))
        assert reel.id == "ani-1"
        assert reel.category == "Animation"

    def test_duplicate_id(self, db_session, reels):
        with pytest.raises(ValueError, match="already exists"):
            create_reel(db_session, ReelCreate(id="doc-1", number=9, contestant="X Y", category="Documentary"))

    def test_duplicate_number_in_category(self, db_session, reels):
        with pytest.raises(ValueError, match="Reel number already used"):
            create_reel(db_session, ReelCreate(id="doc-9", number=1, contestant="X Y", category="Documentary"))
