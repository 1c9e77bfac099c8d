"""Database models."""
from reelvote.db.models.reel import Reel
from reelvote.db.models.voter import Voter
from reelvote.db.models.token import Token
from reelvote.db.models.vote import Vote
from reelvote.db.models.aggregate import VoteAggregate

__all__ = ["Reel", "Voter", "Token", "Vote", "VoteAggregate"]
