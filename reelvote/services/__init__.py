from .aggregates import get_aggregate, list_aggregates, refresh_aggregate
from .reels import create_reel, derive_categories, get_active_reels, get_reel
from .tokens import attach_voter, claim_token, get_token_by_code, issue_tokens
from .voters import find_voter_by_email, get_voter, link_identity, upsert_voter
from .votes import clear_all_votes, get_vote, upsert_vote

__all__ = [
    # aggregates
    "get_aggregate",
    "list_aggregates",
    "refresh_aggregate",
    # reels
    "create_reel",
    "derive_categories",
    "get_active_reels",
    "get_reel",
    # tokens
    "attach_voter",
    "claim_token",
    "get_token_by_code",
    "issue_tokens",
    # voters
    "find_voter_by_email",
    "get_voter",
    "link_identity",
    "upsert_voter",
    # votes
    "clear_all_votes",
    "get_vote",
    "upsert_vote",
]
