"""Main API router for v1."""
from fastapi import APIRouter

from reelvote.api.v1.endpoints import admin, auth, realtime, reels, sse, stats, tokens, voters, votes

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(reels.router, prefix="/reels", tags=["Reels"])
api_router.include_router(voters.router, prefix="/voters", tags=["Voters"])
api_router.include_router(tokens.router, prefix="/tokens", tags=["Tokens"])
api_router.include_router(votes.router, prefix="/votes", tags=["Votes"])
api_router.include_router(stats.router, prefix="/stats", tags=["Stats"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(sse.router, tags=["SSE"])
api_router.include_router(realtime.router, tags=["Realtime"])
