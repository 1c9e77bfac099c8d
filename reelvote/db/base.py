"""Database base class and model imports."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here so metadata.create_all sees them
from reelvote.db.models.reel import Reel  # noqa: F401, E402
from reelvote.db.models.voter import Voter  # noqa: F401, E402
from reelvote.db.models.token import Token  # noqa: F401, E402
from reelvote.db.models.vote import Vote  # noqa: F401, E402
from reelvote.db.models.aggregate import VoteAggregate  # noqa: F401, E402
