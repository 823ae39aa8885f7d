from sqlalchemy import update
from sqlalchemy.orm import Session

from mhyasi.models import User


def is_entitled(user: User, now: int) -> bool:
    """True while ``now`` (epoch ms) is inside the account's sales window."""
    return user.unlocked_until is not None and user.unlocked_until > now


def extend(db: Session, user_id: int, until_ms: int) -> None:
    # Overwrites; a shorter window replaces a longer one. Caller commits.
    db.execute(
        update(User)
        .where(User.id == user_id)
        .values(unlocked_until=until_ms)
        .execution_options(synchronize_session="fetch")
    )
