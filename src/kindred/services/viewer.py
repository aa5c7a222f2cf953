"""Request-scoped view of the caller."""
from __future__ import annotations

from sqlalchemy.orm import Session

from kindred.core.errors import UnauthorizedError
from kindred.models import Profile
from kindred.services.follows import following_ids


class ViewerContext:
    """Who is asking, plus lazily cached facts about them.

    One instance lives for one request. Anything that changes the follow
    edges or the profile of the viewer must call the matching
    ``invalidate_*`` method before reading again.
    """

    def __init__(self, db: Session, viewer_id: str | None) -> None:
        self.db = db
        self.viewer_id = viewer_id
        self._following_ids: frozenset[str] | None = None
        self._profile: Profile | None = None
        self._profile_loaded = False

    @property
    def is_authenticated(self) -> bool:
        return self.viewer_id is not None

    def require_user_id(self) -> str:
        if self.viewer_id is None:
            raise UnauthorizedError()
        return self.viewer_id

    @property
    def following_ids(self) -> frozenset[str]:
        """Ids the viewer follows; empty for anonymous viewers."""
        if self._following_ids is None:
            if self.viewer_id is None:
                self._following_ids = frozenset()
            else:
                self._following_ids = frozenset(following_ids(self.db, self.viewer_id))
        return self._following_ids

    @property
    def profile(self) -> Profile | None:
        if not self._profile_loaded:
            self._profile = self.db.get(Profile, self.viewer_id) if self.viewer_id else None
            self._profile_loaded = True
        return self._profile

    def invalidate_following(self) -> None:
        self._following_ids = None

    def invalidate_profile(self) -> None:
        self._profile = None
        self._profile_loaded = False
