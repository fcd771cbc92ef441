"""Team Roster — in-memory directory of assignable members.

The record engine only reads from it: name lookups at assignment time and
member counts for workload figures.
"""

from dataclasses import replace
from typing import Iterable, Optional

from ..errors import NotFound
from ..models.roster import RosterMember
from ..utils.logging import get_logger

logger = get_logger("collaborators.roster")


class TeamRoster:
    """Directory of team members keyed by id, in registration order."""

    def __init__(self, members: Iterable[RosterMember] = ()):
        self._members: dict[str, RosterMember] = {}
        for member in members:
            self.add(member)

    def add(self, member: RosterMember) -> None:
        """Register (or replace) a member."""
        self._members[member.id] = member

    def update_member(self, member_id: str, **changes) -> RosterMember:
        """Replace fields of an existing member, e.g. a rename."""
        member = self.resolve(member_id)
        updated = replace(member, **changes)
        self._members[member_id] = updated
        logger.info("roster_member_updated", member_id=member_id, fields=sorted(changes))
        return updated

    def get(self, member_id: Optional[str]) -> Optional[RosterMember]:
        if member_id is None:
            return None
        return self._members.get(member_id)

    def resolve(self, member_id: str) -> RosterMember:
        """Return the member or raise NotFound."""
        member = self.get(member_id)
        if member is None:
            raise NotFound("roster_member", member_id)
        return member

    def members(self) -> list[RosterMember]:
        return list(self._members.values())

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, member_id: object) -> bool:
        return member_id in self._members
