"""
Access code validation, team registration and session recovery

Joining is a best-effort idempotent upsert on (access_code, team_name).
Two first joiners racing each other can still create two rows; the
leaderboard collapses such duplicates by team name.
"""
import logging
from typing import List, Optional

from enigma.core.store import DataStore
from enigma.errors import InvalidCode, SessionStale
from enigma.models import AccessCheck, AccessCode, GameSettings, Registration, SessionDescriptor, Team
from enigma.services.session_cache import SessionCache
from enigma.utils import hash_string_to_int, merge_names


logger = logging.getLogger(__name__)


async def require_access_code(store: DataStore, code: str) -> AccessCode:
    """
    Fetch an access code that can be used to join

    Raises:
        InvalidCode: empty, unknown or inactive code
    """
    if not code or not code.strip():
        raise InvalidCode("Access code cannot be empty")
    access_code = await store.get_access_code(code)
    if access_code is None or not access_code.active:
        raise InvalidCode("Invalid access code")
    return access_code


async def validate_access_code(
    store: DataStore,
    code: str,
    team_name: Optional[str] = None,
) -> AccessCheck:
    """
    Validate an access code and look for an existing team to join

    Args:
        store: Data store
        code: Access code as typed (case-sensitive)
        team_name: Optional team name to look up under this code

    Returns:
        AccessCheck; existing_team_id is set when a team with that name exists
    """
    try:
        access_code = await require_access_code(store, code)
    except InvalidCode as e:
        return AccessCheck(valid=False, error=str(e))

    existing = None
    if team_name:
        existing = await store.find_team(code, team_name)

    return AccessCheck(
        valid=True,
        section=access_code.section,
        existing_team_id=existing.id if existing else None,
    )


async def register_or_join_team(
    store: DataStore,
    access_code: str,
    team_name: str,
    members: List[str],
    cache: Optional[SessionCache] = None,
    max_members: Optional[int] = None,
) -> Registration:
    """
    Create the team row for (access_code, team_name) or join the existing one

    The first member listed becomes this client's display name.

    Args:
        store: Data store
        access_code: Access code
        team_name: Team name
        members: Member names entered on this client
        cache: Where to persist the session descriptor on success
        max_members: Upper bound on team size (default from GameSettings)

    Returns:
        Registration with the team id, or an error message
    """
    if max_members is None:
        max_members = GameSettings().max_members

    names = merge_names([], members)
    if not names:
        return Registration(error="At least one member name is required")
    if not team_name or not team_name.strip():
        return Registration(error="Team name is required")
    team_name = team_name.strip()

    check = await validate_access_code(store, access_code, team_name)
    if not check.valid:
        return Registration(error=check.error)

    if check.existing_team_id:
        team = await store.get_team(check.existing_team_id)
    else:
        team = None

    if team is not None:
        merged = merge_names(team.members, names)
        if len(merged) > max_members:
            return Registration(error=f"Team is full ({max_members} members max)")
        if len(merged) != len(team.members):
            team = await store.update_team(team.id, {"members": merged})
        logger.info(f"🤝 Joined team '{team_name}' ({team.id}) with {len(team.members)} members")
    else:
        if len(names) > max_members:
            return Registration(error=f"Team is full ({max_members} members max)")
        team = await store.create_team({
            "team_name": team_name,
            "access_code": access_code,
            "section": check.section,
            "members": names,
            "question_seed": hash_string_to_int(access_code),
        })
        logger.info(f"✅ Created team '{team_name}' ({team.id}) in section {check.section}")

    if cache is not None:
        cache.save(SessionDescriptor(
            team_id=team.id,
            member_display_name=names[0],
            section=team.section,
            access_code=access_code,
            team_name=team_name,
        ))

    return Registration(team_id=team.id)


async def recover_team(store: DataStore, descriptor: SessionDescriptor) -> Team:
    """
    Re-fetch the team a session points at

    Tries the cached id, then (access_code, team_name), then the access
    code alone.

    Raises:
        SessionStale: nothing matched; the user has to join again
    """
    team = await store.get_team(descriptor.team_id)
    if team is not None:
        return team

    logger.warning(f"Team {descriptor.team_id} not found, retrying by team name")
    team = await store.find_team(descriptor.access_code, descriptor.team_name)
    if team is not None:
        return team

    logger.warning(f"No team '{descriptor.team_name}' under code, falling back to access code only")
    team = await store.find_team(descriptor.access_code)
    if team is not None:
        return team

    raise SessionStale(f"No team found for session {descriptor.team_id}")
