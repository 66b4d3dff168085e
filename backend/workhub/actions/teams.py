"""
Team actions.

Teams group users of one company. Members and managers must belong to the
same company as the team.
"""
from typing import Optional
from uuid import UUID

from ..audit.recorder import AuditOperation, snapshot_of
from ..auth.permissions import Operation, PermissionScope
from ..database.models import Team, User
from ..errors import Conflict, NotFound
from ..schemas.teams import TeamCreateRequest, TeamResponse, TeamUpdateRequest
from .base import ActionResult, ActionServices

RESOURCE = "teams"
ENTITY = "Team"
ROUTES = ("/admin/teams",)

DUPLICATE_TEAM = "DUPLICATE_TEAM"
ALREADY_MEMBER = "ALREADY_MEMBER"


def _duplicate_name(name: str) -> Conflict:
    return Conflict(f"A team named '{name}' already exists", DUPLICATE_TEAM)


def _team_snapshot(team: Team) -> dict:
    snapshot = snapshot_of(team)
    snapshot["member_ids"] = [str(member.id) for member in team.members]
    return snapshot


# PUBLIC_INTERFACE
def list_teams(services: ActionServices, token: Optional[str]) -> ActionResult:
    with services.action(token, "list_teams") as action:
        action.resolve()
        action.authorize(RESOURCE, Operation.READ)
        teams = action.query(Team).order_by(Team.name).all()
        return action.succeed([TeamResponse.model_validate(team) for team in teams])
    return action.result


# PUBLIC_INTERFACE
def create_team(services: ActionServices, token: Optional[str],
                request: TeamCreateRequest) -> ActionResult:
    """Create a team in the caller's company."""
    with services.action(token, "create_team") as action:
        action.resolve()
        company_id = action.company_id()
        action.authorize(RESOURCE, Operation.CREATE, PermissionScope(company_id=company_id))
        if request.manager_id:
            action.load(User, request.manager_id, label="Manager")

        team = Team(
            tenant_id=company_id,
            name=request.name,
            description=request.description,
            manager_id=request.manager_id,
        )
        action.persist(team, conflict=_duplicate_name(request.name))
        action.record(AuditOperation.CREATE, ENTITY, team.id, _team_snapshot(team))
        action.invalidate(*ROUTES)
        return action.succeed(TeamResponse.model_validate(team))
    return action.result


# PUBLIC_INTERFACE
def update_team(services: ActionServices, token: Optional[str], team_id: UUID,
                request: TeamUpdateRequest) -> ActionResult:
    with services.action(token, "update_team") as action:
        action.resolve()
        team = action.load(Team, team_id)
        action.authorize(RESOURCE, Operation.UPDATE,
                         PermissionScope(company_id=team.tenant_id), entity_id=team.id)

        changes = request.model_dump(exclude_unset=True)
        if changes.get("manager_id"):
            action.load(User, changes["manager_id"], label="Manager")
        for field_name, value in changes.items():
            if field_name == "name" and value is None:
                continue
            setattr(team, field_name, value)

        action.persist(team, conflict=_duplicate_name(team.name))
        action.record(AuditOperation.UPDATE, ENTITY, team.id, _team_snapshot(team),
                      tenant_id=team.tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed(TeamResponse.model_validate(team))
    return action.result


# PUBLIC_INTERFACE
def delete_team(services: ActionServices, token: Optional[str], team_id: UUID) -> ActionResult:
    with services.action(token, "delete_team") as action:
        action.resolve()
        team = action.load(Team, team_id)
        action.authorize(RESOURCE, Operation.DELETE,
                         PermissionScope(company_id=team.tenant_id), entity_id=team.id)

        snapshot = _team_snapshot(team)
        deleted_id, tenant_id = team.id, team.tenant_id
        action.remove(team)
        action.record(AuditOperation.DELETE, ENTITY, deleted_id, snapshot, tenant_id=tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed({"id": deleted_id})
    return action.result


# PUBLIC_INTERFACE
def add_team_member(services: ActionServices, token: Optional[str], team_id: UUID,
                    user_id: UUID) -> ActionResult:
    """Add a user of the same company to a team."""
    with services.action(token, "add_team_member") as action:
        action.resolve()
        team = action.load(Team, team_id)
        action.authorize(RESOURCE, Operation.UPDATE,
                         PermissionScope(company_id=team.tenant_id), entity_id=team.id)
        user = action.load(User, user_id)
        if user.tenant_id != team.tenant_id:
            raise NotFound("User", user_id)
        if user in team.members:
            raise Conflict(f"{user.name} is already a member of {team.name}", ALREADY_MEMBER)

        team.members.append(user)
        action.persist(team)
        action.record(AuditOperation.UPDATE, ENTITY, team.id, _team_snapshot(team),
                      details=f"Added member {user.id}", tenant_id=team.tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed(TeamResponse.model_validate(team))
    return action.result


# PUBLIC_INTERFACE
def remove_team_member(services: ActionServices, token: Optional[str], team_id: UUID,
                       user_id: UUID) -> ActionResult:
    with services.action(token, "remove_team_member") as action:
        action.resolve()
        team = action.load(Team, team_id)
        action.authorize(RESOURCE, Operation.UPDATE,
                         PermissionScope(company_id=team.tenant_id), entity_id=team.id)
        member = next((m for m in team.members if m.id == user_id), None)
        if member is None:
            raise NotFound("Team member", user_id)

        team.members.remove(member)
        action.persist(team)
        action.record(AuditOperation.UPDATE, ENTITY, team.id, _team_snapshot(team),
                      details=f"Removed member {user_id}", tenant_id=team.tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed(TeamResponse.model_validate(team))
    return action.result
