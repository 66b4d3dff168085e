"""
Company settings actions.

Settings are stored as JSON on the tenant. The `time_entries` block
overrides the process-wide time-entry rules for that company.
"""
from dataclasses import asdict
from typing import Optional

from ..audit.recorder import AuditOperation, snapshot_of
from ..auth.permissions import Operation, PermissionScope
from ..database.models import Tenant
from ..errors import Conflict, NotFound
from ..schemas.settings import EffectiveRules, SettingsResponse, SettingsUpdateRequest
from .base import ActionResult, ActionServices

RESOURCE = "settings"
ENTITY = "Tenant"
ROUTES = ("/admin/settings",)

TIME_ENTRIES_KEY = "time_entries"


def _settings_response(services: ActionServices, tenant: Tenant) -> SettingsResponse:
    rules = services.rules_for(tenant.id)
    return SettingsResponse(
        tenant_id=tenant.id,
        name=tenant.name,
        domain=tenant.domain,
        settings=tenant.settings or {},
        time_entry_rules=EffectiveRules(**asdict(rules)),
    )


# PUBLIC_INTERFACE
def get_settings(services: ActionServices, token: Optional[str]) -> ActionResult:
    with services.action(token, "get_settings") as action:
        action.resolve()
        company_id = action.company_id()
        action.authorize(RESOURCE, Operation.READ, PermissionScope(company_id=company_id))
        tenant = services.db.get(Tenant, company_id)
        if tenant is None:
            raise NotFound("Company", company_id)
        return action.succeed(_settings_response(services, tenant))
    return action.result


# PUBLIC_INTERFACE
def update_settings(services: ActionServices, token: Optional[str],
                    request: SettingsUpdateRequest) -> ActionResult:
    """
    Update the caller's company settings.

    Preferences and time-entry overrides are merged into the stored settings;
    keys that are not sent keep their value.
    """
    with services.action(token, "update_settings") as action:
        action.resolve()
        company_id = action.company_id()
        action.authorize(RESOURCE, Operation.UPDATE, PermissionScope(company_id=company_id))
        tenant = services.db.get(Tenant, company_id)
        if tenant is None:
            raise NotFound("Company", company_id)

        if request.name is not None:
            tenant.name = request.name
        if "domain" in request.model_fields_set:
            tenant.domain = request.domain

        settings = dict(tenant.settings or {})
        if request.preferences:
            settings.update({key: value for key, value in request.preferences.items()
                             if key != TIME_ENTRIES_KEY})
        if request.time_entries is not None:
            overrides = dict(settings.get(TIME_ENTRIES_KEY) or {})
            overrides.update(request.time_entries.model_dump(mode="json", exclude_none=True))
            settings[TIME_ENTRIES_KEY] = overrides
        tenant.settings = settings

        action.persist(tenant, conflict=Conflict(f"A company named '{tenant.name}' already exists"))
        action.record(AuditOperation.UPDATE, ENTITY, tenant.id, snapshot_of(tenant))
        action.invalidate(*ROUTES)
        return action.succeed(_settings_response(services, tenant))
    return action.result
