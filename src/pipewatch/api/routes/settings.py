"""Settings endpoints."""

import logging

from fastapi import APIRouter

from pipewatch.api.dependencies import SchedulerDep
from pipewatch.api.models import (
    APIResponse,
    SettingsResponse,
    SettingsUpdate,
    settings_to_response,
)
from pipewatch.config import normalize_base_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=APIResponse[SettingsResponse])
def get_settings(scheduler: SchedulerDep) -> APIResponse[SettingsResponse]:
    """Get the current settings (the token is never returned)."""
    return APIResponse(data=settings_to_response(scheduler.settings))


@router.put("", response_model=APIResponse[SettingsResponse])
async def update_settings(
    update: SettingsUpdate, scheduler: SchedulerDep
) -> APIResponse[SettingsResponse]:
    """Update settings.

    Changing the instance URL, the token or the interval restarts the monitor
    so that the new values take effect and no status baseline carries over.
    """
    current = scheduler.settings
    changes = update.model_dump(exclude_unset=True)
    if "base_url" in changes and changes["base_url"] is not None:
        changes["base_url"] = normalize_base_url(changes["base_url"])
    updated = current.with_updates(**changes)

    scheduler.update_settings(updated)

    needs_restart = (
        current.credentials_changed(updated)
        or current.effective_interval != updated.effective_interval
    )
    if needs_restart:
        logger.info("Settings changed, restarting monitor")
        await scheduler.restart()

    return APIResponse(data=settings_to_response(updated))
