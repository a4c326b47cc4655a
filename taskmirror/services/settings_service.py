from __future__ import annotations

from typing import Any, Mapping, Union

from taskmirror.domain.entities import SettingsEntity
from taskmirror.domain.parsing import settings_patch_from_payload
from taskmirror.domain.patches import SettingsPatch
from taskmirror.infra.credentials import SettingsRepository


class SettingsService:
    def __init__(self, repo: SettingsRepository) -> None:
        self._repo = repo

    def get_settings(self) -> SettingsEntity:
        return self._repo.get()

    def update_settings(self, data: Union[Mapping[str, Any], SettingsPatch]) -> SettingsEntity:
        patch = data if isinstance(data, SettingsPatch) else settings_patch_from_payload(data)
        if patch.is_empty():
            return self._repo.get()
        return self._repo.update(patch)
