"""Provider setting helpers for FindingStore."""

import json

from penpard.db.models import ProviderSetting


class ProviderSettingMixin:
    """Provide stored text-generation provider settings."""

    def get_active_provider_setting(self) -> ProviderSetting | None:
        return self.session.query(ProviderSetting).filter_by(is_active=True).first()

    def save_provider_setting(
        self,
        provider: str,
        *,
        api_key: str | None = None,
        model: str | None = None,
        settings: dict | None = None,
        activate: bool = True,
    ) -> ProviderSetting:
        """Create or update a provider row; activating it deactivates the others."""
        provider = provider.lower()
        row = self.session.get(ProviderSetting, provider)
        if row is None:
            row = ProviderSetting(provider=provider)
            self.session.add(row)
        if api_key is not None:
            row.api_key = api_key
        if model is not None:
            row.model = model
        if settings is not None:
            row.settings_json = json.dumps(settings)
        if activate:
            for other in self.session.query(ProviderSetting).filter(
                ProviderSetting.provider != provider
            ):
                other.is_active = False
            row.is_active = True
        self.session.commit()
        return row
