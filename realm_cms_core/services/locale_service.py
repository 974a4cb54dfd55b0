"""
Locale registry service.

Translation rows may only be written for locales that exist, are active and
are enabled for the realm that owns the row.
"""

from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import select

from ..context.operation_context import operation
from ..db.db_realm_models import Locale, RealmLocale
from ..exceptions import ErrorCode, ValidationError
from .base_service import SessionManagedService

# Display names for the locales seeded by default
KNOWN_LOCALES: Dict[str, Dict[str, str]] = {
    "en": {"name": "English", "native_name": "English"},
    "nl": {"name": "Dutch", "native_name": "Nederlands"},
    "fr": {"name": "French", "native_name": "Français"},
}


class LocaleService(SessionManagedService):
    """Seeds and validates locales."""

    @operation()
    def ensure_locales(self, codes: Optional[Iterable[str]] = None) -> List[str]:
        """
        Insert any missing locales. Defaults to the configured supported locales.

        Returns the codes that were created.
        """
        locale_config = self.config.locales
        wanted = list(codes) if codes is not None else list(locale_config.supported_locales)
        existing = set(self.session.execute(select(Locale.code)).scalars())

        created = []
        for code in wanted:
            if code in existing:
                continue
            names = KNOWN_LOCALES.get(code, {"name": code, "native_name": code})
            self.session.add(
                Locale(
                    code=code,
                    name=names["name"],
                    native_name=names["native_name"],
                    is_default=code == locale_config.default_locale,
                    is_active=True,
                )
            )
            created.append(code)

        self.session.flush()
        if created:
            self.logger.info("Seeded locales", extra={"locale_codes": ",".join(created)})
        return created

    def active_codes(self) -> Set[str]:
        return set(
            self.session.execute(select(Locale.code).where(Locale.is_active.is_(True))).scalars()
        )

    def enabled_codes(self, realm_id: Optional[str] = None) -> Set[str]:
        """
        Active locales usable in ``realm_id``.

        A realm without its own locale set uses every active locale.
        """
        active = self.active_codes()
        if realm_id is None:
            return active
        rows = self.session.execute(
            select(RealmLocale.locale_code, RealmLocale.is_enabled).where(
                RealmLocale.realm_id == realm_id
            )
        ).all()
        if not rows:
            return active
        return {code for code, enabled in rows if enabled} & active

    def require_active(
        self,
        codes: Iterable[str],
        field_prefix: str = "translations",
        realm_id: Optional[str] = None,
    ) -> None:
        """
        Raise ValidationError for the first unknown, inactive or, when
        ``realm_id`` is given, realm-disabled locale code.

        The field path is ``<field_prefix>.<code>`` so forms can point at it.
        """
        enabled = self.enabled_codes(realm_id)
        for code in codes:
            if code not in enabled:
                raise ValidationError(
                    f"Unknown or inactive locale: {code}",
                    field=f"{field_prefix}.{code}",
                    error_code=ErrorCode.INVALID_FORMAT,
                    locale_code=code,
                    realm_id=realm_id,
                )

    @operation()
    def set_realm_locales(self, realm_id: str, codes: Iterable[str]) -> List[str]:
        """
        Replace the realm's enabled locale set with ``codes``.

        Locales dropped from the set are kept as disabled rows. Existing
        translations in a disabled locale are left alone; only new writes
        are refused.
        """
        wanted = list(dict.fromkeys(codes))
        if not wanted:
            raise ValidationError(
                "A realm needs at least one enabled locale", field="locale_codes"
            )
        self.require_active(wanted, field_prefix="locale_codes")
        self._get_realm(realm_id)

        existing = {
            row.locale_code: row
            for row in self.session.execute(
                select(RealmLocale).where(RealmLocale.realm_id == realm_id)
            ).scalars()
        }
        for code, row in existing.items():
            row.is_enabled = code in wanted
        for code in wanted:
            if code not in existing:
                self.session.add(RealmLocale(realm_id=realm_id, locale_code=code, is_enabled=True))
        self.session.flush()

        self.logger.info(
            "Set realm locales", extra={"realm_id": realm_id, "locale_codes": ",".join(wanted)}
        )
        return wanted

    def realm_locale_codes(self, realm_id: str) -> List[str]:
        """Codes usable in the realm, sorted."""
        return sorted(self.enabled_codes(realm_id))
