"""
Writes translation rows for any translatable parent.

Works on the parent's ``translations`` relationship, so the rows are owned by
the parent and are removed with it.
"""

from typing import Any, List, Mapping, Optional, Type

from sqlalchemy.orm import Session

from ..db.db_base import TranslationMixin
from ..schemas.mixins import TranslationInput
from .locale_service import LocaleService


class TranslationWriter:
    """Insert and replace translation sets inside the caller's transaction."""

    def __init__(self, session: Session, locale_service: LocaleService):
        self.session = session
        self.locale_service = locale_service

    def _rows(
        self,
        translation_model: Type[TranslationMixin],
        translations: Mapping[str, TranslationInput],
        realm_id: Optional[str],
    ) -> List[Any]:
        self.locale_service.require_active(translations.keys(), realm_id=realm_id)
        return [
            translation_model(
                locale_code=code,
                name=payload.name,
                description=payload.description,
            )
            for code, payload in translations.items()
            if not payload.is_empty
        ]

    def add(
        self,
        parent: Any,
        translation_model: Type[TranslationMixin],
        translations: Mapping[str, TranslationInput],
        realm_id: Optional[str] = None,
    ) -> int:
        """
        Add one row per locale with a non-empty name. Returns the number written.

        The parent must already be flushed so its id is visible to the inserts.
        """
        rows = self._rows(translation_model, translations, realm_id)
        parent.translations.extend(rows)
        self.session.flush()
        return len(rows)

    def replace(
        self,
        parent: Any,
        translation_model: Type[TranslationMixin],
        translations: Mapping[str, TranslationInput],
        realm_id: Optional[str] = None,
    ) -> int:
        """
        Delete every existing translation of ``parent``, then insert the supplied set.

        Omitting a locale deletes it. Review metadata on rewritten locales is reset.
        """
        rows = self._rows(translation_model, translations, realm_id)
        parent.translations.clear()
        # Deletes must reach the database before re-inserting the same locales
        self.session.flush()
        parent.translations.extend(rows)
        self.session.flush()
        return len(rows)
