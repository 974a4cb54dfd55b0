"""Tests for entity payload schemas and parse_payload field paths."""

import pytest

from realm_cms_core.enums import EntityKind
from realm_cms_core.exceptions import ErrorKind, ValidationError
from realm_cms_core.schemas.entity_schemas import (
    EntityCreate,
    EntityFilter,
    EntityUpdate,
    parse_core_fields,
)
from realm_cms_core.schemas.mixins import TranslationInput, parse_payload


class TestTranslationInput:
    def test_missing_name_means_skip(self):
        assert TranslationInput().is_empty
        assert TranslationInput(name=None).is_empty
        assert TranslationInput(name="   ").is_empty

    def test_text_is_sanitized(self):
        translation = TranslationInput(name="<i>Dutch</i>", description="   ")

        assert translation.name == "iDutch/i"
        assert translation.description is None

    def test_non_string_name_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_payload(TranslationInput, {"name": 12}, prefix="translations.en")

        assert exc_info.value.field == "translations.en.name"


class TestParseCoreFields:
    def test_language_fields(self):
        fields = parse_core_fields(
            EntityKind.LANGUAGE,
            {"slug": "nl", "endonym": " Nederlands ", "iso_639_3_code": "nld", "speaker_count": 5},
        )

        assert fields["slug"] == "nl"
        assert fields["endonym"] == "Nederlands"
        assert fields["language_family_id"] is None

    def test_blank_optional_references_become_none(self):
        fields = parse_core_fields(
            EntityKind.LANGUAGE, {"slug": "nl", "iso_639_3_code": "", "language_family_id": " "}
        )

        assert fields["iso_639_3_code"] is None
        assert fields["language_family_id"] is None

    @pytest.mark.parametrize(
        "kind,data,field",
        [
            (EntityKind.LANGUAGE, {"slug": "Not A Slug"}, "fields.slug"),
            (EntityKind.LANGUAGE, {"slug": "nl", "iso_639_3_code": "NLD"}, "fields.iso_639_3_code"),
            (EntityKind.LANGUAGE, {"slug": "nl", "speaker_count": -1}, "fields.speaker_count"),
            (EntityKind.NEIGHBORHOOD, {"slug": "de-pijp"}, "fields.district_id"),
            (EntityKind.DISTRICT, {"slug": "zuid", "colour": "red"}, "fields.colour"),
            (EntityKind.DISTRICT, {}, "fields.slug"),
        ],
    )
    def test_invalid_fields_report_path(self, kind, data, field):
        with pytest.raises(ValidationError) as exc_info:
            parse_core_fields(kind, data)

        assert exc_info.value.field == field
        assert exc_info.value.kind == ErrorKind.VALIDATION_FAILED

    def test_update_returns_only_supplied_keys(self):
        fields = parse_core_fields(EntityKind.LANGUAGE, {"endonym": "Frysk"}, for_update=True)

        assert fields == {"endonym": "Frysk"}

    def test_update_accepts_empty_payload(self):
        assert parse_core_fields(EntityKind.DISTRICT, {}, for_update=True) == {}


class TestEntityPayloads:
    def test_create_parses_translations(self):
        payload = parse_payload(
            EntityCreate,
            {
                "kind": "language",
                "fields": {"slug": "fy"},
                "translations": {"en": {"name": "Frisian"}, "nl": {"name": "Fries"}},
            },
        )

        assert payload.kind == EntityKind.LANGUAGE
        assert payload.translations["nl"].name == "Fries"

    def test_update_distinguishes_omitted_translations(self):
        assert EntityUpdate().translations is None
        assert EntityUpdate(translations={}).translations == {}

    def test_unknown_kind(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_payload(EntityCreate, {"kind": "river"})

        assert exc_info.value.field == "kind"

    def test_schema_instance_passes_through(self):
        payload = EntityCreate(kind=EntityKind.DISTRICT)

        assert parse_payload(EntityCreate, payload) is payload

    def test_filter_limits(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_payload(EntityFilter, {"limit": 0}, prefix="filters")

        assert exc_info.value.field == "filters.limit"
        assert EntityFilter().kind == EntityKind.LANGUAGE
