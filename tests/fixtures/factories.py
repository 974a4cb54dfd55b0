"""
Factory Boy factories for generating consistent test data.

Factories cover the rows that are created outside the services in real
deployments (realms seeded by operators, principals from the identity
provider, grants made by superusers) plus content rows for read tests.
"""

import factory

from realm_cms_core.db import (
    District,
    Language,
    LanguageFamily,
    LanguagePoint,
    Locale,
    Neighborhood,
    Principal,
    Realm,
    RealmLocale,
    RoleGrant,
)
from realm_cms_core.enums import GlobalRole, PublicationStatus, RealmRole, RealmStatus

# ==================== BASE FACTORIES ====================


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Base factory with common patterns."""

    class Meta:
        abstract = True
        sqlalchemy_session_persistence = "commit"


# ==================== REALM FACTORIES ====================


class RealmFactory(BaseFactory):
    """Factory for creating test realms."""

    class Meta:
        model = Realm

    slug = factory.Sequence(lambda n: f"realm-{n}")
    name = factory.Faker("city")
    status = RealmStatus.ACTIVE.value
    default_locale = None
    map_settings = factory.LazyFunction(lambda: {"zoom": 12})


class AmsterdamRealmFactory(RealmFactory):
    slug = "amsterdam"
    name = "Amsterdam"
    default_locale = "nl"
    map_settings = factory.LazyFunction(lambda: {"center": [52.37, 4.89], "zoom": 12})


class LocaleFactory(BaseFactory):
    class Meta:
        model = Locale
        sqlalchemy_get_or_create = ("code",)

    code = "de"
    name = "German"
    native_name = "Deutsch"
    is_default = False
    is_active = True


# ==================== PRINCIPAL FACTORIES ====================


class PrincipalFactory(BaseFactory):
    """Factory for creating test principals."""

    class Meta:
        model = Principal

    email = factory.Sequence(lambda n: f"user{n}@example.org")
    full_name = factory.Faker("name")
    global_role = GlobalRole.NONE.value
    is_active = True


class SuperuserFactory(PrincipalFactory):
    global_role = GlobalRole.SUPERUSER.value


class RoleGrantFactory(BaseFactory):
    """Grant rows are normally written by AuthorizationService.grant_role."""

    class Meta:
        model = RoleGrant

    realm_id = factory.LazyAttribute(lambda o: o.realm.id)
    principal_id = factory.LazyAttribute(lambda o: o.principal.id)
    role = RealmRole.OPERATOR.value

    class Params:
        realm = factory.SubFactory(RealmFactory)
        principal = factory.SubFactory(PrincipalFactory)


# ==================== CONTENT FACTORIES ====================


class LanguageFamilyFactory(BaseFactory):
    class Meta:
        model = LanguageFamily

    realm_id = factory.LazyAttribute(lambda o: o.realm.id)
    slug = factory.Sequence(lambda n: f"family-{n}")
    status = PublicationStatus.DRAFT.value

    class Params:
        realm = factory.SubFactory(RealmFactory)


class LanguageFactory(BaseFactory):
    class Meta:
        model = Language

    realm_id = factory.LazyAttribute(lambda o: o.realm.id)
    slug = factory.Sequence(lambda n: f"language-{n}")
    status = PublicationStatus.DRAFT.value
    endonym = None
    iso_639_3_code = None

    class Params:
        realm = factory.SubFactory(RealmFactory)


class DistrictFactory(BaseFactory):
    class Meta:
        model = District

    realm_id = factory.LazyAttribute(lambda o: o.realm.id)
    slug = factory.Sequence(lambda n: f"district-{n}")
    status = PublicationStatus.DRAFT.value

    class Params:
        realm = factory.SubFactory(RealmFactory)


class NeighborhoodFactory(BaseFactory):
    class Meta:
        model = Neighborhood

    realm_id = factory.LazyAttribute(lambda o: o.district.realm_id)
    district_id = factory.LazyAttribute(lambda o: o.district.id)
    slug = factory.Sequence(lambda n: f"neighborhood-{n}")
    status = PublicationStatus.DRAFT.value

    class Params:
        district = factory.SubFactory(DistrictFactory)


class LanguagePointFactory(BaseFactory):
    class Meta:
        model = LanguagePoint

    realm_id = factory.LazyAttribute(lambda o: o.language.realm_id)
    language_id = factory.LazyAttribute(lambda o: o.language.id)
    neighborhood_id = None
    latitude = 52.37
    longitude = 4.89

    class Params:
        language = factory.SubFactory(LanguageFactory)


class RealmLocaleFactory(BaseFactory):
    class Meta:
        model = RealmLocale

    realm_id = factory.LazyAttribute(lambda o: o.realm.id)
    locale_code = "en"
    is_enabled = True

    class Params:
        realm = factory.SubFactory(RealmFactory)


# ==================== FACTORY CONFIGURATION ====================


def configure_factories(session):
    """Configure all factories to use the provided session."""
    factories = [
        RealmFactory,
        AmsterdamRealmFactory,
        LocaleFactory,
        PrincipalFactory,
        SuperuserFactory,
        RoleGrantFactory,
        LanguageFamilyFactory,
        LanguageFactory,
        DistrictFactory,
        NeighborhoodFactory,
        LanguagePointFactory,
        RealmLocaleFactory,
    ]

    for factory_class in factories:
        factory_class._meta.sqlalchemy_session = session


# ==================== FIXTURE DATA GENERATORS ====================


class FixtureDataGenerator:
    """Helper class for generating structured test data."""

    @staticmethod
    def realm_with_staff(slug="amsterdam"):
        """A realm plus one admin, one operator, one outsider and one superuser."""
        realm = RealmFactory.create(slug=slug, default_locale="nl")
        admin = PrincipalFactory.create()
        operator = PrincipalFactory.create()
        RoleGrantFactory.create(realm=realm, principal=admin, role=RealmRole.ADMIN.value)
        RoleGrantFactory.create(realm=realm, principal=operator, role=RealmRole.OPERATOR.value)
        return {
            "realm": realm,
            "admin": admin,
            "operator": operator,
            "outsider": PrincipalFactory.create(),
            "superuser": SuperuserFactory.create(),
        }
