from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from faker import Faker
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from everytrack.exceptions import ConfigurationError, LookupFailure
from everytrack.models.reference import AssetProvider, AssetProviderAccountType, Currency
from everytrack.seeder.base import BaseSeeder, ForeignKey, SeedPolicy
from everytrack.seeder.runner import apply_all, validate_order

PROVIDER_FK = ForeignKey(field="asset_provider", column="asset_provider_id", model=AssetProvider)


def make_seeder(name, model, rows, *, policy=SeedPolicy.REPLACE, foreign_keys=(), priority=100):
    return type(
        f"{name.title().replace('_', '')}Seeder",
        (BaseSeeder,),
        {
            "name": name,
            "model": model,
            "policy": policy,
            "foreign_keys": foreign_keys,
            "priority": priority,
            "rows": lambda self: rows,
        },
    )


def _count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def _providers(count: int):
    fake = Faker()
    Faker.seed(1234)
    return [
        {"name": fake.unique.company(), "icon": f"/{i}.svg", "type": "bank"}
        for i in range(count)
    ]


@pytest.fixture
def hsbc(session):
    session.add(AssetProvider(id="1", name="HSBC (HK)", icon="/hsbc_hk.svg", type="bank"))
    session.commit()


class TestReplacePolicy:
    def test_final_count_equals_dataset_size(self, session):
        session.add_all(
            [AssetProvider(name=f"Old {i}", icon="/old.svg", type="bank") for i in range(5)]
        )
        session.commit()
        dataset = _providers(8)

        results = apply_all([make_seeder("asset_provider", AssetProvider, dataset)], session)

        assert _count(session, AssetProvider) == len(dataset)
        names = set(session.execute(select(AssetProvider.name)).scalars())
        assert names == {row["name"] for row in dataset}
        assert results[0].status == "applied"
        assert results[0].deleted == 5
        assert results[0].inserted == 8

    def test_empty_dataset_clears_table(self, session):
        session.add(Currency(ticker="HKD", symbol="HKD$"))
        session.commit()

        apply_all([make_seeder("currency", Currency, [])], session)

        assert _count(session, Currency) == 0

    def test_generated_ids_are_assigned(self, session):
        apply_all([make_seeder("currency", Currency, [{"ticker": "GBP", "symbol": "£"}])], session)

        currency = session.execute(select(Currency)).scalar_one()
        assert currency.id
        assert currency.symbol == "£"


class TestSkipIfPopulated:
    def test_running_twice_equals_running_once(self, session):
        rows = [{"ticker": "HKD", "symbol": "HKD$"}, {"ticker": "USD", "symbol": "USD$"}]
        unit = make_seeder("currency", Currency, rows, policy=SeedPolicy.SKIP_IF_POPULATED)

        first = apply_all([unit], session)
        snapshot = session.execute(select(Currency.id, Currency.ticker).order_by(Currency.ticker)).all()
        second = apply_all([unit], session)

        assert first[0].status == "applied"
        assert second[0].status == "skipped"
        assert (
            session.execute(select(Currency.id, Currency.ticker).order_by(Currency.ticker)).all()
            == snapshot
        )

    def test_populated_table_gets_no_delete_or_insert(self):
        session = MagicMock()
        session.execute.return_value.scalar_one.return_value = 12
        unit = make_seeder(
            "asset_provider", AssetProvider, _providers(3), policy=SeedPolicy.SKIP_IF_POPULATED
        )

        results = apply_all([unit], session)

        # only the count query ran
        assert session.execute.call_count == 1
        assert results[0].status == "skipped"
        assert results[0].inserted == 0

    def test_skip_can_be_forced_per_unit(self):
        session = MagicMock()
        session.execute.return_value.scalar_one.return_value = 12
        unit = make_seeder("asset_provider", AssetProvider, _providers(3))

        results = apply_all([unit], session, skip_if_populated=["asset_provider"])

        assert session.execute.call_count == 1
        assert results[0].status == "skipped"

    def test_unknown_forced_unit_is_rejected(self):
        session = MagicMock()
        unit = make_seeder("currency", Currency, [])

        with pytest.raises(ConfigurationError, match="nope"):
            apply_all([unit], session, skip_if_populated=["nope"])
        session.execute.assert_not_called()


class TestRerun:
    def test_rerunning_a_unit_does_not_duplicate_unique_names(self, session):
        dataset = [
            {"name": "Futu Holdings Limited (HK)", "icon": "/futu_hk.svg", "type": "broker"},
            {"name": "Firstrade Securities (US)", "icon": "/firstrade_us.svg", "type": "broker"},
        ]
        unit = make_seeder("asset_provider", AssetProvider, dataset)

        apply_all([unit], session)
        results = apply_all([unit], session)

        assert _count(session, AssetProvider) == 2
        assert results[0].deleted == 2
        assert results[0].inserted == 2


class TestForeignKeyResolution:
    def test_present_name_resolves_to_dependency_id(self, session, hsbc):
        unit = make_seeder(
            "asset_provider_account_type",
            AssetProviderAccountType,
            [{"asset_provider": "HSBC (HK)", "name": "HKD Savings Account"}],
            foreign_keys=(PROVIDER_FK,),
        )

        apply_all([unit], session)

        row = session.execute(select(AssetProviderAccountType)).scalar_one()
        assert row.asset_provider_id == "1"
        assert row.name == "HKD Savings Account"

    def test_absent_name_fails_and_leaves_table_unmodified(self, session, hsbc):
        session.add(AssetProviderAccountType(id="existing", asset_provider_id="1", name="Current Account"))
        session.commit()
        unit = make_seeder(
            "asset_provider_account_type",
            AssetProviderAccountType,
            [
                {"asset_provider": "HSBC (HK)", "name": "HKD Savings Account"},
                {"asset_provider": "Nonexistent Bank", "name": "Current Account"},
            ],
            foreign_keys=(PROVIDER_FK,),
        )

        with pytest.raises(LookupFailure) as exc:
            apply_all([unit], session)

        assert exc.value.missing == ["Nonexistent Bank"]
        assert exc.value.details["field"] == "asset_provider"
        rows = session.execute(select(AssetProviderAccountType.id)).scalars().all()
        assert rows == ["existing"]

    def test_all_missing_names_are_reported(self, session, hsbc):
        unit = make_seeder(
            "asset_provider_account_type",
            AssetProviderAccountType,
            [
                {"asset_provider": "Bank B", "name": "x"},
                {"asset_provider": "Bank A", "name": "y"},
                {"asset_provider": "Bank B", "name": "z"},
            ],
            foreign_keys=(PROVIDER_FK,),
        )

        with pytest.raises(LookupFailure) as exc:
            apply_all([unit], session)

        assert exc.value.missing == ["Bank A", "Bank B"]
        assert _count(session, AssetProviderAccountType) == 0

    def test_every_foreign_key_reports_its_missing_names(self, session, hsbc):
        by_icon = ForeignKey(
            field="provider_icon", column="asset_provider_id", model=AssetProvider, lookup="icon"
        )
        unit = make_seeder(
            "asset_provider_account_type",
            AssetProviderAccountType,
            [
                {"asset_provider": "Bank X", "provider_icon": "/hsbc_hk.svg", "name": "a"},
                {"asset_provider": "HSBC (HK)", "provider_icon": "/missing.svg", "name": "b"},
            ],
            foreign_keys=(PROVIDER_FK, by_icon),
        )

        with pytest.raises(LookupFailure) as exc:
            apply_all([unit], session)

        assert exc.value.details["unresolved"] == {
            "asset_provider": ["Bank X"],
            "provider_icon": ["/missing.svg"],
        }
        assert _count(session, AssetProviderAccountType) == 0

    def test_row_without_reference_field_is_rejected(self, session, hsbc):
        unit = make_seeder(
            "asset_provider_account_type",
            AssetProviderAccountType,
            [{"name": "orphan"}],
            foreign_keys=(PROVIDER_FK,),
        )

        with pytest.raises(ConfigurationError, match="asset_provider"):
            apply_all([unit], session)

    def test_dataset_rows_are_not_mutated(self, session, hsbc):
        rows = [{"asset_provider": "HSBC (HK)", "name": "HKD Current Account"}]
        unit = make_seeder(
            "asset_provider_account_type",
            AssetProviderAccountType,
            rows,
            foreign_keys=(PROVIDER_FK,),
        )

        apply_all([unit], session)

        assert rows == [{"asset_provider": "HSBC (HK)", "name": "HKD Current Account"}]


class TestFailurePolicy:
    def test_earlier_units_stay_committed(self, session):
        providers = make_seeder("asset_provider", AssetProvider, _providers(3), priority=10)
        broken = make_seeder(
            "asset_provider_account_type",
            AssetProviderAccountType,
            [{"asset_provider": "Nonexistent Bank", "name": "Current Account"}],
            foreign_keys=(PROVIDER_FK,),
            priority=20,
        )
        currencies = make_seeder("currency", Currency, [{"ticker": "USD", "symbol": "USD$"}], priority=30)

        with pytest.raises(LookupFailure):
            apply_all([providers, broken, currencies], session)

        assert _count(session, AssetProvider) == 3
        assert _count(session, Currency) == 0

    def test_database_errors_propagate_unchanged(self, session, hsbc):
        duplicate = {"name": "Monzo (UK)", "icon": "/monzo_uk.svg", "type": "bank"}
        unit = make_seeder("asset_provider", AssetProvider, [duplicate, dict(duplicate)])

        with pytest.raises(IntegrityError):
            apply_all([unit], session)

        names = session.execute(select(AssetProvider.name)).scalars().all()
        assert names == ["HSBC (HK)"]


class TestOrdering:
    def test_dependent_unit_before_producer_is_rejected(self):
        session = MagicMock()
        account_types = make_seeder(
            "asset_provider_account_type", AssetProviderAccountType, [], foreign_keys=(PROVIDER_FK,)
        )
        providers = make_seeder("asset_provider", AssetProvider, [])

        with pytest.raises(ConfigurationError, match="seeded after"):
            apply_all([account_types, providers], session)
        session.execute.assert_not_called()

    def test_dependency_without_producer_is_allowed(self):
        account_types = make_seeder(
            "asset_provider_account_type", AssetProviderAccountType, [], foreign_keys=(PROVIDER_FK,)
        )
        validate_order([account_types])
