"""Tests for the project database service."""

import datetime
from typing import Callable

import pytest
from conftest import FakeConnector

from projectdb.config.project import Project
from projectdb.config.settings import Settings
from projectdb.connectors.base import ForeignKey
from projectdb.connectors.errors import QueryFailure
from projectdb.connectors.registry import ConnectionRegistry
from projectdb.services.project_database import ProjectDatabaseService

RegistryBuilder = Callable[[FakeConnector], ConnectionRegistry]


def _shop() -> FakeConnector:
    return FakeConnector(
        {
            "customers": [
                {"id": i, "email": f"c{i}@example.com", "created_at": datetime.datetime(2024, 1, i)}
                for i in range(1, 21)
            ],
            "orders": [
                {"id": 10, "customer_id": 3, "coupon_id": None, "total": 25},
                {"id": 11, "customer_id": 4, "coupon_id": 1, "total": 40},
            ],
            "coupons": [{"id": 1, "code": "SPRING"}],
            "reviews": [{"id": 1, "body": "Great"}, {"id": 2, "body": "Meh"}],
        },
        primary_keys={"orders": "id"},
    )


@pytest.fixture
def service_for(project: Project, settings: Settings, fake_registry: RegistryBuilder):
    def _build(connector: FakeConnector, **updates) -> ProjectDatabaseService:
        scoped = project.model_copy(update=updates)
        return ProjectDatabaseService(scoped, registry=fake_registry(connector), settings=settings)

    return _build


def test_unconfigured_project_returns_empty_results(settings: Settings) -> None:
    service = ProjectDatabaseService(Project(id=4, host="db.internal"), settings=settings)

    assert service.connect() is None
    assert service.get_tables() == []
    assert service.get_table_columns("orders") == []
    assert service.get_table_row_count("orders") == 0
    assert service.get_primary_key("orders") is None
    assert service.get_table_foreign_keys("orders") == {}
    assert service.get_table_schema("orders") is None
    assert service.get_table_data("orders").total == 0
    assert service.get_table_row("orders", "id", 1) is None
    assert service.get_record("orders", 1) is None
    assert service.get_users().rows == []
    assert service.get_feedbacks().rows == []
    assert service.get_pinned_tables() == []
    assert service.test_connection().error == "No database configuration provided"


def test_table_listing_and_schema(service_for) -> None:
    service = service_for(_shop())

    assert service.get_tables() == ["customers", "orders", "coupons", "reviews"]
    assert service.has_table("orders") is True
    assert service.has_table("Orders") is False
    schema = service.get_table_schema("orders")
    assert schema.primary_key == "id"
    assert schema.foreign_keys == {
        "customer_id": ForeignKey(table="customers", column="id"),
        "coupon_id": ForeignKey(table="coupons", column="id"),
    }


def test_table_data_uses_natural_order_and_default_page_size(service_for) -> None:
    connector = _shop()
    service = service_for(connector)

    page = service.get_table_data("customers")

    assert page.page_size == 15
    assert [row["id"].value for row in page.rows] == list(range(1, 16))
    assert ("rows", "customers", 15, 0, None) in connector.calls


def test_per_page_is_clamped(service_for, settings: Settings) -> None:
    service = service_for(_shop())

    assert service.get_table_data("customers", per_page=1000).page_size == settings.max_per_page
    assert service.get_table_data("customers", per_page=-3).page_size == 1


def test_record_resolves_non_null_foreign_keys(service_for) -> None:
    service = service_for(_shop())

    first = service.get_record("orders", "10")
    second = service.get_record("orders", 11)

    assert first.primary_key == "id"
    assert first.columns == ["id", "customer_id", "coupon_id", "total"]
    assert set(first.links) == {"customer_id"}
    assert first.links["customer_id"].to_dict() == {"table": "customers", "column": "id", "value": 3}
    assert set(second.links) == {"customer_id", "coupon_id"}
    assert second.to_dict()["record"]["total"] == {"kind": "number", "value": 40}


def test_missing_record_is_none(service_for) -> None:
    assert service_for(_shop()).get_record("orders", 999) is None


def test_record_reads_primary_key_catalog_once(service_for) -> None:
    connector = _shop()

    service_for(connector).get_record("orders", 10)

    assert connector.calls.count(("primary_key", "orders")) == 1
    assert ("one", "orders", "id", 10) in connector.calls


def test_record_lookup_survives_primary_key_failure(project: Project, settings: Settings, fake_registry: RegistryBuilder) -> None:
    connector = _shop()
    connector.fail_primary_key = True
    service = ProjectDatabaseService(project, registry=fake_registry(connector), settings=settings)

    record = service.get_record("orders", 10)

    assert record is not None
    assert record.primary_key == "id"


def test_users_default_table_newest_first(service_for) -> None:
    connector = _shop()
    connector.tables["users"] = [
        {"id": 1, "created_at": datetime.datetime(2023, 1, 1)},
        {"id": 2, "created_at": datetime.datetime(2023, 6, 1)},
    ]
    service = service_for(connector)

    page = service.get_users()

    assert [row["id"].value for row in page.rows] == [2, 1]


def test_users_custom_table(service_for) -> None:
    connector = _shop()
    service = service_for(connector, users_table="customers")

    page = service.get_users(per_page=5, page=2)

    assert page.total == 20
    assert [row["id"].value for row in page.rows] == [15, 14, 13, 12, 11]
    assert ("rows", "customers", 5, 5, "created_at") in connector.calls


def test_feedback_without_creation_column_is_unordered(service_for) -> None:
    connector = _shop()
    service = service_for(connector, feedbacks_table="reviews")

    page = service.get_feedbacks()

    assert [row["id"].value for row in page.rows] == [1, 2]
    assert ("rows", "reviews", 15, 0, None) in connector.calls


def test_feedback_without_table_is_empty(service_for) -> None:
    connector = _shop()

    page = service_for(connector).get_feedbacks()

    assert page.rows == []
    assert page.total == 0


def test_pinned_tables_keep_order_and_drop_missing(service_for) -> None:
    service = service_for(_shop(), pinned_tables=["reviews", "archived", "orders"])

    assert service.get_pinned_tables() == ["reviews", "orders"]


def test_query_failures_surface(service_for) -> None:
    connector = _shop()

    def _broken(*args, **kwargs):
        raise QueryFailure("Database connection error")

    connector.fetch_rows = _broken
    service = service_for(connector)

    with pytest.raises(QueryFailure):
        service.get_table_data("orders")


def test_context_exit_releases_connection(service_for) -> None:
    connector = _shop()

    with service_for(connector) as service:
        service.get_tables()
        assert service.registry.names == ["project_1"]

    assert connector.closed is True
    assert service.registry.names == []
