"""
Integration tests for queryset-backed tables.
"""

import datetime

import django_filters
import pytest
from django.test import RequestFactory

from rail_datatable.columns import Column, DateTimeColumn, Link
from rail_datatable.datasources import QuerySetDataSource
from rail_datatable.paginate import PaginateRequest, SortOrder
from rail_datatable.tables import DataSourceTable
from tests.models import Enrolment, Learner

pytestmark = [pytest.mark.integration, pytest.mark.django_db]


class LearnerFilterSet(django_filters.FilterSet):
    class Meta:
        model = Learner
        fields = ["status"]


class EnrolmentTable(DataSourceTable):
    table_id = "enrolments"

    def build_columns(self, builder):
        builder.add("learner.first_name", Column("First name"))
        builder.add("learner.last_name", Column("Last name"))
        builder.add("course", Column("Course"))

    def build_filter_form(self, builder):
        return builder.add("learner__status", required=False)

    def get_data_source(self):
        return QuerySetDataSource(Enrolment.objects.select_related("learner").order_by("id"))


@pytest.fixture
def learners():
    ann = Learner.objects.create(
        first_name="Ann",
        last_name="Lee",
        email="ann@example.com",
        joined_at=datetime.datetime(2024, 3, 9, 14, 5, tzinfo=datetime.timezone.utc),
    )
    bob = Learner.objects.create(first_name="Bob", last_name="Marsh", status="archived")
    cid = Learner.objects.create(first_name="Cid", last_name="Abel")
    Enrolment.objects.create(learner=ann, course="Safety")
    Enrolment.objects.create(learner=bob, course="Safety")
    Enrolment.objects.create(learner=cid, course="Driving")
    return ann, bob, cid


def test_search_follows_relations(learners):
    source = QuerySetDataSource(Enrolment.objects.order_by("id"))
    request = PaginateRequest(search="mar", searchable_fields=("learner.last_name", "course"))

    assert [e.learner.first_name for e in source.iterate(request)] == ["Bob"]
    assert source.count_filtered(request) == 1
    assert source.count_all() == 3


def test_order_and_window(learners):
    source = QuerySetDataSource(Learner.objects.all())
    request = PaginateRequest(start=1, length=1, order=(SortOrder("last_name", "desc"),))

    assert [learner.first_name for learner in source.iterate(request)] == ["Ann"]


def test_unlimited_window(learners):
    source = QuerySetDataSource(Learner.objects.order_by("id"))
    assert len(list(source.iterate(PaginateRequest(start=1)))) == 2


def test_filter_data_without_filterset(learners):
    source = QuerySetDataSource(Learner.objects.order_by("id"))
    request = PaginateRequest(filter_data={"status": ["archived", "active"]})
    assert source.count_filtered(request) == 3

    request = PaginateRequest(filter_data={"status": "archived"})
    assert [learner.first_name for learner in source.iterate(request)] == ["Bob"]


def test_filter_data_through_filterset(learners):
    source = QuerySetDataSource(Learner.objects.order_by("id"), filterset_class=LearnerFilterSet)
    request = PaginateRequest(filter_data={"status": "active"})
    assert [learner.first_name for learner in source.iterate(request)] == ["Ann", "Cid"]


def test_invalid_filterset_data_matches_nothing(learners):
    source = QuerySetDataSource(Learner.objects.all(), filterset_class=LearnerFilterSet)
    request = PaginateRequest(filter_data={"status": "unknown"})
    assert list(source.iterate(request)) == []
    assert source.count_filtered(request) == 0


def test_filtered_count_can_be_disabled(learners):
    source = QuerySetDataSource(Learner.objects.all(), count_filtered=False)
    assert source.count_filtered(PaginateRequest(search="a")) is None
    assert source.count_all() == 3


def test_table_over_queryset(learners):
    table = EnrolmentTable()
    table.handle_request(
        RequestFactory().get(
            "/",
            {
                "draw": "2",
                "enrolments_filter-learner__status": "active",
                "order[0][column]": "1",
                "order[0][dir]": "asc",
            },
        )
    )

    payload = table.get_json_payload()

    assert payload == {
        "draw": 2,
        "recordsTotal": 3,
        "recordsFiltered": 2,
        "data": [["Cid", "Abel", "Driving"], ["Ann", "Lee", "Safety"]],
    }


def test_link_and_datetime_columns_over_models(learners):
    class LearnerTable(DataSourceTable):
        table_id = "learners"

        def build_columns(self, builder):
            builder.add(
                "first_name",
                Link(
                    "First name",
                    {
                        "link_text_field": "first_name",
                        "url_callback": lambda value, row: f"/learners/{row.pk}/",
                    },
                ),
            )
            builder.add("joined_at", DateTimeColumn("Joined", {"format": "Y-m-d", "default_content": "-"}))

        def get_data_source(self):
            return QuerySetDataSource(Learner.objects.order_by("id"))

    ann = learners[0]
    rows = LearnerTable().get_output_rows()

    assert rows[0] == {
        "first_name": f'<a href="/learners/{ann.pk}/" alt="Ann">Ann</a>',
        "joined_at": "2024-03-09",
    }
    assert rows[1]["joined_at"] == "-"


class LinkedLearnerTable(DataSourceTable):
    table_id = "linked_learners"

    def build_columns(self, builder):
        builder.add("first_name", Column("First name"))
        builder.add(
            "edit",
            Link(
                "Edit",
                {
                    "link_text_field": "first_name",
                    "url_callback": lambda value, row: f"/learners/{row.pk}/",
                },
            ),
        )

    def get_data_source(self):
        return QuerySetDataSource(Learner.objects.order_by("id"))


def test_search_skips_computed_columns(learners):
    table = LinkedLearnerTable()
    table.handle_request(
        RequestFactory().get("/", {"search[value]": "an", "columns[1][search][value]": "x"})
    )

    assert table.get_filtered_count() == 1
    assert [row["first_name"] for row in table.get_output_rows()] == ["Ann"]


def test_sort_skips_computed_columns(learners):
    table = LinkedLearnerTable()
    table.handle_request(
        RequestFactory().get(
            "/",
            {
                "order[0][column]": "1",
                "order[0][dir]": "desc",
                "order[1][column]": "0",
                "order[1][dir]": "desc",
            },
        )
    )

    assert [row["first_name"] for row in table.get_output_rows()] == ["Cid", "Bob", "Ann"]


def test_search_skips_relation_fields(learners):
    source = QuerySetDataSource(Enrolment.objects.order_by("id"))
    request = PaginateRequest(search="safe", searchable_fields=("learner", "course"))
    assert source.count_filtered(request) == 2


def test_filter_data_skips_unknown_lookups(learners):
    source = QuerySetDataSource(Enrolment.objects.order_by("id"))
    request = PaginateRequest(
        filter_data={"learner__status": "active", "learner__nickname": "x", "course__iexact": "safety"}
    )
    assert [e.learner.first_name for e in source.iterate(request)] == ["Ann"]
