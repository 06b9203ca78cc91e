"""
Integration tests for the datatable view and its URLs.
"""

import json

import pytest
from django.contrib.auth import get_user_model
from django.test import Client, RequestFactory

from rail_datatable.columns import Column
from rail_datatable.datasources import QuerySetDataSource
from rail_datatable.registry import clear_table_registry, register_table
from rail_datatable.tables import DataSourceTable
from rail_datatable.views import DataTableView
from tests.models import Learner

pytestmark = [pytest.mark.integration, pytest.mark.django_db]


class LearnerTable(DataSourceTable):
    def build_columns(self, builder):
        builder.add("first_name", Column("First name"))
        builder.add("email", Column("Email", {"permission": "tests.view_learner"}))

    def get_data_source(self):
        return QuerySetDataSource(Learner.objects.order_by("id"))


@pytest.fixture(autouse=True)
def registered_table():
    clear_table_registry()
    register_table("learners")(LearnerTable)
    yield
    clear_table_registry()


@pytest.fixture
def learners():
    Learner.objects.create(first_name="Ann", last_name="Lee", email="ann@example.com")
    Learner.objects.create(first_name="Bob", last_name="Marsh", email="bob@example.com")


def test_ajax_request_returns_payload(learners):
    response = Client().get(
        "/datatables/learners/",
        {"draw": "7", "search[value]": "bob"},
        HTTP_X_REQUESTED_WITH="XMLHttpRequest",
    )

    assert response.status_code == 200
    assert json.loads(response.content) == {
        "draw": 7,
        "recordsTotal": 2,
        "recordsFiltered": 1,
        "data": [["Bob", ""]],
    }


def test_format_parameter_requests_json(learners):
    response = Client().post("/datatables/learners/", {"format": "json", "length": "1"})
    assert response.status_code == 200
    assert len(json.loads(response.content)["data"]) == 1


def test_html_request_renders_table(learners):
    response = Client().get("/datatables/learners/")
    html = response.content.decode()

    assert response.status_code == 200
    assert '<table id="learners"' in html
    assert "<td>Ann</td>" in html
    assert 'data-field="email"' not in html


def test_permission_column_visible_for_granted_user(learners):
    user = get_user_model().objects.create_superuser("admin", "admin@example.com", "pass12345")
    request = RequestFactory().get("/datatables/learners/")
    request.user = user

    response = DataTableView.as_view()(request, table_name="learners")

    assert '<th data-field="email">Email</th>' in response.content.decode()


def test_unknown_table_is_not_found():
    assert Client().get("/datatables/unknown/").status_code == 404


def test_view_with_fixed_table_class(learners):
    class FixedView(DataTableView):
        table_class = LearnerTable
        table_kwargs = {"table_id": "fixed"}

    request = RequestFactory().get("/", HTTP_X_REQUESTED_WITH="XMLHttpRequest")
    response = FixedView.as_view()(request)

    assert json.loads(response.content)["recordsTotal"] == 2
