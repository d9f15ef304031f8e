"""
URL routing for registry endpoints.

{kind} is one of: regions, programs, heis, semesters, academic-years,
document-requirements.
"""

from django.urls import path
from apps.registry import views

app_name = "registry"

urlpatterns = [
    path("<slug:kind>", views.list_or_create_records, name="list-or-create-records"),
    path(
        "<slug:kind>/<uuid:recordId>",
        views.update_or_delete_record,
        name="update-or-delete-record",
    ),
]
