"""
URL routing for liquidation endpoints.
"""

from django.urls import path
from apps.liquidations import views

app_name = "liquidations"

urlpatterns = [
    path("", views.list_or_create_liquidations, name="list-or-create-liquidations"),
    path(
        "beneficiary-template",
        views.download_beneficiary_template,
        name="beneficiary-template",
    ),
    path("<uuid:liquidationId>", views.liquidation_detail, name="liquidation-detail"),
    # Workflow
    path(
        "<uuid:liquidationId>/submit",
        views.submit_liquidation,
        name="submit-liquidation",
    ),
    path(
        "<uuid:liquidationId>/endorse-to-accounting",
        views.endorse_to_accounting,
        name="endorse-to-accounting",
    ),
    path(
        "<uuid:liquidationId>/return-to-hei",
        views.return_to_hei,
        name="return-to-hei",
    ),
    path(
        "<uuid:liquidationId>/endorse-to-coa",
        views.endorse_to_coa,
        name="endorse-to-coa",
    ),
    path(
        "<uuid:liquidationId>/return-to-rc",
        views.return_to_rc,
        name="return-to-rc",
    ),
    # Beneficiaries
    path(
        "<uuid:liquidationId>/beneficiaries",
        views.list_or_add_beneficiaries,
        name="list-or-add-beneficiaries",
    ),
    path(
        "<uuid:liquidationId>/beneficiaries/import",
        views.import_beneficiaries,
        name="import-beneficiaries",
    ),
]
