"""
URL routing for activity log endpoints.
"""

from django.urls import path
from apps.audit import views

app_name = "audit"

urlpatterns = [
    path("", views.query_audit_log, name="query-audit-log"),
    path("filters", views.audit_filter_options, name="audit-filter-options"),
]
