"""
Per-model activity log configuration.

Each audited model registers an AuditProfile from its app's AppConfig.ready().
A profile says how entries for that model are grouped (module), how the model
and its instances are named in descriptions, which fields never show up in
change diffs, how raw column names are labelled, and which foreign-key columns
are displayed through a related record instead of their raw id.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from django.apps import apps
from django.core.exceptions import ValidationError as DjangoValidationError

DEFAULT_LABEL_FIELDS: Tuple[str, ...] = (
    "control_no",
    "name",
    "email",
    "uii",
    "code",
    "file_name",
)

Resolver = Callable[[Any], Optional[Any]]


def default_model_label(model) -> str:
    """DocumentRequirement -> 'document requirement'."""
    name = model.__name__
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", name).lower()


def default_field_label(field_name: str) -> str:
    """hei_id -> 'Hei', date_submitted -> 'Date Submitted'."""
    base = field_name[:-3] if field_name.endswith("_id") else field_name
    return base.replace("_", " ").strip().title()


def related_display(model, attr: str) -> Resolver:
    """
    Build a resolver that maps a foreign key value to `attr` of the related
    record. Returns None when the value does not identify a row.
    """

    def resolve(value):
        related = apps.get_model(model) if isinstance(model, str) else model
        try:
            record = related._default_manager.filter(pk=value).first()
        except (ValueError, TypeError, DjangoValidationError):
            return None
        if record is None:
            return None
        return getattr(record, attr)

    return resolve


@dataclass(frozen=True)
class AuditProfile:
    module: Optional[str] = None
    model_label: Optional[str] = None
    label_fields: Tuple[str, ...] = DEFAULT_LABEL_FIELDS
    field_labels: Dict[str, str] = field(default_factory=dict)
    hidden_fields: Tuple[str, ...] = ()
    foreign_keys: Dict[str, Resolver] = field(default_factory=dict)

    def module_for(self, model) -> str:
        return self.module or model.__name__

    def model_label_for(self, model) -> str:
        return self.model_label or default_model_label(model)

    def label_for_field(self, field_name: str) -> str:
        return self.field_labels.get(field_name) or default_field_label(field_name)


DEFAULT_PROFILE = AuditProfile()

_profiles: Dict[type, AuditProfile] = {}


def _model_key(model_or_instance):
    model = model_or_instance if isinstance(model_or_instance, type) else type(model_or_instance)
    meta = getattr(model, "_meta", None)
    if meta is not None:
        return meta.concrete_model
    return model


def register(model, profile: Optional[AuditProfile] = None) -> AuditProfile:
    profile = profile or DEFAULT_PROFILE
    _profiles[_model_key(model)] = profile
    return profile


def unregister(model) -> None:
    _profiles.pop(_model_key(model), None)


def get_profile(model_or_instance) -> AuditProfile:
    return _profiles.get(_model_key(model_or_instance), DEFAULT_PROFILE)


def is_registered(model_or_instance) -> bool:
    return _model_key(model_or_instance) in _profiles


def registered_models():
    return list(_profiles)
