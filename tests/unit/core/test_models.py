"""Unit tests for BaseModel, exercised through the concrete Product model."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from freezegun import freeze_time

from modules.products.models import Product

pytestmark = pytest.mark.unit


def _product(name: str = "Fries") -> Product:
    return Product.objects.create(name=name, price=Decimal("12.00"))


class TestBaseModel:
    """Tests for UUIDv7 PK and timestamp behaviour."""

    def test_id_is_uuid_version_7(self):
        obj = _product()
        assert isinstance(obj.id, uuid.UUID)
        assert obj.id.version == 7

    def test_ids_are_unique(self):
        assert _product("a").id != _product("b").id

    def test_id_is_not_editable(self):
        assert Product._meta.get_field("id").editable is False

    def test_timestamps_set_on_create(self):
        with freeze_time("2026-03-02 10:00:00"):
            obj = _product()
        expected = datetime(2026, 3, 2, 10, 0, tzinfo=dt_timezone.utc)
        assert obj.created_at == expected
        assert obj.updated_at == expected

    def test_updated_at_changes_on_save_but_created_at_does_not(self):
        with freeze_time("2026-03-02 10:00:00"):
            obj = _product()
        with freeze_time("2026-03-02 11:00:00"):
            obj.name = "Curly Fries"
            obj.save()
        obj.refresh_from_db()
        assert obj.created_at == datetime(2026, 3, 2, 10, 0, tzinfo=dt_timezone.utc)
        assert obj.updated_at == datetime(2026, 3, 2, 11, 0, tzinfo=dt_timezone.utc)

    def test_save_with_update_fields_includes_updated_at(self):
        with freeze_time("2026-03-02 10:00:00"):
            obj = _product()
        with freeze_time("2026-03-02 12:00:00"):
            obj.name = "Wedges"
            obj.save(update_fields=["name"])
        obj.refresh_from_db()
        assert obj.name == "Wedges"
        assert obj.updated_at == datetime(2026, 3, 2, 12, 0, tzinfo=dt_timezone.utc)
