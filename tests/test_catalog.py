"""Tests for catalog lookups and admin product management."""

import pytest

from catalog import DEFAULT_IMAGE, Catalog
from errors import DuplicateNameError, ForbiddenError, NotFoundError, ValidationError
from schemas import ProductIn, ProductUpdate


@pytest.fixture
def catalog(seeded_store):
    return Catalog(seeded_store)


def new_product(**overrides):
    data = {"name": "Sound Kit", "price": 15.0, "category": "Audio", "description": "Drum samples"}
    data.update(overrides)
    return ProductIn(**data)


class TestLookup:
    def test_find_by_id(self, catalog):
        assert catalog.find_by_id(2)["name"] == "Icon Pack"

    def test_find_by_id_missing(self, catalog):
        with pytest.raises(NotFoundError):
            catalog.find_by_id(42)

    def test_find_by_name_ignores_case(self, catalog):
        assert catalog.find_by_name("icon PACK")["id"] == 2

    def test_distinct_categories(self, catalog):
        assert set(catalog.distinct_categories()) == {"Software", "Graphics"}

    def test_featured(self, catalog):
        assert [p["id"] for p in catalog.featured()] == [1]

    def test_featured_falls_back_to_catalog_head(self, store):
        store.save("products", [{"id": i, "name": f"p{i}", "featured": False} for i in range(10)])
        assert [p["id"] for p in Catalog(store).featured(limit=4)] == [0, 1, 2, 3]

    def test_empty_catalog(self, store):
        catalog = Catalog(store)
        assert catalog.featured() == []
        assert catalog.distinct_categories() == []


class TestList:
    def test_everything_by_default(self, catalog):
        result = catalog.list()
        assert result["total"] == 3
        assert result["pageSize"] == 3
        assert [p["id"] for p in result["items"]] == [1, 2, 3]

    def test_category_filter_ignores_case(self, catalog):
        assert [p["id"] for p in catalog.list(category="graphics")["items"]] == [2, 3]

    def test_all_category_means_no_filter(self, catalog):
        assert catalog.list(category="All")["total"] == 3

    def test_search_over_name_description_category(self, catalog):
        assert [p["id"] for p in catalog.list(search="fonts")["items"]] == [3]
        assert [p["id"] for p in catalog.list(search="SOFT")["items"]] == [1]

    def test_paginated(self, catalog):
        result = catalog.list(page=2, limit=2)
        assert [p["id"] for p in result["items"]] == [3]
        assert result["totalPages"] == 2


class TestCreate:
    def test_create(self, catalog, admin):
        product = catalog.create(new_product(), admin)
        assert product["image"] == DEFAULT_IMAGE
        assert product["featured"] is False
        assert product["createdAt"] == product["updatedAt"]
        assert catalog.find_by_id(product["id"])["name"] == "Sound Kit"

    def test_duplicate_name_ignores_case(self, catalog, admin):
        with pytest.raises(DuplicateNameError):
            catalog.create(new_product(name="PHOTO editor pro"), admin)

    @pytest.mark.parametrize("price", [0, -1.0])
    def test_price_must_be_positive(self, catalog, admin, price):
        with pytest.raises(ValidationError) as exc:
            catalog.create(new_product(price=price), admin)
        assert "price" in exc.value.fields

    def test_required_fields(self, catalog, admin):
        with pytest.raises(ValidationError) as exc:
            catalog.create(new_product(name=" ", description=""), admin)
        assert exc.value.fields == ["name", "description"]

    def test_customer_cannot_create(self, catalog, customer):
        with pytest.raises(ForbiddenError):
            catalog.create(new_product(), customer)
        assert catalog.list()["total"] == 3

    @pytest.mark.parametrize("price", [float("nan"), float("inf")])
    def test_price_must_be_finite(self, catalog, admin, price):
        with pytest.raises(ValidationError) as exc:
            catalog.create(new_product(price=price), admin)
        assert exc.value.fields == ["price"]
        assert catalog.list()["total"] == 3

    def test_missing_fields_are_reported_together(self, catalog, admin):
        with pytest.raises(ValidationError) as exc:
            catalog.create(ProductIn(category="Audio"), admin)
        assert exc.value.fields == ["name", "description", "price"]


class TestUpdateDelete:
    @pytest.mark.parametrize("price", [float("nan"), float("inf")])
    def test_update_rejects_non_finite_price(self, catalog, admin, price):
        with pytest.raises(ValidationError):
            catalog.update(1, ProductUpdate(price=price), admin)
        assert catalog.find_by_id(1)["price"] == 9.99

    def test_update_trims_text_fields(self, catalog, admin):
        product = catalog.update(2, ProductUpdate(name="  Icon Pack Plus ", category=" Graphics  "), admin)
        assert product["name"] == "Icon Pack Plus"
        assert product["category"] == "Graphics"
        assert catalog.find_by_id(2)["name"] == "Icon Pack Plus"

    def test_partial_update(self, catalog, admin):
        product = catalog.update(2, ProductUpdate(price=6, featured=True), admin)
        assert product["price"] == 6.0
        assert product["featured"] is True
        assert product["name"] == "Icon Pack"
        assert product["updatedAt"] != product["createdAt"]
        assert catalog.find_by_id(2)["price"] == 6.0

    def test_rename_onto_other_product(self, catalog, admin):
        with pytest.raises(DuplicateNameError):
            catalog.update(2, ProductUpdate(name="font bundle"), admin)

    def test_rename_case_only_is_allowed(self, catalog, admin):
        assert catalog.update(2, ProductUpdate(name="ICON PACK"), admin)["name"] == "ICON PACK"

    def test_update_missing(self, catalog, admin):
        with pytest.raises(NotFoundError):
            catalog.update(99, ProductUpdate(price=1), admin)

    def test_update_rejects_bad_price(self, catalog, admin):
        with pytest.raises(ValidationError):
            catalog.update(1, ProductUpdate(price=-2), admin)

    def test_delete(self, catalog, admin):
        removed = catalog.delete(1, admin)
        assert removed["id"] == 1
        with pytest.raises(NotFoundError):
            catalog.find_by_id(1)

    def test_customer_cannot_delete(self, catalog, customer):
        with pytest.raises(ForbiddenError):
            catalog.delete(1, customer)
