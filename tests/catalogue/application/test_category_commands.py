import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.catalogue.category.category import Category
from storefront.catalogue.category.management import (
    ActivateCategory,
    DeactivateCategory,
    MoveCategory,
    RefreshCategoryProductCount,
    RenameCategory,
    UpdateCategoryDetails,
)


def _load(category_id):
    return current_domain.repository_for(Category).get(category_id)


@pytest.fixture()
def tree(make_category):
    """Electronics > Phones > Android > Tablets, plus a separate Computers root."""
    electronics = make_category(name="Electronics")
    phones = make_category(name="Phones", parent_id=electronics)
    android = make_category(name="Android", parent_id=phones)
    tablets = make_category(name="Tablets", parent_id=android)
    computers = make_category(name="Computers")
    return {
        "electronics": electronics,
        "phones": phones,
        "android": android,
        "tablets": tablets,
        "computers": computers,
    }


class TestCreateCategory:
    def test_persists_with_path(self, tree):
        tablets = _load(tree["tablets"])

        assert tablets.level == 3
        assert tablets.full_path == "Electronics > Phones > Android > Tablets"

    def test_unknown_parent(self, make_category):
        with pytest.raises(ObjectNotFoundError):
            make_category(name="Orphan", parent_id="missing")


class TestMoveCategory:
    def test_rebuilds_whole_subtree(self, tree):
        current_domain.process(
            MoveCategory(category_id=tree["phones"], parent_id=tree["computers"]),
            asynchronous=False,
        )

        android = _load(tree["android"])
        tablets = _load(tree["tablets"])

        assert android.ancestor_ids == [tree["computers"], tree["phones"]]
        assert android.level == 2
        assert tablets.ancestor_ids == [tree["computers"], tree["phones"], tree["android"]]
        assert tablets.full_path == "Computers > Phones > Android > Tablets"

    def test_rebuilds_every_child_of_a_wide_node(self, tree, make_category):
        models = [make_category(name=f"Model {i}", parent_id=tree["android"]) for i in range(105)]

        current_domain.process(MoveCategory(category_id=tree["android"], parent_id=None), asynchronous=False)

        repo = current_domain.repository_for(Category)
        assert len(repo.children_of(tree["android"])) == 106
        assert all(_load(model_id).level == 1 for model_id in models)
        assert _load(models[-1]).full_path == "Android > Model 104"

    def test_move_to_root(self, tree):
        current_domain.process(MoveCategory(category_id=tree["android"], parent_id=None), asynchronous=False)

        assert _load(tree["android"]).level == 0
        assert _load(tree["tablets"]).full_slug_path == "android/tablets"

    def test_cannot_move_under_descendant(self, tree):
        with pytest.raises(ValidationError):
            current_domain.process(
                MoveCategory(category_id=tree["phones"], parent_id=tree["tablets"]),
                asynchronous=False,
            )

        assert _load(tree["phones"]).parent_id == tree["electronics"]


class TestRenameAndDetails:
    def test_rename(self, tree):
        current_domain.process(RenameCategory(category_id=tree["phones"], name="Mobiles"), asynchronous=False)

        phones = _load(tree["phones"])
        assert phones.name == "Mobiles"
        assert phones.slug == "mobiles"

    def test_update_details(self, tree):
        current_domain.process(
            UpdateCategoryDetails(
                category_id=tree["electronics"],
                details=json.dumps({"description": "Gadgets", "featured": True}),
            ),
            asynchronous=False,
        )

        electronics = _load(tree["electronics"])
        assert electronics.description == "Gadgets"
        assert electronics.featured is True


class TestStatusAndCounts:
    def test_deactivate_hides_from_tree(self, tree):
        current_domain.process(DeactivateCategory(category_id=tree["computers"]), asynchronous=False)

        repo = current_domain.repository_for(Category)
        assert [c.name for c in repo.roots()] == ["Electronics"]

        current_domain.process(ActivateCategory(category_id=tree["computers"]), asynchronous=False)
        assert [c.name for c in repo.roots()] == ["Computers", "Electronics"]

    def test_refresh_product_count(self, tree, make_product):
        make_product(name="Pixel", category_id=tree["android"])
        make_product(name="Galaxy", category_id=tree["android"])
        make_product(name="Draft Phone", category_id=tree["android"], active=False)

        count = current_domain.process(
            RefreshCategoryProductCount(category_id=tree["android"]),
            asynchronous=False,
        )

        assert count == 2
        assert _load(tree["android"]).product_count == 2


class TestTreeQueries:
    def test_descendants_are_breadth_first(self, tree):
        repo = current_domain.repository_for(Category)
        assert [c.name for c in repo.descendants_of(tree["electronics"])] == ["Phones", "Android", "Tablets"]

    def test_nested_tree(self, tree):
        repo = current_domain.repository_for(Category)
        nested = repo.tree()

        assert [node["category"].name for node in nested] == ["Computers", "Electronics"]
        phones = nested[1]["children"][0]
        assert phones["category"].name == "Phones"
        assert phones["children"][0]["children"][0]["category"].name == "Tablets"

    def test_find_by_slug(self, tree):
        repo = current_domain.repository_for(Category)
        assert str(repo.find_by_slug("android").id) == tree["android"]
        assert repo.find_by_slug("nothing") is None
