"""
Unit tests for hierarchy mutations.
"""
import pytest

from coopcms.core import TreeMutator
from coopcms.core.errors import (
    CrossScopeError,
    HasAssociatedContentError,
    HasChildrenError,
    InvalidPositionError,
    PositionConflictError,
    StorageError,
)
from coopcms.models.entities import Page, PageComponent
from coopcms.repositories import ComponentRepository, PageRepository


@pytest.mark.tree
class TestCreate:

    def test_explicit_position_conflict_does_not_shift(self, session, make_category):
        first = make_category("A")
        with pytest.raises(PositionConflictError):
            make_category("B", position=1)

        session.refresh(first)
        assert first.sort_order == 1

    def test_explicit_position_must_be_positive(self, make_category):
        with pytest.raises(InvalidPositionError):
            make_category("A", position=0)

    def test_scope_key_is_derived(self, make_category, org):
        category = make_category("A")
        assert category.scope_key == f"parent=root|organization_id={org.id}|language=es"


@pytest.mark.tree
class TestUpdatePosition:

    def test_direct_set_to_free_slot(self, category_tree, make_category):
        make_category("A")
        b = make_category("B")
        category_tree.update_position(b, 5)
        assert b.sort_order == 5

    def test_direct_set_to_taken_slot_is_rejected(self, session, category_tree, make_category):
        a = make_category("A")
        b = make_category("B")

        with pytest.raises(PositionConflictError):
            category_tree.update_position(b, 1)

        session.refresh(a)
        session.refresh(b)
        assert (a.sort_order, b.sort_order) == (1, 2)


@pytest.mark.tree
class TestReparent:

    def test_reparent_leaves_old_siblings(self, session, category_tree, make_category):
        a = make_category("A")
        b = make_category("B")
        c = make_category("C")

        category_tree.reparent(b, a.id)

        session.refresh(c)
        assert b.parent_id == a.id
        assert b.sort_order == 1
        assert c.sort_order == 3

    def test_reparent_with_position(self, category_tree, make_category):
        parent = make_category("Parent")
        make_category("Kid", parent=parent)
        mover = make_category("Mover")

        category_tree.reparent(mover, parent.id, position=3)
        assert (mover.parent_id, mover.sort_order) == (parent.id, 3)

    def test_refresh_scope_after_language_change(self, category_tree, make_category):
        make_category("English", language="en")
        node = make_category("Cambio")

        node.language = "en"
        category_tree.refresh_scope(node)

        assert node.scope_key.endswith("|language=en")
        assert node.sort_order == 2


@pytest.mark.tree
class TestDelete:

    def test_delete_with_children_is_refused_then_allowed(self, session, category_tree, make_category):
        parent = make_category("Parent")
        child = make_category("Child", parent=parent)

        with pytest.raises(HasChildrenError) as exc_info:
            category_tree.delete(parent)
        assert exc_info.value.message == "Cannot delete a category that has subcategories"

        category_tree.delete(child)
        category_tree.delete(parent)
        assert category_tree.repo.count() == 0

    def test_delete_with_content_is_refused(self, category_tree, make_category):
        node = make_category("Noticias")
        with pytest.raises(HasAssociatedContentError) as exc_info:
            category_tree.delete(node, has_content=lambda _: True)
        assert exc_info.value.message == "Cannot delete a category that has associated content"


@pytest.mark.tree
class TestDuplicate:

    def test_duplicate_after_source(self, session, category_tree, make_category):
        a = make_category("A", description="Original")
        b = make_category("B")

        def reset(copy):
            copy.slug = "a-copy"
            copy.is_active = False

        copy = category_tree.duplicate(a, reset)

        session.refresh(b)
        assert copy.id != a.id
        assert copy.sort_order == 2
        assert b.sort_order == 3
        assert copy.description == "Original"
        assert copy.is_active is False
        assert copy.parent_id == a.parent_id

    def test_duplicate_of_last_needs_no_shift(self, category_tree, make_category):
        make_category("A")
        b = make_category("B")
        copy = category_tree.duplicate(b)
        assert copy.sort_order == 3

    def test_reset_into_other_scope_appends_there(self, session, category_tree, make_category):
        a = make_category("A")
        b = make_category("B")
        make_category("English", language="en")

        def reset(copy):
            copy.slug = "a-en"
            copy.language = "en"

        copy = category_tree.duplicate(a, reset)

        session.refresh(b)
        assert copy.scope_key.endswith("|language=en")
        assert copy.sort_order == 2
        assert b.sort_order == 2

    def test_duplicate_json_is_independent(self, session, org):
        page = Page(title="Inicio", slug="inicio", organization_id=org.id, language="es")
        TreeMutator(PageRepository(session)).create(page)

        components = TreeMutator(ComponentRepository(session))
        source = components.create(PageComponent(
            page_id=page.id, componentable_type="hero", componentable_id=1,
            language="es", settings={"margin": "20px"},
        ))
        copy = components.duplicate(source)
        copy.set_setting("margin", "0")

        assert source.get_setting("margin") == "20px"
        assert copy.position == 2


@pytest.mark.tree
class TestComponentScopes:

    @pytest.fixture
    def pages(self, session, org):
        tree = TreeMutator(PageRepository(session))
        first = tree.create(Page(title="Uno", slug="uno", organization_id=org.id, language="es"))
        second = tree.create(Page(title="Dos", slug="dos", organization_id=org.id, language="es"))
        return first, second

    def make(self, tree, page, parent=None):
        component = PageComponent(page_id=page.id, componentable_type="hero", componentable_id=1, language="es")
        return tree.create(component, parent_id=parent.id if parent else None)

    def test_each_page_numbers_from_one(self, session, pages):
        tree = TreeMutator(ComponentRepository(session))
        first, second = pages

        assert self.make(tree, first).position == 1
        assert self.make(tree, first).position == 2
        assert self.make(tree, second).position == 1

    def test_parent_on_other_page_is_rejected(self, session, pages):
        tree = TreeMutator(ComponentRepository(session))
        first, second = pages
        foreign = self.make(tree, second)

        with pytest.raises(CrossScopeError):
            self.make(tree, first, parent=foreign)


@pytest.mark.tree
class TestStorageFailures:

    def test_integrity_error_is_wrapped(self, category_tree, make_category):
        make_category("A")
        b = make_category("B")

        with pytest.raises(StorageError) as exc_info:
            with category_tree.repo.atomic():
                b.sort_order = 1

        assert exc_info.value.status_code == 500
        assert exc_info.value.__cause__ is not None
