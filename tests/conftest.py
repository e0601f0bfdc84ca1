"""
Pytest configuration and shared fixtures.
"""
import os

import pytest
from fastapi.testclient import TestClient

os.environ['TESTING'] = '1'
os.environ['DISABLE_RATE_LIMIT'] = 'true'

from main import create_app
from coopcms.api.models import CategoryCreate, ComponentCreate, PageCreate
from coopcms.core import TreeMutator
from coopcms.database import Database
from coopcms.models.entities import Article, Category, Hero, Organization, TextContent
from coopcms.repositories import CategoryRepository
from coopcms.services import CategoryService, ComponentService, PageService
from coopcms.utils.slugify import slugify


class Seeder:
    """Writes fixtures through the services, committing each one."""

    def __init__(self, database: Database):
        self.database = database
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def organization(self, name: str = None) -> Organization:
        number = self._next()
        with self.database.session_scope() as session:
            organization = Organization(
                name=name or f"Cooperativa {number}",
                slug=f"cooperativa-{number}",
            )
            session.add(organization)
            session.flush()
            return organization

    def hero(self, title: str = "Solar para todos") -> Hero:
        with self.database.session_scope() as session:
            hero = Hero(title=title, subtitle="Energía compartida")
            session.add(hero)
            session.flush()
            return hero

    def text(self, body: str = "Somos una cooperativa de energía renovable.") -> TextContent:
        with self.database.session_scope() as session:
            text = TextContent(title="Quiénes somos", body=body)
            session.add(text)
            session.flush()
            return text

    def article(self, category_id: int = None, title: str = "Nueva planta") -> Article:
        with self.database.session_scope() as session:
            article = Article(category_id=category_id, title=title, body="...")
            session.add(article)
            session.flush()
            return article

    def category(self, **fields):
        fields.setdefault("name", f"Category {self._next()}")
        with self.database.session_scope() as session:
            return CategoryService(session).create(CategoryCreate(**fields))

    def page(self, **fields):
        fields.setdefault("title", f"Page {self._next()}")
        fields.setdefault("is_draft", False)
        with self.database.session_scope() as session:
            return PageService(session).create(PageCreate(**fields))

    def component(self, **fields):
        if "componentable_id" not in fields:
            fields["componentable_type"] = "hero"
            fields["componentable_id"] = self.hero().id
        with self.database.session_scope() as session:
            return ComponentService(session).create(ComponentCreate(**fields))


@pytest.fixture
def database():
    """In-memory database with the full schema."""
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def session(database):
    """Session for engine-level tests; never shared with the app."""
    session = database.session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def org(session):
    organization = Organization(name="Cooperativa Solar", slug="cooperativa-solar")
    session.add(organization)
    session.flush()
    return organization


@pytest.fixture
def category_tree(session):
    return TreeMutator(CategoryRepository(session))


@pytest.fixture
def make_category(category_tree, org):
    """Create a category through the engine: make_category("Energía", parent=root)."""
    def _make(name, parent=None, position=None, language="es", organization=None, **fields):
        category = Category(
            name=name,
            slug=slugify(name),
            organization_id=(organization or org).id,
            language=language,
            **fields,
        )
        return category_tree.create(
            category,
            parent_id=parent.id if parent is not None else None,
            position=position,
        )
    return _make


@pytest.fixture
def app(database):
    """Create FastAPI test application bound to the in-memory database."""
    return create_app(database)


@pytest.fixture
def test_client(app):
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def seed(database):
    return Seeder(database)


@pytest.fixture
def organization(seed):
    return seed.organization()


@pytest.fixture
def page_cache(app):
    return app.state.page_cache


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "tree: marks tests of the hierarchy engine")
    config.addinivalue_line("markers", "slow: marks tests as slow")
