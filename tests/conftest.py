# tests/conftest.py
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from infra.db.base import init_db
from infra.services import build_services

from core.models import Dependency, DependencyType, Task
from core.services.scheduling import FeatureFlags


@pytest.fixture
def session():
    # separate in-memory DB for tests
    engine = create_engine("sqlite:///:memory:", future=True)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    init_db(engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def flags():
    return FeatureFlags()


@pytest.fixture
def services(session, flags):
    built = build_services(session, flags)
    built["session"] = session
    return built


def make_task(task_id, duration=1, deps=(), asset_id="asset-1", name=None, **extra):
    """Task builder: deps are (predecessor_id, type, lag) tuples or Dependency objects."""
    dependencies = []
    for dep in deps:
        if isinstance(dep, Dependency):
            dependencies.append(dep)
        else:
            pred, dep_type, lag = dep
            dependencies.append(Dependency(pred, DependencyType(dep_type), lag))
    return Task(
        id=task_id,
        name=name or task_id,
        duration=duration,
        asset_id=asset_id,
        dependencies=tuple(dependencies),
        **extra,
    )


@pytest.fixture
def task_factory():
    return make_task


@pytest.fixture
def overlap_scenario():
    # A(5); B(10) overlaps A by 2 days; C(3) overlaps B by 1 day
    return [
        make_task("A", 5),
        make_task("B", 10, deps=[("A", "FS", -2)]),
        make_task("C", 3, deps=[("B", "FS", -1)]),
    ]
