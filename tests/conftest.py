"""Shared fixtures: in-memory SQLite database, a seeded team and an API client."""
from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from laborobo_core import models
from laborobo_core.context import RequestContext
from laborobo_core.database import get_db


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=engine)
    yield engine
    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    """
    A team owned by Alice with members Bob and Carol, plus Dave in another team.

    Alice and Bob have skills and workloads so capacity and routing have data.
    """
    alice = models.User(name="Alice", email="alice@example.com", capacity_hours_per_week=40, current_workload_hours=10)
    bob = models.User(name="Bob", email="bob@example.com", capacity_hours_per_week=40, current_workload_hours=36)
    carol = models.User(name="Carol", email="carol@example.com", capacity_hours_per_week=30, current_workload_hours=0)
    dave = models.User(name="Dave", email="dave@example.com")
    db.add_all([alice, bob, carol, dave])
    db.flush()

    team = models.Team(name="Studio", owner_id=alice.id)
    other_team = models.Team(name="Elsewhere", owner_id=dave.id)
    db.add_all([team, other_team])
    db.flush()

    db.add_all([
        models.TeamMember(team_id=team.id, user_id=bob.id),
        models.TeamMember(team_id=team.id, user_id=carol.id),
        models.UserSkill(user_id=alice.id, skill_name="Python", proficiency=3),
        models.UserSkill(user_id=alice.id, skill_name="React", proficiency=2),
        models.UserSkill(user_id=bob.id, skill_name="Python", proficiency=1),
        models.UserSkill(user_id=carol.id, skill_name="Figma", proficiency=3),
    ])

    party = models.Party(team_id=team.id, name="Acme")
    db.add(party)
    db.flush()

    project = models.Project(
        team_id=team.id,
        party_id=party.id,
        owner_id=alice.id,
        accountable_id=alice.id,
        responsible_id=bob.id,
        name="Website Relaunch",
    )
    db.add(project)
    db.flush()

    work_order = models.WorkOrder(
        team_id=team.id,
        project_id=project.id,
        title="Design system",
        accountable_id=alice.id,
        assigned_to_id=alice.id,
        responsible_id=bob.id,
        created_by_id=alice.id,
        status=models.WorkOrderStatus.ACTIVE,
        due_date=date.today() + timedelta(days=10),
        estimated_hours=20,
    )
    db.add(work_order)
    db.flush()

    other_project = models.Project(team_id=other_team.id, owner_id=dave.id, name="Foreign")
    db.add(other_project)
    db.commit()

    return SimpleNamespace(
        alice=alice,
        bob=bob,
        carol=carol,
        dave=dave,
        team=team,
        other_team=other_team,
        party=party,
        project=project,
        work_order=work_order,
        other_project=other_project,
    )


@pytest.fixture
def context(seed):
    """Alice acting in her own team."""
    return RequestContext(team_id=seed.team.id, user_id=seed.alice.id)


@pytest.fixture
def make_task(db, seed):
    """Factory for tasks on the seeded work order."""
    def _make_task(**overrides):
        values = dict(
            team_id=seed.team.id,
            work_order_id=seed.work_order.id,
            project_id=seed.project.id,
            title="Task",
            status=models.TaskStatus.TODO,
        )
        values.update(overrides)
        task = models.Task(**values)
        db.add(task)
        db.commit()
        db.refresh(task)
        return task
    return _make_task


@pytest.fixture
def agent(db, seed):
    """An active agent with task and work order permissions in the seeded team."""
    ai_agent = models.AIAgent(name="PM Copilot")
    db.add(ai_agent)
    db.flush()
    config = models.AgentConfiguration(
        team_id=seed.team.id,
        ai_agent_id=ai_agent.id,
        can_modify_tasks=True,
        can_create_work_orders=True,
    )
    db.add(config)
    db.commit()
    return SimpleNamespace(agent=ai_agent, config=config)


@pytest.fixture
def client(db):
    from laborobo_core.api.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def headers_for(user, team) -> dict[str, str]:
    return {"X-User-Id": str(user.id), "X-Team-Id": str(team.id)}
