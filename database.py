import json
import logging
from datetime import datetime, timezone

from sqlalchemy import create_engine, Column, Integer, String, Text, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

import config

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = None
SessionLocal = None


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class FormState(Base):
    __tablename__ = "form_state"

    id = Column(Integer, primary_key=True, index=True)
    profile = Column(String, index=True)
    data_type = Column(String)  # 'selection', 'promotion'
    data_json = Column(Text)
    updated_at = Column(DateTime, default=_utcnow)


class Scenario(Base):
    __tablename__ = "scenarios"

    id = Column(Integer, primary_key=True, index=True)
    profile = Column(String, index=True)
    name = Column(String)
    description = Column(Text)
    data_json = Column(Text)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow)


def init_db(database_url: str = None):
    """Bind the engine to a database URL and create the tables"""
    global engine, SessionLocal
    url = database_url or config.DATABASE_URL

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # Keep one connection so the in-memory database survives between sessions
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
    else:
        # Handle SSL and connection pooling for PostgreSQL
        engine = create_engine(
            url,
            pool_pre_ping=True,
            pool_recycle=300,
            connect_args={"sslmode": "prefer"}
        )

    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
    return engine


def get_db_session():
    """Get a database session for direct use"""
    if SessionLocal is None:
        init_db()
    return SessionLocal()


def save_form_state(profile: str, data_type: str, data):
    """Save one part of the form (selection or promotion) for a profile"""
    with get_db_session() as db:
        existing_data = db.query(FormState).filter(
            FormState.profile == profile,
            FormState.data_type == data_type
        ).first()

        if existing_data:
            existing_data.data_json = json.dumps(data)
            existing_data.updated_at = _utcnow()
        else:
            db.add(FormState(
                profile=profile,
                data_type=data_type,
                data_json=json.dumps(data)
            ))

        db.commit()


def load_form_state(profile: str, data_type: str):
    """Load one part of the form for a profile, None if never saved"""
    with get_db_session() as db:
        form_state = db.query(FormState).filter(
            FormState.profile == profile,
            FormState.data_type == data_type
        ).first()

        if form_state:
            return json.loads(form_state.data_json)
        return None


def save_scenario(profile: str, name: str, description: str, data):
    """Save a scenario for a profile"""
    with get_db_session() as db:
        # Check if scenario exists (update) or create new
        existing_scenario = db.query(Scenario).filter(
            Scenario.profile == profile,
            Scenario.name == name
        ).first()

        if existing_scenario:
            existing_scenario.description = description
            existing_scenario.data_json = json.dumps(data)
            existing_scenario.updated_at = _utcnow()
        else:
            scenario_count = db.query(Scenario).filter(Scenario.profile == profile).count()
            if scenario_count >= config.MAX_SCENARIOS:
                return False, f"Maximum {config.MAX_SCENARIOS} scenarios allowed"

            db.add(Scenario(
                profile=profile,
                name=name,
                description=description,
                data_json=json.dumps(data)
            ))

        db.commit()
        return True, "Scenario saved successfully"


def load_scenarios(profile: str):
    """Load all scenarios for a profile"""
    with get_db_session() as db:
        scenarios = db.query(Scenario).filter(Scenario.profile == profile).order_by(Scenario.created_at, Scenario.id).all()

        result = {}
        for scenario in scenarios:
            result[scenario.name] = {
                'description': scenario.description,
                'timestamp': scenario.updated_at.strftime("%Y-%m-%d %H:%M"),
                **json.loads(scenario.data_json)
            }

        return result


def delete_scenario(profile: str, name: str):
    """Delete a scenario for a profile"""
    with get_db_session() as db:
        scenario = db.query(Scenario).filter(
            Scenario.profile == profile,
            Scenario.name == name
        ).first()

        if scenario:
            db.delete(scenario)
            db.commit()
            return True
        return False
