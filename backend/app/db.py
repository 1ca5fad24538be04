from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker


def _ensure_sqlite_path(url: str) -> None:
    if not url.startswith("sqlite"):
        return

    parsed = make_url(url)
    database = parsed.database
    if not database or database == ":memory:":
        return

    path = Path(database)
    path.parent.mkdir(parents=True, exist_ok=True)


def _create_engine(url: str, *, echo: bool = False) -> Engine:
    connect_args: dict[str, object] = {}
    engine_kwargs: dict[str, object] = {
        "echo": echo,
        "future": True,
        "pool_pre_ping": True,
    }

    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        # The credential slot is touched from whichever thread runs the event loop.
        connect_args["check_same_thread"] = False
    else:
        engine_kwargs["pool_recycle"] = 300

    if connect_args:
        engine_kwargs["connect_args"] = connect_args

    return create_engine(url, **engine_kwargs)


def _create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=True, autocommit=False, future=True)


def build_db_components(url: str, *, echo: bool = False) -> tuple[Engine, sessionmaker[Session]]:
    engine = _create_engine(url, echo=echo)
    session_factory = _create_session_factory(engine)
    return engine, session_factory


Base = declarative_base()


def init_db(bind: Engine) -> None:
    from . import models  # noqa: F401

    _ensure_sqlite_path(str(bind.url))
    Base.metadata.create_all(bind=bind)
