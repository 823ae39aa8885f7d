from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

from mhyasi.core.database import create_db_engine, init_db


def test_file_database_creates_its_directory(tmp_path):
    path = tmp_path / "nested" / "shop.db"
    engine = create_db_engine(f"sqlite:///{path}")
    try:
        init_db(engine)
        assert path.exists()
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert {"users", "products", "invoices", "requests", "unlock_codes"} <= tables


def test_memory_database_shares_one_connection():
    engine = create_db_engine("sqlite://")
    assert isinstance(engine.pool, StaticPool)
    file_engine = create_db_engine("sqlite:///./data/app.db")
    assert not isinstance(file_engine.pool, StaticPool)
