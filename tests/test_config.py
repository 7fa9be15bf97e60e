from tpo_portal.core.config import Settings


def test_default_database_url_names_psycopg2_driver():
    assert Settings.model_fields["database_url"].default.startswith("postgresql+psycopg2://")


def test_sqlite_url_is_detected():
    assert Settings(database_url="sqlite:///tpo.db").is_sqlite
    assert not Settings(database_url="postgresql+psycopg2://u:p@db/tpo").is_sqlite
