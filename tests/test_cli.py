"""
Tests for the jobintake command line entry point.
"""
import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import jobintake.db.models  # noqa: F401
from jobintake import cli
from jobintake.crawler.fetcher import save_checkpoint
from jobintake.db.base import Base
from jobintake.db.models.job import Job
from jobintake.schemas.listing import RawListing


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(autouse=True)
def cli_env(monkeypatch):
    Base.metadata.create_all(bind=test_engine)
    monkeypatch.setattr(cli, "SessionLocal", TestSessionLocal)
    monkeypatch.setattr(cli, "init_db", lambda: None)
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    monkeypatch.setattr(cli, "get_default_categorizer", lambda: None)
    yield
    Base.metadata.drop_all(bind=test_engine)


def test_parse_crawl_args():
    args = cli.parse_args(["crawl", "--limit", "5", "--delay-ms", "1500", "--verbose"])
    assert args.command == "crawl"
    assert args.limit == 5
    assert args.delay_ms == 1500
    assert args.verbose is True
    assert args.urls_file is None


def test_sitemap_and_urls_file_are_exclusive():
    with pytest.raises(SystemExit):
        cli.parse_args(["crawl", "--sitemap", "https://viecoi.vn/sitemap.xml", "--urls-file", "urls.txt"])


def test_read_urls_file(tmp_path):
    path = tmp_path / "urls.txt"
    path.write_text("# batch 1\nhttps://viecoi.vn/a.html\n\n  https://viecoi.vn/b.html  \n", encoding="utf-8")
    assert cli.read_urls_file(path) == ["https://viecoi.vn/a.html", "https://viecoi.vn/b.html"]


def test_ingest_checkpoint_command(tmp_path, capsys):
    path = tmp_path / "raw.json"
    save_checkpoint([RawListing(url="https://viecoi.vn/viec-lam/1.html", title="Pha chế", company="Quán A")], path)

    assert cli.main(["ingest-checkpoint", str(path)]) == 0

    report = json.loads(capsys.readouterr().out)
    assert report["inserted"] == 1
    db = TestSessionLocal()
    try:
        assert db.query(Job).count() == 1
    finally:
        db.close()


def test_store_failure_exits_nonzero(tmp_path, monkeypatch):
    path = tmp_path / "raw.json"
    save_checkpoint([], path)

    def broken(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(cli, "ingest_checkpoint", broken)
    assert cli.main(["ingest-checkpoint", str(path)]) == 1
