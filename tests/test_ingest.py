"""
Integration tests for the crawl ingestion path and the job store upsert.
"""
import httpx
import pytest
from sqlalchemy import BigInteger, create_engine
from sqlalchemy.exc import DataError, OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import jobintake.db.models  # noqa: F401
from jobintake.crawler.fetcher import CrawlOptions, Fetcher, build_client, save_checkpoint
from jobintake.db.base import Base
from jobintake.db.models.job import Job
from jobintake.schemas.listing import RawListing
from jobintake.services import job_store
from jobintake.services.ingest import ingest_checkpoint, ingest_listings, run_crawl_batch
from jobintake.services.normalizer import Normalizer


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


def make_listing(url, title="Nhân viên phục vụ", company="Quán ABC", location="Hà Nội", salary="5-7 triệu"):
    return RawListing(url=url, title=title, company=company, location=location, salary=salary)


def test_duplicates_in_one_batch_are_stored_once(db):
    listings = [
        make_listing("https://viecoi.vn/viec-lam/1.html"),
        make_listing("https://viecoi.vn/viec-lam/2.html", title="NHÂN VIÊN PHỤC VỤ"),
    ]

    report = ingest_listings(db, listings, Normalizer())

    assert report.fetched == 2
    assert report.normalized == 2
    assert report.unique == 1
    assert report.inserted == 1
    jobs = db.query(Job).all()
    assert len(jobs) == 1
    assert jobs[0].status == "pending"
    assert jobs[0].is_verified is False
    assert jobs[0].external_url == "https://viecoi.vn/viec-lam/1.html"
    assert jobs[0].salary_min == 5_000_000


def test_recrawl_updates_content_and_keeps_status(db):
    url = "https://viecoi.vn/viec-lam/1.html"
    ingest_listings(db, [make_listing(url)], Normalizer())
    stored = job_store.find_by_external_url(db, url)
    stored.status = "active"
    stored.is_verified = True
    db.commit()

    report = ingest_listings(db, [make_listing(url, salary="8-10 triệu")], Normalizer())

    assert report.updated == 1
    refreshed = job_store.find_by_external_url(db, url)
    assert refreshed.salary_min == 8_000_000
    assert refreshed.status == "active"
    assert db.query(Job).count() == 1


def test_same_posting_under_new_url_is_skipped_across_runs(db):
    ingest_listings(db, [make_listing("https://viecoi.vn/viec-lam/1.html")], Normalizer())

    report = ingest_listings(db, [make_listing("https://viecoi.vn/viec-lam/1-copy.html")], Normalizer())

    assert report.skipped == 1
    assert db.query(Job).count() == 1


def test_run_crawl_batch_writes_checkpoint_and_stores(db, tmp_path):
    pages = {
        "/viec-lam/a.html": '<h1>Thu ngân</h1><h2 class="name-cpn-title">Siêu thị B</h2>',
        "/viec-lam/b.html": "<p>broken</p>",
    }

    def handler(request):
        return httpx.Response(200, text=pages[request.url.path])

    fetcher = Fetcher(
        CrawlOptions(delay_ms=0, max_retries=0),
        client=build_client(transport=httpx.MockTransport(handler)),
        sleep=lambda seconds: None,
    )
    checkpoint = tmp_path / "raw.json"

    report = run_crawl_batch(
        db,
        ["https://viecoi.vn/viec-lam/a.html", "https://viecoi.vn/viec-lam/b.html"],
        fetcher,
        Normalizer(),
        checkpoint_path=checkpoint,
    )

    assert checkpoint.exists()
    assert report.fetched == 1
    assert report.inserted == 1
    job = db.query(Job).one()
    assert job.title == "Thu ngân"
    assert job.location == "Việt Nam"
    assert job.category_id == "other"
    assert job.salary_text == "Thỏa thuận"


def test_ingest_checkpoint_resumes_without_fetching(db, tmp_path):
    path = tmp_path / "raw.json"
    save_checkpoint([
        make_listing("https://viecoi.vn/viec-lam/1.html"),
        make_listing("https://viecoi.vn/viec-lam/2.html", title="Pha chế"),
    ], path)

    report = ingest_checkpoint(db, path, Normalizer())

    assert report.inserted == 2
    assert db.query(Job).count() == 2


def test_salary_columns_hold_large_vnd_amounts():
    assert isinstance(Job.__table__.c.salary_min.type, BigInteger)
    assert isinstance(Job.__table__.c.salary_max.type, BigInteger)


def test_oversized_salary_does_not_abort_batch(db):
    listings = [
        make_listing("https://viecoi.vn/viec-lam/1.html", salary="Lương 99999999999999999999 VND"),
        make_listing("https://viecoi.vn/viec-lam/2.html", title="Thu ngân", salary="10-15 triệu"),
    ]

    report = ingest_listings(db, listings, Normalizer())

    assert report.inserted == 2
    first = job_store.find_by_external_url(db, "https://viecoi.vn/viec-lam/1.html")
    assert first.salary_min is None
    assert first.salary_max is None
    assert first.salary_text == "Lương 99999999999999999999 VND"
    second = job_store.find_by_external_url(db, "https://viecoi.vn/viec-lam/2.html")
    assert second.salary_min == 10_000_000


@pytest.mark.parametrize("error", [
    OverflowError("Python int too large to convert to SQLite INTEGER"),
    DataError("INSERT INTO jobs", {}, Exception("value out of range")),
])
def test_unstorable_record_is_skipped_and_rest_stored(db, monkeypatch, error):
    real_upsert = job_store.upsert_crawled_job

    def upsert(session, job):
        if job.title == "Bảo vệ":
            raise error
        return real_upsert(session, job)

    monkeypatch.setattr(job_store, "upsert_crawled_job", upsert)
    listings = [
        make_listing("https://viecoi.vn/viec-lam/1.html", title="Bảo vệ"),
        make_listing("https://viecoi.vn/viec-lam/2.html", title="Thu ngân"),
    ]

    report = ingest_listings(db, listings, Normalizer())

    assert report.skipped == 1
    assert report.inserted == 1
    assert [job.title for job in db.query(Job).all()] == ["Thu ngân"]


def test_connection_errors_end_the_batch(db, monkeypatch):
    def upsert(session, job):
        raise OperationalError("SELECT 1", {}, Exception("server closed the connection"))

    monkeypatch.setattr(job_store, "upsert_crawled_job", upsert)

    with pytest.raises(OperationalError):
        ingest_listings(db, [make_listing("https://viecoi.vn/viec-lam/1.html")], Normalizer())
