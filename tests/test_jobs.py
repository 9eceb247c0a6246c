import threading

import pytest

from wcart_migrator.jobs import JobManager
from wcart_migrator.models.migration import MigrationStatus


@pytest.fixture
def jobs(processor):
    manager = JobManager(processor, max_workers=2)
    yield manager
    manager.shutdown(wait=True, cancel=True)


@pytest.mark.integration
class TestJobManager:
    def test_submit_creates_run_before_returning(self, jobs, run_store) -> None:
        job = jobs.submit("shop", "products")

        # The run record exists as soon as submit returns
        assert run_store.get_run(job.run_id).data_type == "products"

        run = job.wait(timeout=30)
        assert run.status == MigrationStatus.COMPLETED
        assert job.done()
        assert jobs.get(job.run_id) is job

    def test_concurrent_runs_keep_separate_counters(self, jobs, run_store, mapping_store, cache,
                                                    product_mappings, make_products) -> None:
        mapping_store.replace_mappings("products", product_mappings)
        cache.upsert_records("products", make_products(30))
        cache.upsert_records("customers", [{"id": i, "email": f"c{i}@example.com"} for i in range(12)])

        first = jobs.submit("shop", "products")
        second = jobs.submit("shop", "customers")

        products_run = first.wait(timeout=60)
        customers_run = second.wait(timeout=60)

        assert (products_run.total_items, products_run.processed_items) == (30, 30)
        assert (customers_run.total_items, customers_run.processed_items) == (12, 12)
        assert run_store.count_logs(first.run_id) == 30
        assert run_store.count_logs(second.run_id) == 12

    def test_cancelled_job_ends_failed(self, make_processor, cache, make_products) -> None:
        cache.upsert_records("products", make_products(20))
        release = threading.Event()

        def block_until_released(record):
            release.wait(timeout=10)
            return False

        manager = JobManager(make_processor(fail_when=block_until_released), max_workers=1)
        try:
            job = manager.submit("shop", "products")
            job.cancel()
            release.set()

            run = job.wait(timeout=30)
            assert job.cancelled
            assert run.status == MigrationStatus.FAILED
            assert run.processed_items + run.failed_items < run.total_items
        finally:
            manager.shutdown(wait=True)

    def test_active_jobs_and_unknown_ids(self, jobs) -> None:
        assert jobs.get("unknown") is None
        job = jobs.submit("shop", "products")
        job.wait(timeout=30)
        assert job not in jobs.active_jobs()

    def test_finished_handles_are_pruned(self, processor) -> None:
        manager = JobManager(processor, max_workers=1, keep_finished=2)
        try:
            submitted = []
            for _ in range(5):
                job = manager.submit("shop", "products")
                job.wait(timeout=30)
                submitted.append(job)

            # The latest submission plus the two most recent finished ones
            assert len(manager._jobs) == 3
            assert manager.get(submitted[0].run_id) is None
            assert manager.get(submitted[1].run_id) is None
            assert manager.get(submitted[-1].run_id) is submitted[-1]
        finally:
            manager.shutdown(wait=True)
