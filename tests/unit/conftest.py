import pytest
from ddmanager.types.settings import Settings


@pytest.fixture
def conf():
    return Settings(
        owner_tag="dd-manager",
        cluster_name="test-cluster",
        dry_run=False,
        reconcile_max_retries=2,
        reconcile_backoff_base_seconds=0.01,
        reconcile_backoff_max_seconds=0.05,
        reconcile_timeout_seconds=5.0,
        reconcile_workers=1,
        reevaluate_bound_on_namespace_change=False,
    )
