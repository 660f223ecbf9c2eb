import kopf
import logging
from ddmanager.handlers import objects, probes
from ddmanager.common.models.kinds import ObjectKind
from ddmanager.controllers import ControllerSupervisor
from ddmanager.monitors import ProvisionedStateReader, SyncEngine
from ddmanager.resources import BaseResource
from ddmanager.rulesets import RulesetStore
from ddmanager.sensors import init_metrics_server, SensorDelegate, PrometheusMonitor
from ddmanager.types.settings import Settings
from ddmanager.web import DatadogClient
from kubernetes_asyncio import config
from kubernetes_asyncio.client.api_client import ApiClient


@kopf.on.startup()
async def setup(
    settings: kopf.OperatorSettings, memo: kopf.Memo, logger: logging.Logger, **kwargs
):
    # Load Kubernetes config - try in-cluster first (for production), then local kubeconfig (for dev)
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        logger.info("In-cluster config not found, trying local kubeconfig")
        try:
            await config.load_kube_config()
            logger.info("Loaded local Kubernetes configuration")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise

    conf = Settings()
    if not conf.has_credentials and not conf.dry_run:
        logger.warning(
            "DD_API_KEY or DD_APP_KEY is not set, running in dry run mode. "
            "Monitor changes will be logged but not applied."
        )
        conf.dry_run = True
    if not conf.cluster_name:
        logger.warning("CLUSTER_NAME is not set, monitors won't carry a cluster tag.")
    memo.conf = conf

    # Create a shared ApiClient for all resources to prevent connection leaks
    shared_client = ApiClient()
    BaseResource.shared_api_client = shared_client
    memo.api_client = shared_client
    logger.info("Shared Kubernetes API client initialized")

    # Initialize sensor infrastructure
    sensor_delegate = SensorDelegate()
    sensor_delegate.add(PrometheusMonitor())
    memo.sensor = sensor_delegate
    logger.info("Sensor infrastructure initialized with PrometheusMonitor")

    # Initialize Prometheus metrics server
    try:
        init_metrics_server(conf.metrics_port)
    except Exception as e:
        logger.error(f"Failed to start metrics server: {e}")
        # Don't fail operator startup if metrics server fails
        logger.warning("Continuing without metrics server")

    memo.client = DatadogClient(
        conf.dd_api_key,
        conf.dd_app_key,
        base_url=conf.dd_api_url,
        timeout=conf.backend_timeout_seconds,
    )

    memo.store = RulesetStore(
        conf.definitions_path,
        interval=conf.ruleset_reload_interval_seconds,
        sensor=sensor_delegate,
    )
    await memo.store.start()

    memo.supervisor = ControllerSupervisor(
        [ObjectKind.parse(kind) for kind in conf.watched_kinds],
        memo.store,
        ProvisionedStateReader(memo.client),
        SyncEngine(memo.client, dry_run=conf.dry_run, sensor=sensor_delegate),
        conf,
        sensor=sensor_delegate,
        api_client=shared_client,
    )
    memo.supervisor.start()

    # Watched objects are not ours, don't post events on them.
    settings.posting.enabled = False


@kopf.on.cleanup()
async def cleanup(memo: kopf.Memo, logger: logging.Logger, **kwargs):
    """Cleanup handler for operator shutdown."""
    logger.info("Shutting down operator...")

    supervisor = getattr(memo, "supervisor", None)
    if supervisor is not None:
        await supervisor.stop()

    store = getattr(memo, "store", None)
    if store is not None:
        await store.stop()
        logger.info("Ruleset reloads stopped")

    client = getattr(memo, "client", None)
    if client is not None:
        await client.close()
        logger.info("Monitoring backend client closed")

    # Close the shared API client
    if BaseResource.shared_api_client is not None:
        await BaseResource.shared_api_client.close()
        BaseResource.shared_api_client = None
        logger.info("Shared API client closed")

    logger.info("Operator shutdown complete")


__all__ = [
    "objects",
    "probes",
]
