from fileflow.config.settings import Settings
from fileflow.workers.example_provisioner import ExampleWorkerProvisioner
from fileflow.workers.http_provisioner import HttpWorkerProvisioner
from fileflow.workers.provisioner_base import BaseWorkerProvisioner


class WorkerProvisionerFactory:
    """Creates the configured worker provisioner."""

    @classmethod
    def create(cls, settings: Settings) -> BaseWorkerProvisioner:
        provisioner = settings.worker_provisioner.lower()
        if provisioner == "example":
            return ExampleWorkerProvisioner()
        if provisioner == "http":
            base_url = settings.provisioner_base_url.strip()
            if not base_url:
                raise ValueError("provisioner_base_url is required for worker_provisioner=http")
            return HttpWorkerProvisioner(
                base_url=base_url,
                timeout_seconds=settings.provisioner_timeout_seconds,
                api_token=settings.provisioner_api_token,
                launch_template=settings.provisioner_launch_template,
            )
        raise ValueError(
            f"Unknown worker provisioner '{provisioner}'. Choose from: ['example', 'http']"
        )
