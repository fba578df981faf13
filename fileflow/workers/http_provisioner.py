import httpx

from fileflow.workers.exceptions import WorkerLaunchError, WorkerLaunchTimeoutError
from fileflow.workers.provisioner_base import BaseWorkerProvisioner


class HttpWorkerProvisioner(BaseWorkerProvisioner):
    """Launches workers through a compute-provisioning HTTP API.

    ``POST {base_url}/workers`` with the launch template and worker tags;
    the response body must carry ``workerId``.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: int,
        api_token: str = "",
        launch_template: str = "",
        client: httpx.Client | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_token}"} if api_token else {}
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=headers,
        )
        self._launch_template = launch_template

    def launch(self, file_id: str) -> str:
        payload = {
            "launchTemplate": self._launch_template,
            "count": 1,
            "tags": {
                "Name": f"File-Processor-{file_id}",
                "ProcessingFile": file_id,
            },
        }
        try:
            response = self._client.post("/workers", json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise WorkerLaunchTimeoutError(
                f"Provisioner timed out launching worker for file {file_id}"
            ) from exc
        except httpx.HTTPError as exc:
            raise WorkerLaunchError(
                f"Provisioner failed to launch worker for file {file_id}: {exc}"
            ) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise WorkerLaunchError("Provisioner returned a non-JSON response") from exc

        worker_id = body.get("workerId") if isinstance(body, dict) else None
        if not isinstance(worker_id, str) or not worker_id:
            raise WorkerLaunchError("Provisioner response has no workerId")
        return worker_id

    def close(self) -> None:
        self._client.close()
