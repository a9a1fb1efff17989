"""
Annotation Gateway - REST client for annotation tasks

Thin wrapper around the platform API's retraining endpoints. Everything
crossing this boundary uses the wire annotation shape.
"""
import logging
from io import BytesIO
from typing import List, Optional
from urllib.parse import quote, urlparse

import requests
from PIL import Image, UnidentifiedImageError

import ewaste_studio.config as config
from .models import AnnotationTask, TaskStatus, WireAnnotation

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """
    Failed API call

    Attributes:
        status: HTTP status code, or None for transport failures
        url: Requested URL
    """

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.url = url


class AnnotationGateway:
    """
    Client for the annotation task endpoints

    Usage:
        gateway = AnnotationGateway("http://localhost:8080/api/v1", token=token)
        tasks = gateway.list_tasks(dataset_id)
        updated = gateway.update_task(tasks[0].id, annotations, TaskStatus.IN_PROGRESS, "")
    """

    def __init__(
        self,
        base_url: str = None,
        token: Optional[str] = None,
        timeout: float = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: API root, e.g. http://localhost:8080/api/v1 (default: config.API_BASE_URL)
            token: Bearer token passed through to the API
            timeout: Per-request timeout in seconds (default: config.API_TIMEOUT)
            session: requests session to reuse (one is created if omitted)
        """
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.token = token
        self.timeout = config.API_TIMEOUT if timeout is None else timeout
        self.session = session or requests.Session()

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Prefer the API's JSON 'message' over the bare status line"""
        message = f"HTTP {response.status_code}: {response.reason}"
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                data = response.json()
            except ValueError:
                return message
            if isinstance(data, dict) and data.get("message"):
                return str(data["message"])
        return message

    def _request(self, method: str, endpoint: str, json=None):
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"API request: {method} {url}")

        try:
            response = self.session.request(
                method,
                url,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"API request failed: {method} {url}: {e}")
            raise GatewayError(str(e), status=None, url=url) from e

        logger.debug(f"API response: {method} {url} -> {response.status_code}")

        if not response.ok:
            message = self._error_message(response)
            logger.error(f"API request failed: {endpoint}: {message}")
            raise GatewayError(message, status=response.status_code, url=url)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(f"Invalid JSON response from {url}", response.status_code, url) from e

    def list_tasks(self, dataset_id: str) -> List[AnnotationTask]:
        """
        Fetch the dataset's annotation tasks in navigation order

        Args:
            dataset_id: Dataset identifier

        Returns:
            List of AnnotationTask objects
        """
        data = self._request("GET", f"/retraining/datasets/{dataset_id}/tasks")
        return [AnnotationTask.from_dict(item) for item in data or []]

    def update_task(
        self,
        task_id: str,
        annotations: List[WireAnnotation],
        status: TaskStatus,
        notes: str = "",
    ) -> AnnotationTask:
        """
        Write a task's annotations, status and notes

        Args:
            task_id: Task identifier
            annotations: Annotations in wire format
            status: New task status
            notes: Annotator notes

        Returns:
            The updated task as stored by the server
        """
        payload = {
            "annotations": [a.to_dict() for a in annotations],
            "status": TaskStatus(status).value,
            "notes": notes,
        }
        data = self._request("PATCH", f"/retraining/tasks/{task_id}", json=payload)
        return AnnotationTask.from_dict(data)

    def assign_task(self, task_id: str) -> AnnotationTask:
        """Assign a task to the calling user"""
        data = self._request("POST", f"/retraining/tasks/{task_id}/assign")
        return AnnotationTask.from_dict(data)

    def get_proxied_image_url(self, original_url: str) -> str:
        """
        Route restricted storage hosts through the API's image proxy

        Args:
            original_url: Image URL as stored on the task

        Returns:
            Proxy URL for restricted hosts, otherwise the original URL
        """
        if not original_url:
            return original_url

        host = urlparse(original_url).hostname or ""
        if host in config.PROXY_IMAGE_HOSTS:
            encoded_url = quote(original_url, safe="")
            return f"{self.base_url}/retraining/proxy-image?url={encoded_url}"

        return original_url

    def fetch_image(self, url: str) -> Image.Image:
        """
        Download an image

        Args:
            url: Image URL (already proxied if needed)

        Returns:
            RGB PIL Image

        Raises:
            GatewayError: On transport, HTTP or decode failure
        """
        if not url:
            raise GatewayError("Task has no image URL", status=None, url=url)

        # Credentials only go to the API itself (including its image proxy)
        headers = {}
        if self.token and url.startswith(f"{self.base_url}/"):
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise GatewayError(str(e), status=None, url=url) from e

        if not response.ok:
            raise GatewayError(
                f"HTTP {response.status_code}: {response.reason}",
                status=response.status_code,
                url=url,
            )

        try:
            image = Image.open(BytesIO(response.content))
            return image.convert("RGB")
        except (UnidentifiedImageError, OSError) as e:
            raise GatewayError(f"Could not decode image: {e}", response.status_code, url) from e
