"""Mocked cloud save collaborator."""

from idlevault.cloud.mock import CLOUD_STORAGE_KEY, CloudConflict, CloudError, CloudResult, MockCloudSave

__all__ = ["CLOUD_STORAGE_KEY", "CloudConflict", "CloudError", "CloudResult", "MockCloudSave"]
