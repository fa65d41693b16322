from types import SimpleNamespace
from unittest.mock import MagicMock

from azure.devops.exceptions import AzureDevOpsServiceError


def page(items, continuation_token=None):
    return SimpleNamespace(value=items, continuation_token=continuation_token)


def service_error(message, type_key="VssServiceException"):
    wrapped = MagicMock(inner_exception=None, message=message, type_key=type_key)
    return AzureDevOpsServiceError(wrapped)
