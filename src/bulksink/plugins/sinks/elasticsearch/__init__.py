from __future__ import annotations

from .bulk import BulkIndexEntry, BulkRequest, BulkResponse
from .client import ElasticsearchClient, normalize_hosts
from .config import ElasticsearchSinkConfig, RenderIndexFailedPolicy
from .resolver import Aborted, DestinationResolver, Resolution, Resolved, Skipped
from .sink import PLUGIN_METADATA, ConsumeResult, ElasticsearchSink, ResultStatus
from .submitter import BulkSubmitter

__all__ = [
    "Aborted",
    "BulkIndexEntry",
    "BulkRequest",
    "BulkResponse",
    "BulkSubmitter",
    "ConsumeResult",
    "DestinationResolver",
    "ElasticsearchClient",
    "ElasticsearchSink",
    "ElasticsearchSinkConfig",
    "PLUGIN_METADATA",
    "RenderIndexFailedPolicy",
    "Resolution",
    "Resolved",
    "ResultStatus",
    "Skipped",
    "normalize_hosts",
]
