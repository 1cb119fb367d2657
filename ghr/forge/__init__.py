"""Forge REST client: release creation and asset upload."""

from .errors import AssetError, ReleaseError
from .http import HttpClient, HttpError, HttpResponse, MockHttpClient, RealHttpClient
from .mime import MimeTable
from .models import (
    AssetRejected,
    AssetUndecodable,
    AssetUploaded,
    AssetUploadOutcome,
    ReleaseRequest,
    ReleaseResult,
    UploadedAsset,
)
from .publisher import ReleasePublisher
from .uploader import AssetUploader, expand_upload_url

__all__ = [
    # errors
    "AssetError",
    "ReleaseError",
    # http
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
    # models
    "AssetRejected",
    "AssetUndecodable",
    "AssetUploaded",
    "AssetUploadOutcome",
    "ReleaseRequest",
    "ReleaseResult",
    "UploadedAsset",
    # workflow
    "AssetUploader",
    "MimeTable",
    "ReleasePublisher",
    "expand_upload_url",
]
