# core/storage_backends.py
from __future__ import annotations

import os

from storages.backends.s3boto3 import S3Boto3Storage


class MediaStorage(S3Boto3Storage):
    """
    Media bucket storage (payment screenshots, refund receipts, complaint attachments).

    Private bucket: URLs are always signed.
    """
    bucket_name = os.getenv("AWS_S3_MEDIA_BUCKET", "")
    default_acl = None
    file_overwrite = False
    location = "media"
    querystring_auth = True
    custom_domain = None
