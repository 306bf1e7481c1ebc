"""
Document Storage Service
Stores uploaded application documents in a Google Cloud Storage bucket, or in a
local folder when no bucket is configured
"""

import logging
import os
import uuid
from typing import Dict, Optional

from flask import current_app
from werkzeug.utils import secure_filename

from app.services.errors import UpstreamFailure

logger = logging.getLogger(__name__)


class StorageService:
    """Upload and delete document objects"""

    def __init__(self, config):
        """
        Initialize storage service with configuration

        Args:
            config: Flask app config object
        """
        self.bucket_name = config.get('GCS_BUCKET_NAME')
        self.upload_folder = config.get('UPLOAD_FOLDER') or './data/uploads'
        self.base_url = (config.get('UPLOAD_BASE_URL') or '/uploads').rstrip('/')

    @property
    def backend(self):
        return 'gcs' if self.bucket_name else 'local'

    def upload(
        self,
        data: bytes,
        folder: str,
        filename: str,
        content_type: Optional[str] = None
    ) -> Dict:
        """
        Store a document

        Args:
            data: Raw file content
            folder: Logical folder, e.g. bookings/<id>/user
            filename: Original filename (only its extension is kept)
            content_type: MIME type recorded on the stored object

        Returns:
            Dict with the public url and the publicId used to delete it later

        Raises:
            UpstreamFailure: If the object could not be stored
        """
        _, ext = os.path.splitext(secure_filename(filename or ''))
        object_key = f"{folder.strip('/')}/{uuid.uuid4().hex}{ext.lower()}"

        try:
            if self.bucket_name:
                url = self._upload_gcs(object_key, data, content_type)
            else:
                url = self._upload_local(object_key, data)
        except Exception as e:
            logger.exception(f"Document upload failed for {object_key}")
            raise UpstreamFailure(f"Failed to upload document: {str(e)}")

        logger.info(f"Stored document {object_key} ({self.backend})")
        return {'url': url, 'publicId': object_key}

    def delete(self, public_id: str) -> None:
        """
        Remove a stored document

        Raises:
            UpstreamFailure: If the backend refused the delete
        """
        try:
            if self.bucket_name:
                self._delete_gcs(public_id)
            else:
                self._delete_local(public_id)
        except Exception as e:
            raise UpstreamFailure(f"Failed to delete document {public_id}: {str(e)}")

        logger.info(f"Deleted document {public_id} ({self.backend})")

    # ----- Google Cloud Storage -----

    def _bucket(self):
        from google.cloud import storage

        client = storage.Client()
        return client.bucket(self.bucket_name)

    def _upload_gcs(self, object_key, data, content_type):
        blob = self._bucket().blob(object_key)
        blob.upload_from_string(data, content_type=content_type or 'application/octet-stream')
        return blob.public_url

    def _delete_gcs(self, object_key):
        self._bucket().blob(object_key).delete()

    # ----- Local folder -----

    def _local_path(self, object_key):
        root = os.path.abspath(self.upload_folder)
        path = os.path.abspath(os.path.join(root, object_key))
        if not path.startswith(root + os.sep):
            raise ValueError(f"Invalid object key: {object_key}")
        return path

    def _upload_local(self, object_key, data):
        path = self._local_path(object_key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'wb') as f:
            f.write(data)
        return f"{self.base_url}/{object_key}"

    def _delete_local(self, object_key):
        path = self._local_path(object_key)
        if os.path.exists(path):
            os.remove(path)


def create_storage_service():
    return StorageService(current_app.config)
