import os

from flask import current_app
from werkzeug.utils import secure_filename


def allowed_file(filename):
    """Check the extension against ALLOWED_DOCUMENT_EXTENSIONS"""
    extension = os.path.splitext(filename)[1].lower().lstrip('.')
    return extension in current_app.config['ALLOWED_DOCUMENT_EXTENSIONS']


def read_upload(files):
    """
    Pull the uploaded document out of a multipart request.

    Returns:
        Tuple of (errors, upload) where upload is a dict with data, filename
        and content_type, or None when errors is set
    """
    file = files.get('file')
    if not file or not file.filename:
        return {'file': 'File is required'}, None

    filename = secure_filename(file.filename)
    if not filename or not allowed_file(filename):
        allowed = ', '.join(sorted(current_app.config['ALLOWED_DOCUMENT_EXTENSIONS']))
        return {'file': f'File type not allowed. Allowed types: {allowed}'}, None

    data = file.read()
    if not data:
        return {'file': 'File is empty'}, None

    return None, {
        'data': data,
        'filename': filename,
        'content_type': file.mimetype,
    }
