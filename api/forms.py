"""Inbound multipart form adapter."""

import io
from typing import BinaryIO

from starlette.datastructures import FormData, UploadFile


class UploadedForm:
    """Expose uploads of a parsed inbound form by field name.

    Wraps the ``FormData`` returned by ``await request.form()`` so that a
    handler can forward the files through a synchronous build. Each call
    returns its own stream; the upload's file stays open for the form owner.
    """

    def __init__(self, form: FormData) -> None:
        self._form = form

    def open_file(self, field_name: str) -> BinaryIO:
        upload = self._form.get(field_name)
        if not isinstance(upload, UploadFile):
            raise KeyError(field_name)
        upload.file.seek(0)
        content = upload.file.read()
        upload.file.seek(0)
        return io.BytesIO(content)
