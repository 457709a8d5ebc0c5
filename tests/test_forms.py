"""Tests for form-file sources and forwarding uploads to a live app."""

import io

import pytest
from helpers import RecordingLogger
from pydantic import BaseModel
from starlette.applications import Starlette
from starlette.datastructures import FormData, UploadFile
from starlette.requests import Request as InboundRequest
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from api.forms import UploadedForm
from core.exceptions import FileAccessError
from core.request_types import ResponseSlot
from services.builder import new_requester
from services.sources import LocalFiles


class ReceivedFile(BaseModel):
    filename: str
    content_type: str | None
    content: str


class Received(BaseModel):
    files: dict[str, ReceivedFile]
    fields: dict[str, str]
    transaction: str | None
    content_type: str


async def collect_form(request: InboundRequest) -> JSONResponse:
    form = await request.form()
    files = {}
    fields = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            files[key] = {
                "filename": value.filename,
                "content_type": value.content_type,
                "content": (await value.read()).decode(),
            }
        else:
            fields[key] = value
    return JSONResponse(
        {
            "files": files,
            "fields": fields,
            "transaction": request.headers.get("x-transaction-id"),
            "content_type": request.headers["content-type"],
        }
    )


async def collect_body(request: InboundRequest) -> JSONResponse:
    body = await request.body()
    return JSONResponse({"size": len(body), "content_type": request.headers["content-type"]})


@pytest.fixture
def upstream():
    app = Starlette(
        routes=[
            Route("/form", collect_form, methods=["POST"]),
            Route("/body", collect_body, methods=["POST"]),
        ]
    )
    with TestClient(app) as client:
        yield client


def _inbound_form() -> FormData:
    return FormData(
        [
            ("avatar", UploadFile(io.BytesIO(b"image-bytes"), filename="me.png")),
            ("note", "plain text field"),
        ]
    )


class TestUploadedForm:
    def test_open_file(self):
        with UploadedForm(_inbound_form()).open_file("avatar") as stream:
            assert stream.read() == b"image-bytes"

    def test_missing_and_non_file_fields(self):
        form = UploadedForm(_inbound_form())

        with pytest.raises(KeyError):
            form.open_file("absent")
        with pytest.raises(KeyError):
            form.open_file("note")

    def test_rewinds_consumed_upload(self):
        inbound = _inbound_form()
        inbound["avatar"].file.read()

        assert UploadedForm(inbound).open_file("avatar").read() == b"image-bytes"
        assert inbound["avatar"].file.tell() == 0

    def test_streams_are_independent(self):
        upload = UploadFile(io.BytesIO(b"image-bytes"), filename="me.png")
        form = UploadedForm(FormData([("avatar", upload)]))

        form.open_file("avatar").close()

        assert form.open_file("avatar").read() == b"image-bytes"
        assert not upload.file.closed

    def test_one_upload_feeds_two_parts(self, upstream):
        slot = ResponseSlot(Received)
        outcome = (
            new_requester(client=upstream, logger=RecordingLogger())
            .method("POST")
            .url("http://testserver/form")
            .response(slot)
            .build_multipart(UploadedForm(_inbound_form()), {"front": "avatar", "back": "avatar"}, {})
            .send()
        )

        assert outcome.ok
        assert set(slot.value.files) == {"front", "back"}
        assert {f.content for f in slot.value.files.values()} == {"image-bytes"}


class TestLocalFiles:
    def test_open_file(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"\x01\x02")

        with LocalFiles({"data": path}).open_file("data") as stream:
            assert stream.read() == b"\x01\x02"

    def test_missing_field_and_missing_path(self, tmp_path):
        files = LocalFiles({"gone": tmp_path / "nope.bin"})

        with pytest.raises(KeyError):
            files.open_file("other")
        with pytest.raises(OSError):
            files.open_file("gone")

    def test_missing_path_is_file_access_error(self, tmp_path):
        files = LocalFiles({"gone": tmp_path / "nope.bin"})

        prepared = new_requester().method("POST").url("http://x.local").build_octet(files, "gone")

        assert isinstance(prepared.error, FileAccessError)


class TestForwarding:
    def test_multipart_forward(self, upstream):
        slot = ResponseSlot(Received)
        status, error = (
            new_requester(client=upstream, logger=RecordingLogger())
            .method("POST")
            .url("http://testserver/form")
            .transaction_id("tx-123")
            .response(slot)
            .build_multipart(UploadedForm(_inbound_form()), {"picture": "avatar"}, {"owner": "bob"})
            .send()
        )

        assert (status, error) == (200, None)
        received = slot.value
        assert received.files == {
            "picture": ReceivedFile(
                filename="avatar", content_type="application/octet-stream", content="image-bytes"
            )
        }
        assert received.fields == {"owner": "bob"}
        assert received.transaction == "tx-123"
        assert received.content_type.startswith("multipart/form-data; boundary=")

    def test_fields_only_forward(self, upstream):
        slot = ResponseSlot(Received)
        outcome = (
            new_requester(client=upstream, logger=RecordingLogger())
            .method("POST")
            .url("http://testserver/form")
            .response(slot)
            .build_multipart(UploadedForm(FormData()), {}, {"a": "1", "b": "2"})
            .send()
        )

        assert outcome.ok
        assert slot.value.files == {}
        assert slot.value.fields == {"a": "1", "b": "2"}

    def test_octet_forward(self, upstream):
        slot = ResponseSlot(dict[str, int | str])
        outcome = (
            new_requester(client=upstream, logger=RecordingLogger())
            .method("POST")
            .url("http://testserver/body")
            .response(slot)
            .build_octet(UploadedForm(_inbound_form()), "avatar")
            .send()
        )

        assert outcome.ok
        assert slot.value == {"size": len(b"image-bytes"), "content_type": "application/octet-stream"}
