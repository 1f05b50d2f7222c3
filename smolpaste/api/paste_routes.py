"""Paste routes: create, delete and serve."""

from __future__ import annotations

import time
import uuid
from urllib.parse import quote

from dishka import FromDishka
from quart import Blueprint, Response, request
from quart_dishka import inject
from werkzeug.exceptions import NotFound

from smolpaste.api.multipart_reader import MultipartReader, UploadPart, multipart_boundary
from smolpaste.api.request_utils import extract_token, stored_filename
from smolpaste.config import Settings
from smolpaste.enums import OperationStatus, PasteOperation
from smolpaste.error_handling import (
    ErrorCode,
    SmolpasteError,
    error_response,
    raise_bad_request,
)
from smolpaste.logging_utils import bind_request_context, create_service_logger
from smolpaste.protocols import (
    BlobStoreProtocol,
    PasteMetricsProtocol,
    PasteRepositoryProtocol,
    TokenAuthenticatorProtocol,
)

logger = create_service_logger("api.paste")
paste_bp = Blueprint("paste_routes", __name__)

_METRIC_STATUS = {
    ErrorCode.UNAUTHORIZED: OperationStatus.UNAUTHORIZED,
    ErrorCode.NOT_FOUND: OperationStatus.NOT_FOUND,
}


def _domain_error_response(
    error: SmolpasteError,
    operation: PasteOperation,
    metrics: PasteMetricsProtocol,
) -> Response:
    """Log, count and translate a domain error."""
    if error.is_client_error:
        logger.warning(f"{operation.value} rejected: {error}", error_code=error.error_code)
        status = _METRIC_STATUS.get(error.error_detail.error_code, OperationStatus.FAILED)
    else:
        logger.error(f"{operation.value} failed: {error}", error_code=error.error_code)
        status = OperationStatus.ERROR
    metrics.record_operation(operation, status)
    return error_response(error)


def _unexpected_error_response(
    exc: Exception,
    operation: PasteOperation,
    metrics: PasteMetricsProtocol,
) -> Response:
    logger.error(f"Unexpected error during {operation.value}: {exc}", exc_info=True)
    metrics.record_operation(operation, OperationStatus.ERROR)
    return Response("", status=500)


async def _first_upload_part(correlation_id: uuid.UUID) -> UploadPart:
    """Return the first multipart part of the request, which must name a file."""
    boundary = multipart_boundary(request.headers.get("Content-Type"))
    if boundary is None:
        raise_bad_request(
            operation="create_paste",
            message="Request body is not multipart/form-data",
            correlation_id=correlation_id,
        )

    reader = MultipartReader(request.body, boundary)
    try:
        part = await reader.next_part()
    except ValueError as exc:
        raise_bad_request(
            operation="create_paste",
            message=f"Malformed multipart body: {exc}",
            correlation_id=correlation_id,
        )

    if part is None:
        raise_bad_request(
            operation="create_paste",
            message="Multipart body has no fields",
            correlation_id=correlation_id,
        )
    if part.filename is None:
        raise_bad_request(
            operation="create_paste",
            message="First multipart field has no filename",
            correlation_id=correlation_id,
            field=part.name,
        )
    return part


@paste_bp.route("/new", methods=["POST"])
@inject
async def create_paste(
    authenticator: FromDishka[TokenAuthenticatorProtocol],
    repository: FromDishka[PasteRepositoryProtocol],
    blob_store: FromDishka[BlobStoreProtocol],
    metrics: FromDishka[PasteMetricsProtocol],
    settings: FromDishka[Settings],
) -> Response:
    """
    Store the first multipart field of the body as a new paste.

    Responds with the public URL of the paste as plain text.
    """
    correlation_id = uuid.uuid4()
    bind_request_context(str(correlation_id), "create_paste")

    try:
        await authenticator.authenticate(extract_token(), correlation_id)

        paste_id = str(uuid.uuid4())
        part = await _first_upload_part(correlation_id)
        filename = stored_filename(
            paste_id,
            part.filename or "",
            settings.ALLOWED_EXTENSIONS,
            correlation_id,
        )

        written = await blob_store.create(filename, part.iter_data(), correlation_id)

        try:
            await repository.insert_paste(
                paste_id, written, filename, int(time.time()), correlation_id
            )
        except SmolpasteError:
            await blob_store.discard(filename, correlation_id)
            raise

        url = f"{settings.BASE_URL}/paste/{quote(filename)}"
        logger.info(f"Created paste {paste_id}", size=written, url=url)
        metrics.record_operation(PasteOperation.CREATE, OperationStatus.SUCCESS)
        return Response(url, status=200, content_type="text/plain; charset=utf-8")
    except SmolpasteError as e:
        return _domain_error_response(e, PasteOperation.CREATE, metrics)
    except Exception as e:
        return _unexpected_error_response(e, PasteOperation.CREATE, metrics)


@paste_bp.route("/delete", methods=["DELETE"])
@inject
async def delete_paste(
    authenticator: FromDishka[TokenAuthenticatorProtocol],
    repository: FromDishka[PasteRepositoryProtocol],
    blob_store: FromDishka[BlobStoreProtocol],
    metrics: FromDishka[PasteMetricsProtocol],
) -> Response:
    """Remove the paste row, then unlink its file."""
    correlation_id = uuid.uuid4()
    bind_request_context(str(correlation_id), "delete_paste")

    try:
        await authenticator.authenticate(extract_token(), correlation_id)

        paste_id = request.args.get("id")
        if paste_id is None:
            raise_bad_request(
                operation="delete_paste",
                message="Missing 'id' query parameter",
                correlation_id=correlation_id,
            )

        filename = await repository.pop_paste_filename(paste_id, correlation_id)
        logger.info(f"Deleting paste {filename}")

        try:
            await blob_store.remove(filename, correlation_id)
        except SmolpasteError:
            logger.error(
                "Paste row deleted but its file was not; file is orphaned",
                paste_id=paste_id,
                filename=filename,
            )
            raise

        metrics.record_operation(PasteOperation.DELETE, OperationStatus.SUCCESS)
        return Response("", status=200)
    except SmolpasteError as e:
        return _domain_error_response(e, PasteOperation.DELETE, metrics)
    except Exception as e:
        return _unexpected_error_response(e, PasteOperation.DELETE, metrics)


@paste_bp.route("/paste/<path:filename>", methods=["GET"])
@inject
async def serve_paste(
    filename: str,
    blob_store: FromDishka[BlobStoreProtocol],
    metrics: FromDishka[PasteMetricsProtocol],
) -> Response:
    """Serve a stored paste verbatim."""
    try:
        response = await blob_store.serve_file(filename)
    except NotFound:
        metrics.record_operation(PasteOperation.SERVE, OperationStatus.NOT_FOUND)
        return Response("", status=404)

    metrics.record_operation(PasteOperation.SERVE, OperationStatus.SUCCESS)
    return response
