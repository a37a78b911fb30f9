"""
PDF Router - PDF generation endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from ....config import settings
from ....errors import ClientDisconnectedError, UrlValidationError
from ....models import PdfRequest, PdfResult, RenderOptions
from ....services.disconnect import run_until_disconnected
from ....services.renderer import render_pdf
from ....services.url_utils import content_disposition, normalize_url, resolve_filename

logger = logging.getLogger("url2pdf.api.pdf")

router = APIRouter(tags=["pdf"])

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
BODY_EXAMPLE = {"url": "https://example.com", "filename": "optional-name.pdf"}
QUERY_EXAMPLE = "/generate-pdf?url=https://example.com&filename=optional-name.pdf"

# The body is parsed by hand, so describe it for the docs
POST_BODY_SCHEMA = {
    "requestBody": {
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "url": {"type": "string"},
                        "filename": {"type": "string"},
                        "options": {"type": "object", "description": "PDF export options"},
                    },
                },
                "example": BODY_EXAMPLE,
            },
            FORM_CONTENT_TYPE: {
                "schema": {
                    "type": "object",
                    "properties": {"url": {"type": "string"}, "filename": {"type": "string"}},
                },
            },
        },
    },
}


def _pdf_response(result: PdfResult, filename: str) -> Response:
    return Response(
        content=result.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": content_disposition(filename),
            "Content-Length": str(result.size_bytes),
        },
    )


async def _generate(
    request: Request,
    url: str,
    filename: Optional[str],
    options: Optional[RenderOptions],
) -> Response:
    target = normalize_url(url)
    if target is None:
        raise UrlValidationError("Invalid URL format")

    logger.info(f"Generating PDF for: {target}")

    try:
        result = await run_until_disconnected(
            request,
            render_pdf(target, options),
            poll_interval=settings.disconnect_poll_interval_seconds,
        )
    except ClientDisconnectedError as e:
        logger.info(f"Abandoned PDF for {target}: {e}")
        # Nobody is left to read this
        return Response(status_code=e.status_code)

    return _pdf_response(result, resolve_filename(url, filename))


async def _read_pdf_request(request: Request) -> PdfRequest:
    """
    Parse the POST body.

    JSON bodies carry url, filename and options; form-encoded bodies carry
    url and filename only. Any other body is treated as empty.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type == FORM_CONTENT_TYPE:
        form = await request.form()
        return PdfRequest(url=form.get("url"), filename=form.get("filename"))

    if content_type and content_type != "application/json" and not content_type.endswith("+json"):
        return PdfRequest()

    body = await request.body()
    if not body:
        return PdfRequest()

    try:
        return PdfRequest.model_validate_json(body)
    except ValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in e.errors(include_url=False)],
            body=body,
        )


@router.post("/generate-pdf", response_class=Response, openapi_extra=POST_BODY_SCHEMA)
async def generate_pdf_from_body(request: Request) -> Response:
    """
    Render a URL to PDF from a JSON or form-encoded body.

    Body fields:
    - url: page to render (required)
    - filename: download name, derived from the URL if omitted
    - options: PDF export options, JSON bodies only (format, landscape,
      margin, printBackground, displayHeaderFooter, headerTemplate,
      footerTemplate, scale, pageRanges, width, height, preferCSSPageSize)

    Returns:
        The PDF as an attachment
    """
    payload = await _read_pdf_request(request)
    if not payload.url:
        raise UrlValidationError("URL is required", example=BODY_EXAMPLE)

    return await _generate(request, payload.url, payload.filename, payload.options)


@router.get("/generate-pdf", response_class=Response)
async def generate_pdf_from_query(
    request: Request,
    url: Optional[str] = Query(default=None, description="Page to render"),
    filename: Optional[str] = Query(default=None, description="Download filename"),
) -> Response:
    """
    Render a URL to PDF from query parameters.

    Render options are not accepted here; the page is always rendered with
    the service defaults.
    """
    if not url:
        raise UrlValidationError("URL parameter is required", example=QUERY_EXAMPLE)

    return await _generate(request, url, filename, None)
