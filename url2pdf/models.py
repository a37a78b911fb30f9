"""
URL to PDF Service Pydantic Models.

Request and response models for the PDF generation API.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


DEFAULT_MARGIN: Dict[str, Union[str, float]] = {
    "top": "20px",
    "right": "20px",
    "bottom": "20px",
    "left": "20px",
}

DEFAULT_HEADER_TEMPLATE = '<div style="font-size: 10px; margin: auto;"></div>'
DEFAULT_FOOTER_TEMPLATE = (
    '<div style="font-size: 10px; margin: auto; color: #666;">'
    '<span class="pageNumber"></span> / <span class="totalPages"></span>'
    "</div>"
)

# Keyword arguments for Playwright's page.pdf()
DEFAULT_PDF_OPTIONS: Dict[str, Any] = {
    "format": "A4",
    "print_background": True,
    "display_header_footer": True,
    "header_template": DEFAULT_HEADER_TEMPLATE,
    "footer_template": DEFAULT_FOOTER_TEMPLATE,
}


class _OptionsModel(BaseModel):
    # Accept both print_background and printBackground; reject anything else
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class PdfMargin(_OptionsModel):
    """Page margins as CSS lengths ("20px", "1cm") or pixel numbers."""

    top: Optional[Union[str, float]] = None
    right: Optional[Union[str, float]] = None
    bottom: Optional[Union[str, float]] = None
    left: Optional[Union[str, float]] = None


class RenderOptions(_OptionsModel):
    """Caller-overridable PDF export options.

    Every field is optional; unset fields keep the service defaults.
    """

    format: Optional[str] = Field(default=None, description="Paper format, e.g. A4, Letter")
    landscape: Optional[bool] = Field(default=None, description="Landscape orientation")
    margin: Optional[PdfMargin] = Field(default=None, description="Page margins")
    print_background: Optional[bool] = Field(default=None, description="Print background graphics")
    display_header_footer: Optional[bool] = Field(default=None, description="Render header and footer")
    header_template: Optional[str] = Field(default=None, description="HTML template for the page header")
    footer_template: Optional[str] = Field(default=None, description="HTML template for the page footer")
    scale: Optional[float] = Field(default=None, ge=0.1, le=2, description="Rendering scale")
    page_ranges: Optional[str] = Field(default=None, description="Pages to print, e.g. '1-5, 8'")
    width: Optional[Union[str, float]] = Field(default=None, description="Paper width, overrides format")
    height: Optional[Union[str, float]] = Field(default=None, description="Paper height, overrides format")
    prefer_css_page_size: Optional[bool] = Field(
        default=None,
        alias="preferCSSPageSize",
        description="Honour CSS @page size",
    )

    def merged_with_defaults(self) -> Dict[str, Any]:
        """
        Build the page.pdf() keyword arguments.

        Caller values override the defaults key by key; margins are merged
        per side.

        Returns:
            Dict of Playwright PDF options
        """
        pdf_options = dict(DEFAULT_PDF_OPTIONS)
        pdf_options.update(self.model_dump(exclude_none=True, exclude={"margin"}))

        margin = dict(DEFAULT_MARGIN)
        if self.margin is not None:
            margin.update(self.margin.model_dump(exclude_none=True))
        pdf_options["margin"] = margin

        return pdf_options


class PdfRequest(BaseModel):
    """Request body for POST /generate-pdf."""

    url: Optional[str] = Field(default=None, description="Absolute URL of the page to render")
    filename: Optional[str] = Field(default=None, description="Download filename, derived from the URL if omitted")
    options: Optional[RenderOptions] = Field(default=None, description="PDF export options")


class PdfResult(BaseModel):
    """A rendered PDF document."""

    content: bytes = Field(..., description="Raw PDF bytes")
    size_bytes: int = Field(..., description="Length of the PDF in bytes")
    final_url: str = Field(..., description="Final URL after redirects")
    render_time_ms: int = Field(..., description="Time taken to render the page")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="OK", description="Service status")
    timestamp: str = Field(..., description="Current time, ISO-8601")
    active_sessions: int = Field(..., description="Browser sessions currently open")
    max_concurrent_sessions: int = Field(..., description="Configured session limit")


class ErrorResponse(BaseModel):
    """JSON body returned for every error."""

    error: str
    message: Optional[str] = None
    timestamp: Optional[str] = None
    example: Optional[Any] = None
