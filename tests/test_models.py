import pytest
from pydantic import ValidationError

from url2pdf.models import (
    DEFAULT_FOOTER_TEMPLATE,
    DEFAULT_HEADER_TEMPLATE,
    PdfRequest,
    RenderOptions,
)


def test_defaults_without_overrides():
    options = RenderOptions().merged_with_defaults()
    assert options == {
        "format": "A4",
        "print_background": True,
        "display_header_footer": True,
        "header_template": DEFAULT_HEADER_TEMPLATE,
        "footer_template": DEFAULT_FOOTER_TEMPLATE,
        "margin": {"top": "20px", "right": "20px", "bottom": "20px", "left": "20px"},
    }


def test_footer_shows_page_numbers():
    assert '<span class="pageNumber"></span> / <span class="totalPages"></span>' in DEFAULT_FOOTER_TEMPLATE
    assert "color: #666" in DEFAULT_FOOTER_TEMPLATE


def test_overrides_replace_defaults_by_key():
    options = RenderOptions(format="Letter", landscape=True, print_background=False).merged_with_defaults()
    assert options["format"] == "Letter"
    assert options["landscape"] is True
    assert options["print_background"] is False
    # untouched defaults survive
    assert options["display_header_footer"] is True
    assert options["footer_template"] == DEFAULT_FOOTER_TEMPLATE


def test_margin_merges_per_side():
    options = RenderOptions.model_validate({"margin": {"top": "1in", "left": 0}}).merged_with_defaults()
    assert options["margin"] == {"top": "1in", "right": "20px", "bottom": "20px", "left": 0}


def test_camel_case_keys_are_accepted():
    options = RenderOptions.model_validate(
        {
            "printBackground": False,
            "displayHeaderFooter": False,
            "headerTemplate": "<div>head</div>",
            "pageRanges": "1-2",
            "preferCSSPageSize": True,
        }
    )
    merged = options.merged_with_defaults()
    assert merged["print_background"] is False
    assert merged["display_header_footer"] is False
    assert merged["header_template"] == "<div>head</div>"
    assert merged["page_ranges"] == "1-2"
    assert merged["prefer_css_page_size"] is True


def test_snake_case_keys_are_accepted():
    options = RenderOptions.model_validate({"print_background": False, "prefer_css_page_size": True})
    assert options.print_background is False
    assert options.prefer_css_page_size is True


def test_unknown_option_is_rejected():
    with pytest.raises(ValidationError):
        RenderOptions.model_validate({"format": "A4", "javascript": "alert(1)"})


def test_unknown_margin_side_is_rejected():
    with pytest.raises(ValidationError):
        RenderOptions.model_validate({"margin": {"middle": "1cm"}})


@pytest.mark.parametrize("scale", [0.05, 2.5])
def test_scale_out_of_range_is_rejected(scale):
    with pytest.raises(ValidationError):
        RenderOptions(scale=scale)


def test_pdf_request_allows_missing_url():
    request = PdfRequest.model_validate({})
    assert request.url is None
    assert request.filename is None
    assert request.options is None


def test_pdf_request_parses_nested_options():
    request = PdfRequest.model_validate(
        {"url": "https://example.com", "options": {"landscape": True}}
    )
    assert request.options.landscape is True
