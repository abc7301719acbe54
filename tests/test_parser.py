"""
Tests for phone extraction from uploaded PDFs.
"""
import pytest

from conftest import make_pdf
from portal.errors import ExtractionFailed, PhoneNotFound
from portal.services.parser import DocumentParser


@pytest.fixture
def parser():
    return DocumentParser()


@pytest.mark.parametrize("text, expected", [
    ("Call me at +91 9876543210", "+91 9876543210"),
    ("Phone: +1-4155550123 (mobile)", "+1-4155550123"),
    ("Mobile +919876543210", "+919876543210"),
    ("contact 9876543210 anytime", "9876543210"),
])
def test_find_phone_formats(parser, text, expected):
    assert parser.find_phone(text) == expected


def test_find_phone_returns_first_in_document_order(parser):
    text = "Home 9123456780\nWork +44 7700900123"
    assert parser.find_phone(text) == "9123456780"


def test_find_phone_ignores_short_numbers(parser):
    assert parser.find_phone("Ref 12345, zip 560001, year 2024") is None
    assert parser.find_phone("") is None


def test_extract_phone_from_pdf(parser):
    pdf = make_pdf("Jane Doe", "Call me at +91 9876543210")
    assert parser.extract_phone(pdf) == "+91 9876543210"


def test_extract_text_from_pdf(parser):
    text = parser.extract_text_from_pdf(make_pdf("Senior Backend Engineer"))
    assert "Senior Backend Engineer" in text


def test_pdf_without_phone_raises_not_found(parser):
    with pytest.raises(PhoneNotFound):
        parser.extract_phone(make_pdf("No contact details here"))


def test_undecodable_pdf_raises_extraction_failed(parser):
    with pytest.raises(ExtractionFailed):
        parser.extract_phone(b"%PDF-1.4\nthis is not really a pdf")


def test_is_pdf(parser):
    pdf = make_pdf("hello")
    assert parser.is_pdf(pdf, "cv.pdf", "application/pdf")
    assert parser.is_pdf(pdf, "CV.PDF")
    assert parser.is_pdf(pdf)
    assert not parser.is_pdf(pdf, "cv.docx")
    assert not parser.is_pdf(pdf, "cv.pdf", "application/msword")
    assert not parser.is_pdf(b"PK\x03\x04 zipped docx", "cv.pdf")
    assert not parser.is_pdf(b"", "cv.pdf")
