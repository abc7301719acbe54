import io
import re
import logging
from typing import Optional

import PyPDF2
import pdfplumber

from portal.errors import ExtractionFailed, PhoneNotFound

logger = logging.getLogger(__name__)

# optional "+" and 1-3 digit prefix, optional space/hyphen, then the 10 digit number
PHONE_PATTERN = re.compile(r'(\+\d{1,3}[- ]?)?\d{10}')

PDF_MAGIC = b"%PDF-"


class DocumentParser:
    def extract_text_from_pdf(self, pdf_bytes: bytes) -> str:
        text = ""
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                for page in pdf.pages:
                    page_text = page.extract_text()
                    if page_text:
                        text += page_text + "\n"
        except Exception as e:
            logger.warning(f"pdfplumber failed, trying PyPDF2 fallback: {e}")
            text = ""
            try:
                reader = PyPDF2.PdfReader(io.BytesIO(pdf_bytes))
                for page in reader.pages:
                    page_text = page.extract_text()
                    if page_text:
                        text += page_text + "\n"
            except Exception as e2:
                logger.error(f"PDF extraction failed: {e2}")
                raise ExtractionFailed(f"Failed to parse PDF: {e2}") from e2
        return text.strip()

    def find_phone(self, text: str) -> Optional[str]:
        match = PHONE_PATTERN.search(text or "")
        return match.group() if match else None

    def extract_phone(self, pdf_bytes: bytes) -> str:
        text = self.extract_text_from_pdf(pdf_bytes)
        phone = self.find_phone(text)
        if not phone:
            logger.error("No phone number found in PDF.")
            raise PhoneNotFound()
        return phone

    @staticmethod
    def is_pdf(pdf_bytes: bytes, filename: Optional[str] = None, content_type: Optional[str] = None) -> bool:
        if content_type and content_type not in ("application/pdf", "application/octet-stream"):
            return False
        if filename and not filename.lower().endswith(".pdf"):
            return False
        return bool(pdf_bytes) and pdf_bytes.lstrip()[:5] == PDF_MAGIC
