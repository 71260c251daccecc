"""
Notes Reader
Extracts plain text from uploaded notes (PDF or TXT) for AI card generation
"""
import io
from typing import Optional

import PyPDF2


def extract_text_from_pdf(data: bytes, max_pages: Optional[int] = None) -> str:
    """
    Extract text content from PDF bytes

    Args:
        data: Raw PDF file content
        max_pages: Maximum number of pages to extract (None = all pages)

    Returns:
        Extracted text content

    Raises:
        ValueError: If the PDF cannot be read
    """
    text = ""
    try:
        pdf_reader = PyPDF2.PdfReader(io.BytesIO(data))
        num_pages = len(pdf_reader.pages)
        pages_to_read = min(num_pages, max_pages) if max_pages else num_pages
        for page_num in range(pages_to_read):
            extracted = pdf_reader.pages[page_num].extract_text() or ""
            text += extracted + "\n\n"
    except Exception as e:
        raise ValueError(f"Error reading PDF file: {str(e)}") from e
    return text.strip()


def read_notes(filename: str, data: bytes) -> str:
    """Decode an uploaded notes file by extension"""
    if filename.lower().endswith(".pdf"):
        return extract_text_from_pdf(data)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"Error reading text file: {str(e)}") from e
