"""
Извлечение текста из вложений.

Формат определяется по расширению файла. Ошибка извлечения никогда не
прерывает проверку: возвращается пустая строка и пишется предупреждение.
"""

import logging
import re
from io import BytesIO
from pathlib import PurePath

from bs4 import BeautifulSoup
from docx import Document as DocxDocument
from pdfminer.high_level import extract_text as pdf_extract_text

logger = logging.getLogger(__name__)

PLAIN_TEXT_EXTENSIONS = {".txt", ".md", ".text", ".rtf", ".csv"}
HTML_EXTENSIONS = {".html", ".htm"}

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str, max_chars: int = 200_000) -> str:
    """Схлопнуть пробелы и обрезать до max_chars символов."""
    return _WHITESPACE_RE.sub(" ", text or "").strip()[:max_chars]


def html_to_text(html: str) -> str:
    """Текст HTML-документа без разметки."""
    return BeautifulSoup(html or "", "html.parser").get_text(separator=" ")


def _extract_pdf(data: bytes) -> str:
    return pdf_extract_text(BytesIO(data)) or ""


def _extract_docx(data: bytes) -> str:
    document = DocxDocument(BytesIO(data))
    return "\n".join(p.text for p in document.paragraphs)


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="ignore")


def extract_text(filename: str, data: bytes) -> str:
    """
    Извлечь читаемый текст из содержимого файла.

    Аргументы:
        filename: Исходное имя файла (по нему выбирается экстрактор)
        data: Содержимое файла

    Возвращает:
        Текст (возможно пустой); исключения не пробрасываются
    """
    if not data:
        return ""

    extension = PurePath(filename or "").suffix.lower()
    try:
        if extension == ".pdf":
            return _extract_pdf(data)
        if extension == ".docx":
            return _extract_docx(data)
        if extension in HTML_EXTENSIONS:
            return html_to_text(_decode(data))
        # Простой текст и всё остальное: UTF-8 с пропуском битых байтов
        return _decode(data)
    except Exception as e:
        logger.warning(f"[Similarity] Text extraction failed for {filename}: {e}")
        return ""
