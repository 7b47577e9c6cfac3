import logging
from io import BytesIO

import PyPDF2
import docx

from resume_analyzer.errors import ExtractionError

logger = logging.getLogger(__name__)

PDF_TYPE = "application/pdf"
DOC_TYPE = "application/msword"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SAMPLE_RESUME_TEXT = """
        John Doe
        Software Developer
        john.doe@email.com
        (555) 123-4567

        Experience:
        Senior Software Developer at Tech Corp (2020-2024)
        - Developed React applications using JavaScript and Node.js
        - Worked with AWS and Docker for deployment
        - Used Git for version control and collaborated with teams
        - Built RESTful APIs with Python and SQL databases

        Skills:
        JavaScript, React, Node.js, Python, SQL, AWS, Docker, Git

        Education:
        Bachelor of Computer Science
        University of Technology (2016-2020)
      """


class MockTextExtractor:
    """Ignores the upload and returns a fixed sample resume."""

    def extract(self, file_bytes: bytes, content_type: str) -> str:
        return SAMPLE_RESUME_TEXT


class DocumentTextExtractor:
    def extract(self, file_bytes: bytes, content_type: str) -> str:
        if content_type == PDF_TYPE:
            return self.extract_pdf(file_bytes)
        if content_type == DOCX_TYPE:
            return self.extract_docx(file_bytes)
        raise ExtractionError(f"Text extraction is not supported for {content_type}")

    @staticmethod
    def extract_pdf(pdf_bytes: bytes) -> str:
        try:
            pdf_reader = PyPDF2.PdfReader(BytesIO(pdf_bytes))

            text = ""
            for page in pdf_reader.pages:
                text += (page.extract_text() or "") + "\n"

            return text.strip()
        except Exception as e:
            raise ExtractionError(f"PDF extraction failed: {str(e)}")

    @staticmethod
    def extract_docx(docx_bytes: bytes) -> str:
        try:
            document = docx.Document(BytesIO(docx_bytes))
            return "\n".join(paragraph.text for paragraph in document.paragraphs).strip()
        except Exception as e:
            raise ExtractionError(f"DOCX extraction failed: {str(e)}")


EXTRACTORS = {
    "mock": MockTextExtractor,
    "document": DocumentTextExtractor,
}


def build_extractor(name: str):
    try:
        extractor_cls = EXTRACTORS[name]
    except KeyError:
        raise ValueError(f"Unknown text extractor '{name}', expected one of {sorted(EXTRACTORS)}")
    logger.info("Using %s text extractor", name)
    return extractor_cls()
