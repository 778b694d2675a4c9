"""
EduGen - Exam PDF Generator
ReportLab ile sınav + cevap anahtarı PDF'i oluşturur.

İki geçiş:
    1. layout(): Satır sarma, sayfa bölme ve alt bilgi toplamları (saf Python)
    2. render(): Hazır yerleşimi canvas üzerine çizer

Tüm ölçüler milimetre ve sayfanın üst kenarından ölçülür.
"""
import io
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import date as date_type
from pathlib import Path
from typing import List, Optional, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from config.settings import get_settings
from .models import ExamConfig, GeneratedExam

logger = logging.getLogger(__name__)
settings = get_settings()

# İspanyolca karakter desteği için font (yoksa Helvetica)
FONT_PATHS = {
    "EduGen": [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "C:/Windows/Fonts/arial.ttf",
    ],
    "EduGenBold": [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "C:/Windows/Fonts/arialbd.ttf",
    ],
    "EduGenItalic": [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf",
        "C:/Windows/Fonts/ariali.ttf",
    ],
}

FALLBACK_FONTS = {
    "EduGen": "Helvetica",
    "EduGenBold": "Helvetica-Bold",
    "EduGenItalic": "Helvetica-Oblique",
}

QUESTIONS_SECTION = "questions"
ANSWER_KEY_SECTION = "answer_key"

EXAM_TITLE = "EVALUACIÓN ESCRITA"
ANSWER_KEY_TITLE = "CLAVE DE RESPUESTAS (SOLO DOCENTE)"
STUDENT_LINE = "Estudiante: " + "_" * 68

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\:*?"<>|\s]+')


@dataclass(frozen=True)
class FontSet:
    regular: str
    bold: str
    italic: str


def register_fonts() -> FontSet:
    """Unicode fontları kaydet; bulunamayanlar için Helvetica ailesi."""
    registered = set(pdfmetrics.getRegisteredFontNames())
    resolved = {}

    for name, paths in FONT_PATHS.items():
        if name not in registered:
            for font_path in paths:
                if not os.path.exists(font_path):
                    continue
                try:
                    pdfmetrics.registerFont(TTFont(name, font_path))
                    registered.add(name)
                    break
                except Exception as e:
                    logger.warning(f"Font kaydedilemedi: {font_path}, hata: {e}")
        resolved[name] = name if name in registered else FALLBACK_FONTS[name]

    return FontSet(
        regular=resolved["EduGen"],
        bold=resolved["EduGenBold"],
        italic=resolved["EduGenItalic"]
    )


def format_exam_date(value: date_type) -> str:
    """es-ES kısa tarih: 5/3/2026"""
    return f"{value.day}/{value.month}/{value.year}"


def build_filename(config: ExamConfig, exam_date: str) -> str:
    """Examen_<asignatura>_<curso>_<fecha>.pdf, dosya sistemi için güvenli."""
    raw = f"Examen_{config.asignatura}_{config.curso}_{exam_date}"
    safe = _UNSAFE_FILENAME_CHARS.sub("_", raw.replace("/", "-")).strip("_")
    return f"{safe}.pdf"


@dataclass(frozen=True)
class SectionMetrics:
    """Bir bölümün sayfa bölme ölçüleri (mm)"""
    font_size: float
    text_x: float
    text_width: float
    line_height: float
    item_gap: float
    first_y: float
    top_y: float
    bottom_limit: float

    def capacity(self, y: float) -> int:
        """`y` konumundan itibaren sığan satır sayısı (en az 1)."""
        return max(1, int((self.bottom_limit - y - self.item_gap) // self.line_height))


QUESTION_METRICS = SectionMetrics(
    font_size=10, text_x=15, text_width=180, line_height=5, item_gap=6,
    first_y=62, top_y=15, bottom_limit=285
)

ANSWER_METRICS = SectionMetrics(
    font_size=9, text_x=22, text_width=175, line_height=4, item_gap=4,
    first_y=25, top_y=20, bottom_limit=280
)

ANSWER_PREFIX_X = 15
FOOTER_Y = 292


@dataclass
class PlacedItem:
    """Sayfaya yerleştirilmiş bir soru ya da cevap parçası"""
    number: int
    lines: List[str]
    y: float
    continued: bool = False

    def height(self, metrics: SectionMetrics) -> float:
        return len(self.lines) * metrics.line_height + metrics.item_gap


@dataclass
class PageLayout:
    section: str
    items: List[PlacedItem] = field(default_factory=list)
    has_header: bool = False
    footer: Optional[str] = None


@dataclass
class DocumentLayout:
    pages: List[PageLayout]
    question_page_count: int
    filename: str

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def answer_key_start(self) -> int:
        """Cevap anahtarının başladığı sayfa indeksi (0 tabanlı)"""
        return self.question_page_count


def paginate(
    blocks: Sequence[List[str]],
    metrics: SectionMetrics,
    section: str
) -> List[PageLayout]:
    """
    Açgözlü, geri dönüşsüz sayfa doldurma.

    Bir öğe mevcut sayfaya sığmıyorsa ve sayfada başka öğe varsa önce sayfa
    kırılır. Tek başına bir sayfadan uzun öğeler satır satır sonraki
    sayfalara taşar; her döngü en az bir satır yerleştirir.

    Args:
        blocks: Her öğenin sarılmış satırları (numara sırasıyla)
        metrics: Bölüm ölçüleri
        section: Bölüm adı

    Returns:
        En az bir sayfa
    """
    pages = [PageLayout(section=section)]
    y = metrics.first_y

    for number, lines in enumerate(blocks, 1):
        height = len(lines) * metrics.line_height + metrics.item_gap
        if y + height > metrics.bottom_limit and pages[-1].items:
            pages.append(PageLayout(section=section))
            y = metrics.top_y

        remaining = list(lines)
        continued = False
        while True:
            capacity = metrics.capacity(y)
            chunk, remaining = remaining[:capacity], remaining[capacity:]
            item = PlacedItem(number=number, lines=chunk, y=y, continued=continued)
            pages[-1].items.append(item)
            y += item.height(metrics)

            if not remaining:
                break

            logger.debug(f"Öğe {number} sayfaya sığmadı, sonraki sayfaya taşınıyor")
            pages.append(PageLayout(section=section))
            y = metrics.top_y
            continued = True

    return pages


class ExamPDFGenerator:
    """Sınav PDF'i oluşturucu."""

    PAGE_WIDTH, PAGE_HEIGHT = A4

    def __init__(self, output_dir: Optional[str] = None):
        """
        Args:
            output_dir: generate() için PDF çıktı dizini
        """
        self.output_dir = Path(output_dir or settings.exam_output_dir)
        self.fonts = register_fonts()

    # ================== LAYOUT ==================

    def _wrap(self, text: str, font: str, metrics: SectionMetrics) -> List[str]:
        lines = simpleSplit(text, font, metrics.font_size, metrics.text_width * mm)
        return lines or [""]

    def _question_lines(self, exam: GeneratedExam) -> List[List[str]]:
        # Numara metnin parçası olarak sarılır
        return [
            self._wrap(f"{i}. {q.pregunta}", self.fonts.bold, QUESTION_METRICS)
            for i, q in enumerate(exam.questions, 1)
        ]

    def _answer_lines(self, exam: GeneratedExam) -> List[List[str]]:
        return [
            self._wrap(q.respuesta, self.fonts.regular, ANSWER_METRICS)
            for q in exam.questions
        ]

    def layout(self, exam: GeneratedExam) -> DocumentLayout:
        """
        Sayfa yerleşimini hesaplar.

        Toplam sayfa sayısı ancak tüm sorular yerleştikten sonra bilinir;
        "Pág. i / n" alt bilgileri bu yüzden en sonda yazılır.
        """
        question_pages = paginate(self._question_lines(exam), QUESTION_METRICS, QUESTIONS_SECTION)
        question_pages[0].has_header = True

        total = len(question_pages)
        for index, page in enumerate(question_pages, 1):
            page.footer = f"Pág. {index} / {total}"

        answer_pages = paginate(self._answer_lines(exam), ANSWER_METRICS, ANSWER_KEY_SECTION)
        answer_pages[0].has_header = True

        return DocumentLayout(
            pages=question_pages + answer_pages,
            question_page_count=total,
            filename=build_filename(exam.config, exam.date)
        )

    # ================== DRAWING ==================

    def _y(self, y_mm: float) -> float:
        """Üst kenardan mm → ReportLab koordinatı (alt kenardan punto)."""
        return self.PAGE_HEIGHT - y_mm * mm

    def _draw_exam_header(self, pdf: canvas.Canvas, exam: GeneratedExam):
        config = exam.config
        topic = config.tema or (exam.questions[0].tema if exam.questions else None) or settings.exam_default_topic
        institution = (config.nombre_institucion or settings.exam_default_institution).upper()

        pdf.setStrokeColorRGB(0, 0, 0)
        pdf.setLineWidth(0.3)
        pdf.rect(10 * mm, self._y(38), 190 * mm, 30 * mm)

        pdf.setFont(self.fonts.bold, 14)
        pdf.drawCentredString(105 * mm, self._y(15), institution)

        pdf.setFont(self.fonts.regular, 10)
        pdf.drawString(15 * mm, self._y(23), f"Docente: {config.nombre_profesor}")
        pdf.drawString(140 * mm, self._y(23), f"Fecha: {exam.date}")

        pdf.setFont(self.fonts.bold, 10)
        pdf.drawString(15 * mm, self._y(29), f"Asignatura: {config.asignatura}")
        pdf.drawString(140 * mm, self._y(29), f"Curso: {config.curso}")

        pdf.setFont(self.fonts.italic, 10)
        pdf.drawString(15 * mm, self._y(35), f"Tema: {topic}")

        pdf.setFont(self.fonts.regular, 10)
        pdf.drawString(15 * mm, self._y(45), STUDENT_LINE)

        pdf.setFont(self.fonts.bold, 11)
        pdf.drawCentredString(105 * mm, self._y(55), EXAM_TITLE)

    def _draw_lines(self, pdf: canvas.Canvas, item: PlacedItem, x: float, metrics: SectionMetrics):
        for offset, line in enumerate(item.lines):
            pdf.drawString(x * mm, self._y(item.y + offset * metrics.line_height), line)

    def _draw_page(self, pdf: canvas.Canvas, page: PageLayout, exam: GeneratedExam):
        if page.section == QUESTIONS_SECTION:
            if page.has_header:
                self._draw_exam_header(pdf, exam)
            pdf.setFont(self.fonts.bold, QUESTION_METRICS.font_size)
            for item in page.items:
                self._draw_lines(pdf, item, QUESTION_METRICS.text_x, QUESTION_METRICS)
        else:
            if page.has_header:
                pdf.setFont(self.fonts.bold, 12)
                pdf.drawCentredString(105 * mm, self._y(15), ANSWER_KEY_TITLE)
            for item in page.items:
                if not item.continued:
                    pdf.setFont(self.fonts.bold, ANSWER_METRICS.font_size)
                    pdf.drawString(ANSWER_PREFIX_X * mm, self._y(item.y), f"{item.number}. ")
                pdf.setFont(self.fonts.regular, ANSWER_METRICS.font_size)
                self._draw_lines(pdf, item, ANSWER_METRICS.text_x, ANSWER_METRICS)

        if page.footer:
            pdf.setFont(self.fonts.regular, 8)
            pdf.drawCentredString(105 * mm, self._y(FOOTER_Y), page.footer)

    def render(self, exam: GeneratedExam) -> "RenderedExam":
        """
        Sınavı PDF baytlarına dönüştürür.

        Aynı girdi için aynı baytlar üretilir (invariant canvas).

        Args:
            exam: Sınav paketi

        Returns:
            RenderedExam (dosya adı, içerik, yerleşim)
        """
        document_layout = self.layout(exam)

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4, invariant=1)
        pdf.setTitle(f"Examen {exam.config.asignatura} {exam.config.curso}".strip())
        pdf.setAuthor(exam.config.nombre_profesor or "EduGen")
        pdf.setSubject(exam.config.tema or settings.exam_default_topic)

        for page in document_layout.pages:
            self._draw_page(pdf, page, exam)
            pdf.showPage()
        pdf.save()

        logger.info(
            f"PDF oluşturuldu: {document_layout.filename} "
            f"({len(exam.questions)} soru, {document_layout.page_count} sayfa)"
        )
        return RenderedExam(
            filename=document_layout.filename,
            content=buffer.getvalue(),
            layout=document_layout,
            question_count=len(exam.questions)
        )

    def generate(self, exam: GeneratedExam, output_dir: Optional[str] = None) -> str:
        """
        PDF'i diske yazar.

        Returns:
            Oluşturulan PDF dosya yolu
        """
        rendered = self.render(exam)
        target_dir = Path(output_dir) if output_dir else self.output_dir
        target_dir.mkdir(parents=True, exist_ok=True)

        output_path = target_dir / rendered.filename
        output_path.write_bytes(rendered.content)
        return str(output_path)


@dataclass(frozen=True)
class RenderedExam:
    filename: str
    content: bytes
    layout: DocumentLayout
    question_count: int = 0

    @property
    def page_count(self) -> int:
        return self.layout.page_count
