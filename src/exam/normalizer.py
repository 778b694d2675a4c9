"""
EduGen - Question Normalizer
Ham tablo satırlarını (dict kayıtları) kanonik Question nesnelerine dönüştürür.

Kurallar:
    - Sütun adları büyük/küçük harf ve boşluk duyarsız: pregunta, respuesta, tema
    - strict_headers=False ise isimsiz sütunlar için konum (1., 2., 3.) kullanılır
    - Boş "pregunta" satırları sessizce atlanır
    - Her kabul edilen satıra oturum boyunca benzersiz bir id verilir
"""
import itertools
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from config.settings import get_settings
from .errors import EmptyDocumentError, MissingColumnsError
from .models import Question

logger = logging.getLogger(__name__)
settings = get_settings()

BOM = "\ufeff"

REQUIRED_FIELDS = ("pregunta", "respuesta")
OPTIONAL_FIELDS = ("tema", "dificultad")

# Konum bazlı geri dönüşte kullanılan sütun sırası (dificultad hiçbir zaman konumla eşlenmez)
POSITIONAL_ORDER = ("pregunta", "respuesta", "tema")

_SURROUNDING_QUOTES = re.compile(r"^[\"']+|[\"']+$")

IdFactory = Callable[[], str]

_id_counter = itertools.count(1)


def next_question_id() -> str:
    """Process-wide monotonic question id."""
    return f"q-{next(_id_counter)}"


def clean_value(value: Any) -> str:
    """
    Tek bir hücre değerini temizler.

    Örnekler:
        '""Hola""'        → 'Hola'
        "\\ufeffpregunta" → 'pregunta'
        ' "Dijo ""sí"" ' → 'Dijo "sí'

    Args:
        value: Hücre değeri (str, sayı veya None)

    Returns:
        Temizlenmiş metin
    """
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)

    text = str(value)
    if text.startswith(BOM):
        text = text[1:]

    text = _SURROUNDING_QUOTES.sub("", text.strip())
    text = text.replace('""', '"')
    return text.strip()


def header_key(header: Any) -> str:
    """Canonical lookup form of a header name."""
    return clean_value(header).lower()


@dataclass
class IngestionDiagnostics:
    """Ingestion özeti (kullanıcıya ve loglara)"""
    detected_headers: List[str] = field(default_factory=list)
    column_mapping: Dict[str, str] = field(default_factory=dict)
    positional_fallback: bool = False
    total_rows: int = 0
    accepted_rows: int = 0
    dropped_empty_rows: int = 0
    separator: Optional[str] = None
    source_format: Optional[str] = None


@dataclass
class NormalizationResult:
    questions: List[Question]
    diagnostics: IngestionDiagnostics


def resolve_columns(
    headers: Sequence[str],
    strict_headers: bool = False
) -> Tuple[Dict[str, str], bool]:
    """
    Mantıksal alanları gerçek başlıklara eşler.

    Args:
        headers: Belgedeki başlıklar (sıralı)
        strict_headers: True ise konum bazlı geri dönüş yapılmaz

    Returns:
        (alan → başlık eşlemesi, konum geri dönüşü kullanıldı mı)

    Raises:
        MissingColumnsError: pregunta/respuesta çözümlenemezse
    """
    mapping: Dict[str, str] = {}
    for header in headers:
        key = header_key(header)
        if key in REQUIRED_FIELDS + OPTIONAL_FIELDS and key not in mapping:
            mapping[key] = header

    missing = [f for f in REQUIRED_FIELDS if f not in mapping]
    if not missing:
        return mapping, False

    if strict_headers or len(headers) < len(REQUIRED_FIELDS):
        raise MissingColumnsError(list(headers), missing)

    claimed = set(mapping.values())
    for position, name in enumerate(POSITIONAL_ORDER):
        if name in mapping:
            continue
        if name not in REQUIRED_FIELDS:
            # tema sadece kendi konumu boştaysa alınır
            if position < len(headers) and headers[position] not in claimed:
                mapping[name] = headers[position]
                claimed.add(headers[position])
            continue

        candidate = None
        if position < len(headers) and headers[position] not in claimed:
            candidate = headers[position]
        else:
            candidate = next((h for h in headers if h not in claimed), None)

        if candidate is None:
            raise MissingColumnsError(list(headers), missing)
        mapping[name] = candidate
        claimed.add(candidate)

    logger.warning(
        f"Başlıklar eksik ({', '.join(missing)}), konum bazlı sütunlar kullanılıyor: {mapping}"
    )
    return mapping, True


def _optional(value: Any) -> Optional[str]:
    cleaned = clean_value(value)
    return cleaned or None


def normalize(
    raw_rows: Sequence[Mapping[str, Any]],
    strict_headers: Optional[bool] = None,
    id_factory: Optional[IdFactory] = None
) -> NormalizationResult:
    """
    Ham satırları Question listesine dönüştürür.

    Başlık sırası ilk kaydın anahtar sırasından alınır.

    Args:
        raw_rows: Başlık → değer kayıtları
        strict_headers: None ise ayarlardaki bank_strict_headers kullanılır
        id_factory: Özel id üretici (testler için)

    Returns:
        NormalizationResult (sorular + tanılama)

    Raises:
        EmptyDocumentError: Hiç satır yoksa
        MissingColumnsError: Zorunlu sütunlar çözümlenemezse
    """
    if not raw_rows:
        raise EmptyDocumentError()

    if strict_headers is None:
        strict_headers = settings.bank_strict_headers
    make_id = id_factory or next_question_id

    headers = list(raw_rows[0].keys())
    mapping, used_fallback = resolve_columns(headers, strict_headers)

    questions: List[Question] = []
    dropped = 0
    for row in raw_rows:
        pregunta = clean_value(row.get(mapping["pregunta"]))
        if not pregunta:
            dropped += 1
            continue

        questions.append(Question(
            id=make_id(),
            pregunta=pregunta,
            respuesta=clean_value(row.get(mapping["respuesta"])),
            tema=_optional(row.get(mapping["tema"])) if "tema" in mapping else None,
            dificultad=_optional(row.get(mapping["dificultad"])) if "dificultad" in mapping else None
        ))

    diagnostics = IngestionDiagnostics(
        detected_headers=[clean_value(h) for h in headers],
        column_mapping=dict(mapping),
        positional_fallback=used_fallback,
        total_rows=len(raw_rows),
        accepted_rows=len(questions),
        dropped_empty_rows=dropped
    )

    logger.info(
        f"Normalizasyon tamamlandı: {len(questions)} soru kabul edildi, {dropped} boş satır atlandı"
    )
    return NormalizationResult(questions=questions, diagnostics=diagnostics)
