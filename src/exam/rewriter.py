"""
EduGen - Question Rewriter
Azure OpenAI ile soru metnini düzeltir veya alternatif sürümünü üretir.
"""
import logging
from typing import Any, Optional

from langchain_openai import AzureChatOpenAI
from langchain_core.messages import HumanMessage

from config.settings import get_settings
from src.utils.resilience import RetryConfig, retry_with_backoff
from .errors import RewriteServiceError
from .models import RewriteMode
from .normalizer import clean_value

logger = logging.getLogger(__name__)
settings = get_settings()


FIX_PROMPT = """Eres un corrector de estilo editorial para exámenes. Corrige únicamente errores de ortografía, puntuación y gramática de esta pregunta, manteniendo el sentido original.
Responde solo con la pregunta corregida, sin comillas ni explicaciones.

Pregunta: "{text}\""""

PARAPHRASE_PROMPT = """Reescribe esta pregunta de examen usando sinónimos y una estructura diferente para que sea una versión distinta pero con el mismo nivel de dificultad y significado.
Responde solo con la nueva pregunta, sin comillas ni explicaciones.

Pregunta: "{text}\""""

PROMPTS = {
    RewriteMode.FIX: FIX_PROMPT,
    RewriteMode.PARAPHRASE: PARAPHRASE_PROMPT,
}


class QuestionRewriter:
    """Yapay zeka destekli soru yeniden yazıcı."""

    def __init__(self, llm: Optional[Any] = None, retry_config: Optional[RetryConfig] = None):
        """
        Args:
            llm: ainvoke() destekleyen sohbet modeli (None ise Azure OpenAI)
            retry_config: Yeniden deneme ayarları
        """
        self._llm = llm
        self.retry_config = retry_config or RetryConfig.from_settings(label="rewrite")

    @property
    def llm(self) -> Any:
        if self._llm is None:
            self._llm = AzureChatOpenAI(
                azure_endpoint=settings.azure_openai_endpoint,
                api_key=settings.azure_openai_api_key,
                api_version=settings.azure_openai_api_version,
                deployment_name=settings.azure_openai_chat_deployment,
                temperature=settings.rewrite_temperature,
                max_tokens=settings.rewrite_max_tokens
            )
        return self._llm

    async def _invoke(self, prompt: str) -> str:
        response = await self.llm.ainvoke([HumanMessage(content=prompt)])
        return response.content if isinstance(response.content, str) else str(response.content)

    async def rewrite(self, text: str, mode: RewriteMode) -> str:
        """
        Soru metnini verilen moda göre yeniden yazar.

        Args:
            text: Mevcut soru metni
            mode: FIX (yazım/dilbilgisi) veya PARAPHRASE (eşdeğer yeni sürüm)

        Returns:
            Yeni metin

        Raises:
            RewriteServiceError: Servis hatası veya boş yanıt
        """
        prompt = PROMPTS[RewriteMode(mode)].format(text=text)

        try:
            result = await retry_with_backoff(self._invoke, self.retry_config, prompt)
        except Exception as e:
            logger.error(f"Yeniden yazma hatası ({mode}): {e}", exc_info=True)
            raise RewriteServiceError() from e

        rewritten = clean_value(result)
        if not rewritten:
            logger.warning(f"Yeniden yazma boş yanıt döndürdü ({mode})")
            raise RewriteServiceError()

        return rewritten
