import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import Settings
from app.core.errors import ConfigurationError, InvalidUpstreamResponse, UpstreamError

logger = logging.getLogger(__name__)


class GeminiClient:
    """Cliente mínimo para `models/{model}:generateContent` de Gemini.

    Un `httpx.AsyncClient` por llamada; `transport` permite sustituir la red
    en pruebas (por ejemplo con `httpx.MockTransport`).
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    @property
    def endpoint(self) -> str:
        base = self.settings.gemini_base_url.rstrip("/")
        return f"{base}/models/{self.settings.gemini_model}:generateContent"

    def build_payload(self, prompt: str, image_b64: str, mime_type: str) -> Dict[str, Any]:
        return {
            "contents": [{
                "parts": [
                    {"text": prompt},
                    {
                        "inline_data": {
                            "mime_type": mime_type,
                            "data": image_b64,
                        }
                    },
                ]
            }],
            "generationConfig": {
                "temperature": self.settings.gemini_temperature,
                "topK": self.settings.gemini_top_k,
                "topP": self.settings.gemini_top_p,
                "maxOutputTokens": self.settings.gemini_max_output_tokens,
            },
        }

    def _build_async_client(self) -> httpx.AsyncClient:
        if not self.settings.api_key_configured:
            raise ConfigurationError()
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.http_timeout_seconds),
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self.settings.gemini_api_key.get_secret_value(),
            },
            transport=self._transport,
        )

    async def generate_content(self, prompt: str, image_b64: str, mime_type: str) -> Dict[str, Any]:
        """Envía prompt + imagen y devuelve el JSON crudo de la respuesta.

        Raises:
            ConfigurationError: si no hay API key.
            UpstreamError: estado no exitoso o fallo de transporte.
            InvalidUpstreamResponse: el cuerpo no es JSON.
        """
        payload = self.build_payload(prompt, image_b64, mime_type)

        async with self._build_async_client() as client:
            try:
                response = await client.post(self.endpoint, json=payload)
            except httpx.TimeoutException as e:
                logger.error(f"Timeout llamando a Gemini: {e}")
                raise UpstreamError(message=f"Gemini request timed out: {e}") from e
            except httpx.RequestError as e:
                logger.error(f"Error de red llamando a Gemini: {e}")
                raise UpstreamError(message=f"Could not reach Gemini API: {e.__class__.__name__}") from e

        if response.is_error:
            details = _error_body(response)
            err = details.get("error") if isinstance(details, dict) else None
            message = err.get("message") if isinstance(err, dict) and err.get("message") else "Error desconocido"
            logger.error(f"Error de Gemini API ({response.status_code}): {details}")
            raise UpstreamError(message=message, status=response.status_code, details=details)

        try:
            return response.json()
        except ValueError as e:
            raise InvalidUpstreamResponse(raw_data=response.text) from e


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"raw": response.text}


def extract_text(data: Any) -> str:
    """Texto del primer candidato (todas sus partes de texto concatenadas).

    Raises:
        InvalidUpstreamResponse: sin candidatos o sin contenido textual.
    """
    candidates = data.get("candidates") if isinstance(data, dict) else None
    if not candidates or not isinstance(candidates, list) or not isinstance(candidates[0], dict):
        raise InvalidUpstreamResponse(raw_data=data)

    content = candidates[0].get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        raise InvalidUpstreamResponse(raw_data=data)

    text = "".join(p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str))
    if not text.strip():
        raise InvalidUpstreamResponse(raw_data=data)
    return text
