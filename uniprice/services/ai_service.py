# ==============================================================================
# SERVICIO GENERATIVO (Gemini REST)
# ==============================================================================
# Dos llamadas de caja negra, sin reintentos:
#   suggest_bundle() → ids recomendados + explicación para el concierge
#   analyze_image()  → {name, description, category} para el formulario admin
#
# Cualquier falla (red, HTTP, JSON no parseable, categoría inválida)
# se registra y se degrada a None: nunca propaga al llamador.
# ==============================================================================

import base64
import json
from typing import Any, Dict, List, Optional

import requests

from uniprice.errors import AIServiceError
from uniprice.models.entities import Category, Product
from uniprice.utils.logger import get_logger

logger = get_logger("ai")

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

BUNDLE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "recommendedIds": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "List of item IDs from the inventory.",
        },
        "explanation": {
            "type": "STRING",
            "description": "A short, fun explanation of why this bundle was picked.",
        },
    },
    "required": ["recommendedIds", "explanation"],
}

VISION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING"},
        "description": {"type": "STRING"},
        "category": {"type": "STRING", "enum": [c.value for c in Category]},
    },
    "required": ["name", "description", "category"],
}


class GeminiService:
    """
    Cliente mínimo de generateContent.

    Args:
        api_key: GEMINI_API_KEY; sin clave el servicio queda deshabilitado
        model: Nombre del modelo
        http: Sesión de requests (inyectable en tests)
        timeout: Segundos por request
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        http: Optional[requests.Session] = None,
        timeout: int = 30
    ):
        self.api_key = api_key
        self.model = model
        self.http = http or requests.Session()
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    # =========================================================================
    # API PÚBLICA
    # =========================================================================

    def suggest_bundle(
        self,
        intent: str,
        products: List[Product],
        max_items: int,
        bundle_price: int
    ) -> Optional[Dict[str, Any]]:
        """
        Pide a Gemini un bundle para la intención del usuario.

        Returns:
            {'recommendedIds': [...], 'explanation': str} o None
        """
        inventory = [{"id": p.id, "name": p.name} for p in products]
        prompt = (
            f'Based on the user\'s request: "{intent}", pick exactly {max_items} items '
            f'from this inventory: {json.dumps(inventory)}. The items will be bundled for '
            f'a total of Rs. {bundle_price}. Return the IDs of the recommended items.'
        )
        try:
            data = self._generate([{"text": prompt}], BUNDLE_SCHEMA)
            ids = data.get("recommendedIds")
            if not isinstance(ids, list):
                raise AIServiceError("recommendedIds ausente")
            return {
                "recommendedIds": [str(i) for i in ids],
                "explanation": str(data.get("explanation") or ""),
            }
        except AIServiceError as exc:
            logger.warning(f"[AI] Sugerencia de bundle fallida: {exc}")
            return None

    def analyze_image(self, image: bytes, mime_type: str = "image/jpeg") -> Optional[Dict[str, str]]:
        """
        Sugiere nombre, descripción y categoría a partir de una imagen.

        Returns:
            {'name', 'description', 'category'} o None (categoría fuera del
            enum descarta la sugerencia)
        """
        prompt = (
            "Identify the retail product in this image. Suggest a short product name, "
            "a one-sentence description and one category from: "
            + ", ".join(c.value for c in Category) + "."
        )
        parts = [
            {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(image).decode("ascii")}},
            {"text": prompt},
        ]
        try:
            data = self._generate(parts, VISION_SCHEMA)
            category = Category.parse(data.get("category"))
            if category is None:
                raise AIServiceError(f"Categoría inválida: {data.get('category')!r}")
            name = str(data.get("name") or "").strip()
            if not name:
                raise AIServiceError("Nombre vacío")
            return {
                "name": name,
                "description": str(data.get("description") or "").strip(),
                "category": category.value,
            }
        except AIServiceError as exc:
            logger.warning(f"[AI] Análisis de imagen fallido: {exc}")
            return None

    # =========================================================================
    # HTTP
    # =========================================================================

    def _generate(self, parts: List[Dict[str, Any]], schema: Dict[str, Any]) -> Dict[str, Any]:
        """
        Ejecuta generateContent con salida JSON.

        Raises:
            AIServiceError: Si la llamada o el parseo fallan
        """
        if not self.enabled:
            raise AIServiceError("GEMINI_API_KEY no configurada")

        payload = {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        }
        try:
            resp = self.http.post(
                GEMINI_ENDPOINT.format(model=self.model),
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise AIServiceError(f"Llamada a Gemini fallida: {exc}") from exc

        try:
            text = body["candidates"][0]["content"]["parts"][0]["text"]
            data = json.loads(text)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise AIServiceError(f"Respuesta de Gemini no parseable: {exc}") from exc

        if not isinstance(data, dict):
            raise AIServiceError("Respuesta de Gemini no es un objeto")
        return data
