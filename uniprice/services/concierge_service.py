# ==============================================================================
# CONCIERGE - Bundle sugerido por IA
# ==============================================================================
# Texto libre del comprador → Gemini elige ids del catálogo → los slots del
# bundle se reemplazan por esos productos.
# ==============================================================================

from typing import Any, Dict

from uniprice.services.ai_service import GeminiService
from uniprice.services.bundle_service import BundleService
from uniprice.services.catalog_service import CatalogService

FAILURE_MESSAGE = "I couldn't whip up a bundle right now. Mind trying another prompt?"


class ConciergeService:
    def __init__(
        self,
        ai_service: GeminiService,
        catalog_service: CatalogService,
        bundle_service: BundleService
    ):
        self.ai_service = ai_service
        self.catalog_service = catalog_service
        self.bundle_service = bundle_service

    def suggest(self, intent: Any) -> Dict[str, Any]:
        """
        Arma el bundle a partir de la intención del usuario.

        Intención vacía o catálogo vacío: no-op (applied=False).
        """
        intent = str(intent or '').strip()
        products = self.catalog_service.get_products()
        if not intent or not products:
            return {
                'ok': True,
                'applied': False,
                'bundle': self.bundle_service.get_bundle().to_dict(),
            }

        bundle = self.bundle_service.get_bundle()
        suggestion = self.ai_service.suggest_bundle(
            intent, products, bundle.max_items, bundle.bundle_price
        )
        if not suggestion:
            return {'ok': False, 'error': FAILURE_MESSAGE}

        result = self.bundle_service.apply_suggestion(suggestion['recommendedIds'])
        return {
            'ok': True,
            'applied': True,
            'explanation': suggestion['explanation'],
            'bundle': result['bundle'],
        }
