"""
Serveur Python persistant pour le moteur d'analyse de prix.

Le serveur instancie l'orchestrateur au démarrage puis attend les requêtes
sur stdin. Si une requête échoue, l'erreur est renvoyée au client et
loggée, mais le serveur ne s'arrête pas.

Communication :
- Entrée : JSON ligne par ligne sur stdin
- Sortie : JSON ligne par ligne sur stdout
- Logs : stderr
"""

import asyncio
import json
import logging
import os
import sys
from typing import Any, Dict, Optional, TextIO

from .config.settings import Settings
from .errors import ConfigError, PartialDataError
from .normalizers.history_normalizer import HistoryNormalizer
from .normalizers.market_normalizer import MarketNormalizer
from .normalizers.pricing_normalizer import PricingNormalizer
from .orchestrator import PricingAnalysisOrchestrator

logger = logging.getLogger(__name__)

ACTIONS = ("analyze", "recommend", "validate")


def _param(data: Dict[str, Any], *names: str, default: Any = None) -> Any:
    """Premier champ présent parmi `names` (snake_case ou camelCase)."""
    for name in names:
        if data.get(name) is not None:
            return data[name]
    return default


def _required(data: Dict[str, Any], *names: str) -> Any:
    value = _param(data, *names)
    if value is None or value == "":
        raise ValueError(f"{names[0]} is required")
    return value


class RequestHandler:
    """Traite les requêtes JSON du serveur."""

    def __init__(
        self,
        orchestrator: PricingAnalysisOrchestrator,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        self.orchestrator = orchestrator
        self.loop = loop or asyncio.new_event_loop()
        self.pricing_normalizer = PricingNormalizer()
        self.market_normalizer = MarketNormalizer()
        self.history_normalizer = HistoryNormalizer(
            timezone=orchestrator.settings.default_timezone
        )

    def process_request(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Traite une requête JSON unique.

        Format attendu :
        {
            "action": "analyze" | "recommend" | "validate",
            ... paramètres propres à l'action
        }

        Retourne :
        {
            "status": "success",
            "action": "...",
            "result": {...}
        }
        """
        if not isinstance(data, dict):
            raise ValueError("Request must be a JSON object")

        action = data.get("action")
        if action not in ACTIONS:
            raise ValueError(f"Unknown action: {action!r} (expected one of {', '.join(ACTIONS)})")

        result = getattr(self, f"_{action}")(data)
        return {"status": "success", "action": action, "result": result}

    def _analyze(self, data: Dict[str, Any]) -> Dict[str, Any]:
        merged = self.loop.run_until_complete(
            self.orchestrator.analyze(
                business_id=str(_required(data, "business_id", "businessId")),
                category=_required(data, "category"),
                location=_required(data, "location"),
                token=_param(data, "token"),
            )
        )
        return merged.to_dict()

    def _recommend(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Recommandation à partir de payloads déjà collectés par l'appelant.

        Champs : category, current_pricing, market_comparison,
        price_history (optionnel), business_id (optionnel).
        """
        category = _required(data, "category")
        business_id = str(_param(data, "business_id", "businessId", default=""))

        current = self.pricing_normalizer.normalize(
            _required(data, "current_pricing", "currentPricing"), business_id=business_id
        )
        market = self.market_normalizer.normalize(
            _required(data, "market_comparison", "marketComparison"),
            category=category,
            location=str(_param(data, "location", default="")),
            business_id=business_id or None,
        )

        context = market.business_context
        market_average = self.orchestrator.aggregator.aggregate(
            market.observations,
            context.base_price if context is not None else None,
        )

        trend = None
        raw_history = _param(data, "price_history", "priceHistory")
        if raw_history is not None:
            analyzer = self.orchestrator.trend_analyzer
            trend = analyzer.analyze(analyzer.window(self.history_normalizer.normalize(raw_history)))

        analysis = self.orchestrator.recommend(category, current, market_average, trend)
        return {
            "market_average": market_average.to_dict(),
            "price_trend": trend.to_dict() if trend is not None else None,
            "pricing_analysis": analysis.to_dict(),
        }

    def _validate(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.orchestrator.validate(_required(data, "config")).to_dict()

    def close(self) -> None:
        self.loop.close()


def error_response(error: Exception) -> Dict[str, Any]:
    response: Dict[str, Any] = {
        "error": str(error),
        "status": "error",
        "type": type(error).__name__,
    }
    if isinstance(error, ConfigError) and error.reason is not None:
        response["reason"] = error.reason.value
    if isinstance(error, PartialDataError):
        response["failures"] = error.failures
    return response


def serve(handler: RequestHandler, stdin: TextIO, stdout: TextIO) -> None:
    """Boucle de lecture : une requête par ligne, une réponse par ligne."""
    for line in stdin:
        line = line.strip()
        if not line:
            continue

        try:
            response_data = handler.process_request(json.loads(line))
        except Exception as e:
            # On renvoie un JSON d'erreur pour que le client puisse rejeter proprement
            response_data = error_response(e)
            logger.error(f"Request failed: {type(e).__name__}: {e}", exc_info=True)

        stdout.write(json.dumps(response_data) + "\n")
        stdout.flush()


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Market pricing server started (PID: {os.getpid()})")

    handler = RequestHandler(PricingAnalysisOrchestrator(settings=settings))
    try:
        serve(handler, sys.stdin, sys.stdout)
    except KeyboardInterrupt:
        pass
    finally:
        handler.close()
        logger.info("Market pricing server stopped")


if __name__ == "__main__":
    main()
