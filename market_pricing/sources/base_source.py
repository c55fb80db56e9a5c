"""
Classe abstraite de base pour les sources de données pricing.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

import aiohttp

from ..config.settings import Settings
from ..errors import AuthRequiredError, SourceError

logger = logging.getLogger(__name__)

AUTH_STATUSES = (401, 403)


class BaseSource(ABC):
    """
    Classe abstraite pour les sources de données de l'analyse de prix.

    Cette classe définit l'interface commune et gère :
    - la session HTTP (aiohttp),
    - les retries avec exponential backoff,
    - les erreurs d'authentification (jamais réessayées),
    - la normalisation du payload.

    Aucune source ne modifie d'état : une requête abandonnée peut être
    annulée sans effet de bord.
    """

    def __init__(
        self,
        source_name: str,
        settings: Optional[Settings] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialise la source.

        Args:
            source_name: Nom de la source (ex: 'price_history')
            settings: Configuration globale
            session: Session aiohttp partagée, jamais fermée par la source
                (sinon chaque appel à fetch ouvre et ferme sa propre session)
        """
        self.source_name = source_name
        self.settings = settings or Settings.from_env()
        self.base_url = self.settings.api_base_url.rstrip("/")
        self.session = session
        self._owns_session = False

        logger.info(f"Initialized pricing source: {source_name}")

    async def __aenter__(self):
        """Context manager entry."""
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        await self._close_session()

    async def fetch(self, **kwargs) -> Any:
        """
        Récupère et normalise les données de la source.

        Sans session partagée, l'appel utilise sa propre session : des
        appels concurrents sur la même source ne partagent aucun état.

        Args:
            **kwargs: Paramètres propres à la source (business_id, category, ...)

        Returns:
            Données normalisées

        Raises:
            AuthRequiredError: Authentification absente ou refusée
            SourceError: Échec HTTP / réseau après retries, ou payload invalide
        """
        if self.session is not None:
            return await self._fetch_with_session(self.session, **kwargs)

        async with aiohttp.ClientSession() as session:
            return await self._fetch_with_session(session, **kwargs)

    async def _fetch_with_session(self, session: aiohttp.ClientSession, **kwargs) -> Any:
        raw_data = await self._retry_with_backoff(self._fetch_data, session=session, **kwargs)

        try:
            normalized = self._normalize(raw_data, **kwargs)
        except (TypeError, ValueError) as e:
            raise SourceError(
                f"Invalid payload from {self.source_name}: {e}",
                source_name=self.source_name,
            ) from e

        logger.info(f"Successfully fetched data from {self.source_name}")
        return normalized

    @abstractmethod
    async def _fetch_data(self, session: aiohttp.ClientSession, **kwargs) -> Any:
        """
        Récupère les données brutes depuis l'API.

        Args:
            session: Session aiohttp de l'appel en cours

        Returns:
            Réponse JSON brute
        """
        pass

    @abstractmethod
    def _normalize(self, raw_response: Any, **kwargs) -> Any:
        """
        Normalise les données brutes vers les objets du moteur.

        Args:
            raw_response: Réponse brute de l'API

        Returns:
            Données normalisées
        """
        pass

    async def _retry_with_backoff(
        self,
        func: Callable,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> Any:
        """
        Réessaye une fonction avec exponential backoff.

        Gère les erreurs HTTP :
        - 401 / 403 (Auth) : AuthRequiredError immédiate, pas de retry
        - 429 (Rate Limit) : attend plus longtemps
        - 5xx (Server Error) : retry avec backoff
        - autres 4xx (Client Error) : pas de retry

        Args:
            func: Fonction à exécuter (doit être async)
            max_retries: Nombre maximum de tentatives (None = utiliser settings)
            **kwargs: Arguments à passer à la fonction

        Returns:
            Résultat de la fonction

        Raises:
            AuthRequiredError, SourceError
        """
        if max_retries is None:
            max_retries = self.settings.max_retries
        max_retries = max(1, max_retries)

        backoff_factor = self.settings.retry_backoff_factor

        for attempt in range(max_retries):
            try:
                return await func(**kwargs)
            except AuthRequiredError:
                logger.error(f"Authentication required for {self.source_name}. Not retrying.")
                raise
            except aiohttp.ClientResponseError as e:
                if e.status in AUTH_STATUSES:
                    logger.error(f"Authentication rejected by {self.source_name} ({e.status}). Not retrying.")
                    raise AuthRequiredError(
                        f"Authentication rejected by {self.source_name}: {e.status}"
                    ) from e

                # Ne pas retry sur erreurs 4xx (sauf 429)
                if 400 <= e.status < 500 and e.status != 429:
                    logger.error(
                        f"Client error {e.status} for {self.source_name}: {e.message}. "
                        "Not retrying."
                    )
                    raise SourceError(
                        f"Client error {e.status} from {self.source_name}: {e.message}",
                        source_name=self.source_name,
                        status=e.status,
                    ) from e

                if attempt == max_retries - 1:
                    raise SourceError(
                        f"HTTP {e.status} from {self.source_name} after {max_retries} attempts",
                        source_name=self.source_name,
                        status=e.status,
                    ) from e

                # Backoff plus long pour rate limits
                if e.status == 429:
                    wait_time = backoff_factor ** attempt * 2
                    logger.warning(
                        f"Rate limit hit for {self.source_name} (attempt {attempt + 1}/{max_retries}), "
                        f"waiting {wait_time}s..."
                    )
                else:
                    wait_time = backoff_factor ** attempt
                    logger.warning(
                        f"Server error {e.status} for {self.source_name} (attempt {attempt + 1}/{max_retries}), "
                        f"retrying in {wait_time}s: {e.message}"
                    )

                await asyncio.sleep(wait_time)

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                # Retry sur erreurs réseau/timeout
                if attempt == max_retries - 1:
                    raise SourceError(
                        f"Network error for {self.source_name} after {max_retries} attempts: {e!r}",
                        source_name=self.source_name,
                    ) from e

                wait_time = backoff_factor ** attempt
                logger.warning(
                    f"Network error for {self.source_name} (attempt {attempt + 1}/{max_retries}), "
                    f"retrying in {wait_time}s: {e!r}"
                )
                await asyncio.sleep(wait_time)

    async def _make_request(
        self,
        session: aiohttp.ClientSession,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Effectue une requête HTTP vers l'API pricing.

        Args:
            session: Session aiohttp de l'appel en cours
            method: Méthode HTTP ('GET', 'POST', etc.)
            path: Chemin relatif à api_base_url
            headers: Headers HTTP
            params: Query parameters (les valeurs None sont omises)

        Returns:
            Réponse JSON parsée

        Raises:
            aiohttp.ClientResponseError: Pour erreurs HTTP
            aiohttp.ClientError: Pour erreurs réseau
            SourceError: Si la réponse n'est pas du JSON
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        timeout_obj = aiohttp.ClientTimeout(total=self.settings.source_timeout)

        try:
            async with session.request(
                method=method,
                url=url,
                headers=headers or {},
                params=query,
                timeout=timeout_obj
            ) as response:
                response.raise_for_status()

                try:
                    return await response.json()
                except aiohttp.ContentTypeError as e:
                    text = await response.text()
                    logger.warning(f"Non-JSON response from {url}: {text[:200]}")
                    raise SourceError(
                        f"Non-JSON response from {self.source_name}",
                        source_name=self.source_name,
                        status=response.status,
                    ) from e

        except aiohttp.ClientResponseError as e:
            logger.error(f"HTTP {e.status} error for {url}: {e.message}")
            raise
        except asyncio.TimeoutError:
            logger.error(f"Timeout for {url}")
            raise

    async def _close_session(self) -> None:
        if self.session is not None and self._owns_session:
            await self.session.close()
            self.session = None
            self._owns_session = False
