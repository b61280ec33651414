"""Microsoft Graph authentication using Device Code Flow."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional

from azure.identity import (
    AuthenticationRecord,
    AzureAuthorityHosts,
    DeviceCodeCredential,
    TokenCachePersistenceOptions,
)
from msgraph import GraphServiceClient

from src.auth.record_cache import AuthRecordCache
from src.config.settings import Settings

logger = logging.getLogger(__name__)

PromptCallback = Callable[[str, str, datetime], None]

DEFAULT_SCOPES = ["User.Read", "Mail.Read"]


class AuthenticationError(Exception):
    """Raised when authentication fails."""

    pass


class GraphAuthenticator:
    """Handles OAuth2 authentication with Microsoft Graph using Device Code Flow.

    A cached AuthenticationRecord lets the credential renew silently from
    azure-identity's persistent token cache. Without one, the user is shown a
    verification URL and code, and the record returned by a successful
    sign-in is written to the record cache for the next run.

    Attributes:
        client_id: Azure AD application (client) ID
        tenant_id: Azure AD tenant ID
        scopes: List of Microsoft Graph API permission scopes
        record_cache: Where the authentication record is persisted
    """

    def __init__(
        self,
        client_id: str,
        tenant_id: str,
        scopes: Optional[list[str]] = None,
        record_cache: Optional[AuthRecordCache] = None,
        prompt_callback: Optional[PromptCallback] = None,
        cache_name: str = "email-reader-cache",
        authority: str = AzureAuthorityHosts.AZURE_PUBLIC_CLOUD,
    ):
        """Initialize the GraphAuthenticator.

        Args:
            client_id: Azure AD application (client) ID
            tenant_id: Azure AD tenant ID
            scopes: List of Microsoft Graph API scopes
            record_cache: Optional authentication record cache
            prompt_callback: Called with (verification_uri, user_code, expires_on)
                before waiting for the user to sign in
            cache_name: Name of the persistent MSAL token cache
            authority: Azure AD authority host
        """
        self.client_id = client_id
        self.tenant_id = tenant_id
        self.scopes = scopes or list(DEFAULT_SCOPES)
        self.record_cache = record_cache or AuthRecordCache("token.json")
        self.prompt_callback = prompt_callback
        self.cache_name = cache_name
        self.authority = authority
        self._credential: Optional[DeviceCodeCredential] = None

        logger.debug(f"Initialized GraphAuthenticator with client_id={client_id}, " f"tenant_id={tenant_id}, scopes={self.scopes}")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        record_cache: Optional[AuthRecordCache] = None,
        prompt_callback: Optional[PromptCallback] = None,
    ) -> "GraphAuthenticator":
        """Create authenticator from application settings.

        Args:
            settings: Application settings
            record_cache: Optional record cache; defaults to the configured record file
            prompt_callback: Optional device-code prompt callback

        Returns:
            GraphAuthenticator instance
        """
        return cls(
            client_id=settings.azure.client_id,
            tenant_id=settings.azure.tenant_id,
            scopes=settings.azure.scopes,
            record_cache=record_cache or AuthRecordCache(settings.storage.record_file),
            prompt_callback=prompt_callback,
            cache_name=settings.storage.cache_name,
            authority=settings.azure.authority_host,
        )

    def _create_credential(self, record: Optional[AuthenticationRecord] = None) -> DeviceCodeCredential:
        """Create a DeviceCodeCredential backed by the persistent token cache.

        Args:
            record: Optional AuthenticationRecord from a previous sign-in

        Raises:
            AuthenticationError: If client_id or tenant_id is not configured
        """
        if not self.client_id or not self.tenant_id:
            raise AuthenticationError("Azure client_id and tenant_id must be configured.")

        cache_options = TokenCachePersistenceOptions(
            name=self.cache_name,
            allow_unencrypted_storage=True,  # Required for non-GUI environments
        )
        kwargs: dict[str, Any] = {
            "client_id": self.client_id,
            "tenant_id": self.tenant_id,
            "authority": self.authority,
            "cache_persistence_options": cache_options,
        }
        if record is not None:
            kwargs["authentication_record"] = record
        if self.prompt_callback is not None:
            kwargs["prompt_callback"] = self.prompt_callback

        logger.debug("Creating DeviceCodeCredential (cached record: %s)", record is not None)
        return DeviceCodeCredential(**kwargs)

    async def authenticate(self) -> GraphServiceClient:
        """Obtain an authenticated Graph client.

        With a cached record no network call is made here; tokens are fetched
        or refreshed lazily on the first Graph request. Otherwise this blocks
        until the user completes the device-code sign-in.

        Returns:
            Authenticated GraphServiceClient instance

        Raises:
            AuthenticationError: If authentication fails
        """
        try:
            record = await self.record_cache.load()

            if record is not None:
                logger.info("Using cached authentication record for %s", record.username)
                self._credential = self._create_credential(record)
            else:
                logger.info("No cached authentication record, starting device code flow")
                self._credential = self._create_credential()
                record = await asyncio.to_thread(self._credential.authenticate, scopes=self.scopes)
                await self.record_cache.save(record)
                logger.info("Authenticated as %s", record.username)

            return GraphServiceClient(credentials=self._credential, scopes=self.scopes)

        except AuthenticationError:
            raise
        except Exception as e:
            logger.debug("Authentication failed: %s", e, exc_info=True)
            raise AuthenticationError(f"Authentication failed: {e}") from e

    async def close(self) -> None:
        """Close the credential."""
        if self._credential:
            self._credential.close()
            self._credential = None
