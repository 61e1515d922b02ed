"""Azure authentication configuration for the Azure Blob backend.

Supports four authentication methods (mutually exclusive):
1. Connection string - Simple connection string auth
2. SAS token - Shared Access Signature token with account_url
3. Managed Identity - For Azure-hosted workloads
4. Service Principal - For automated/CI scenarios

Connection strings, SAS tokens and service principal secrets belong in
environment variables (${AZURE_STORAGE_CONNECTION_STRING} etc.), not in
committed settings files.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Self, cast

from pydantic import BaseModel, model_validator

if TYPE_CHECKING:
    from azure.storage.blob import BlobServiceClient


class AzureAuthConfig(BaseModel):
    """Azure authentication configuration.

    Example configurations:

        # Option 1: Connection string (simplest)
        connection_string: "${AZURE_STORAGE_CONNECTION_STRING}"

        # Option 2: SAS token
        sas_token: "${AZURE_STORAGE_SAS_TOKEN}"
        account_url: "https://mystorageaccount.blob.core.windows.net"

        # Option 3: Managed Identity
        use_managed_identity: true
        account_url: "https://mystorageaccount.blob.core.windows.net"

        # Option 4: Service Principal
        tenant_id: "${AZURE_TENANT_ID}"
        client_id: "${AZURE_CLIENT_ID}"
        client_secret: "${AZURE_CLIENT_SECRET}"
        account_url: "https://mystorageaccount.blob.core.windows.net"
    """

    model_config = {"extra": "forbid", "frozen": True}

    connection_string: str | None = None
    sas_token: str | None = None
    use_managed_identity: bool = False
    account_url: str | None = None
    tenant_id: str | None = None
    client_id: str | None = None
    client_secret: str | None = None

    @model_validator(mode="after")
    def validate_auth_method(self) -> Self:
        """Ensure exactly one auth method is configured.

        Raises:
            ValueError: If zero or multiple auth methods are configured,
                or a method is only partially configured.
        """
        has_account_url = _is_set(self.account_url)
        has_conn_string = _is_set(self.connection_string)
        has_sas_token = _is_set(self.sas_token) and has_account_url
        has_managed_identity = self.use_managed_identity and has_account_url
        has_service_principal = all(
            [
                _is_set(self.tenant_id),
                _is_set(self.client_id),
                _is_set(self.client_secret),
                has_account_url,
            ]
        )

        active_count = sum([has_conn_string, has_sas_token, has_managed_identity, has_service_principal])
        methods_hint = (
            "connection_string, "
            "sas_token + account_url, "
            "managed identity (use_managed_identity + account_url), or "
            "service principal (tenant_id + client_id + client_secret + account_url)"
        )

        if active_count > 1:
            raise ValueError(f"Multiple authentication methods configured. Provide exactly one of: {methods_hint}")

        # Partial configurations get a specific message before the generic one
        if self.sas_token and not has_account_url:
            raise ValueError("SAS token auth requires account_url. Example: https://mystorageaccount.blob.core.windows.net")

        if self.use_managed_identity and not has_account_url:
            raise ValueError("Managed Identity auth requires account_url. Example: https://mystorageaccount.blob.core.windows.net")

        sp_fields = {"tenant_id": self.tenant_id, "client_id": self.client_id, "client_secret": self.client_secret}
        if 0 < sum(1 for v in sp_fields.values() if v is not None) < 3 or (active_count == 0 and any(sp_fields.values())):
            missing = [name for name, value in sp_fields.items() if value is None]
            if not has_account_url:
                missing.append("account_url")
            raise ValueError(f"Service Principal auth requires all fields. Missing: {', '.join(missing)}")

        if active_count == 0:
            raise ValueError(f"No authentication method configured. Provide one of: {methods_hint}")

        return self

    def create_blob_service_client(self) -> BlobServiceClient:
        """Create BlobServiceClient using the configured auth method."""
        from azure.storage.blob import BlobServiceClient

        if _is_set(self.connection_string):
            return BlobServiceClient.from_connection_string(cast(str, self.connection_string))

        # model_validator guarantees account_url for every remaining method
        account_url = cast(str, self.account_url)

        if _is_set(self.sas_token):
            sas_token = cast(str, self.sas_token)
            sas = sas_token if sas_token.startswith("?") else f"?{sas_token}"
            return BlobServiceClient(f"{account_url.rstrip('/')}{sas}")

        if self.use_managed_identity:
            from azure.identity import DefaultAzureCredential

            return BlobServiceClient(account_url, credential=DefaultAzureCredential())

        from azure.identity import ClientSecretCredential

        sp_credential = ClientSecretCredential(
            tenant_id=cast(str, self.tenant_id),
            client_id=cast(str, self.client_id),
            client_secret=cast(str, self.client_secret),
        )
        return BlobServiceClient(account_url, credential=sp_credential)

    @property
    def auth_method(self) -> str:
        """Return the active authentication method name.

        Returns:
            One of: 'connection_string', 'sas_token', 'managed_identity', 'service_principal'
        """
        if _is_set(self.connection_string):
            return "connection_string"
        elif _is_set(self.sas_token):
            return "sas_token"
        elif self.use_managed_identity:
            return "managed_identity"
        else:
            return "service_principal"


def _is_set(value: str | None) -> bool:
    """Whitespace-only strings count as unset."""
    return value is not None and bool(value.strip())
