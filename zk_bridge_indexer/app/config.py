"""Config file."""
from urllib.parse import quote_plus

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from zk_bridge_indexer.app.domain.models.bridge import Layer


class Settings(BaseSettings):
    """Application settings."""

    # PROJECT
    project_name: str = Field("zk-bridge-indexer", alias="PROJECT_NAME")

    # DATABASE
    postgres_user: str = Field(..., alias="POSTGRES_USER")
    postgres_password: SecretStr = Field(..., alias="POSTGRES_PASSWORD")
    postgres_server: str = Field(..., alias="POSTGRES_SERVER")
    postgres_port: int = Field(..., alias="POSTGRES_PORT")
    postgres_db: str = Field(..., alias="POSTGRES_DB")
    database_url: str | None = None
    sync_database_url: str | None = None

    # RPC
    l1_rpc_url: str = Field(..., alias="L1_RPC_URL")
    l2_rpc_url: str = Field(..., alias="L2_RPC_URL")
    rpc_timeout_seconds: int = Field(600, alias="RPC_TIMEOUT_SECONDS")

    # BRIDGE
    zkevm_bridge_contract_l1: str | None = Field(None, alias="ZKEVM_BRIDGE_CONTRACT_L1")
    zkevm_bridge_contract_l2: str | None = Field(None, alias="ZKEVM_BRIDGE_CONTRACT_L2")
    bridge_import_enabled: bool = Field(True, alias="BRIDGE_IMPORT_ENABLED")

    # RETRIES
    # None = retry log/block/receipt fetches until the node answers
    rpc_max_attempts: int | None = Field(None, alias="RPC_MAX_ATTEMPTS")
    contract_read_max_attempts: int = Field(3, alias="CONTRACT_READ_MAX_ATTEMPTS")
    retry_pause_seconds: float = Field(1.0, alias="RETRY_PAUSE_SECONDS")

    @model_validator(mode="after")
    def assemble_db_urls(self) -> "Settings":
        user = quote_plus(self.postgres_user)
        password = quote_plus(self.postgres_password.get_secret_value())
        host = self.postgres_server
        port = self.postgres_port
        db = self.postgres_db

        if not self.database_url:
            self.database_url = f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"

        if not self.sync_database_url:
            self.sync_database_url = f"postgresql://{user}:{password}@{host}:{port}/{db}"

        return self

    def rpc_url(self, layer: Layer) -> str:
        return self.l1_rpc_url if layer is Layer.L1 else self.l2_rpc_url

    def bridge_contract(self, layer: Layer) -> str:
        contract = self.zkevm_bridge_contract_l1 if layer is Layer.L1 else self.zkevm_bridge_contract_l2
        if not contract:
            raise ValueError(f"ZKEVM_BRIDGE_CONTRACT_{layer.name} is not configured")
        return contract

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings: Settings = Settings()
