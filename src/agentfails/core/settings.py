"""Application settings and configuration.

This module defines all configuration options for the Agent Fails API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    Monetary amounts are expressed in USDC base units (6 decimals).
    """

    # Application metadata
    app_name: str = Field(default="Agent Fails", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./agentfails.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis configuration for read-only hint caching
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")

    # Chain (Base mainnet) configuration
    chain_rpc_url: str = Field(default="https://mainnet.base.org", alias="BASE_RPC_URL")
    chain_network: str = Field(default="base-mainnet", alias="CHAIN_NETWORK")
    chain_rpc_timeout_seconds: float = Field(default=10.0, alias="CHAIN_RPC_TIMEOUT_SECONDS")
    usdc_address: str = Field(
        default="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        alias="USDC_ADDRESS",
    )
    usdc_decimals: int = Field(default=6, alias="USDC_DECIMALS")
    payment_collector: str = Field(
        default="0xd4C15E8dEcC996227cE1830A39Af2Dd080138F89",
        alias="PAYMENT_COLLECTOR",
    )
    anons_nft_address: str = Field(
        default="0x1ad890FCE6cB865737A3411E7d04f1F5668b0686",
        alias="ANONS_NFT_ADDRESS",
    )
    lobster_nft_address: str = Field(
        default="0xc9cDED1749AE3a46Bd4870115816037b82B24143",
        alias="LOBSTER_NFT_ADDRESS",
    )

    # Pricing and phase configuration
    signup_usdc_amount: int = Field(default=2_000_000, alias="SIGNUP_USDC_AMOUNT")
    post_usdc_amount: int = Field(default=100_000, alias="POST_USDC_AMOUNT")
    comment_usdc_amount: int = Field(default=100_000, alias="COMMENT_USDC_AMOUNT")
    free_threshold: int = Field(default=100, alias="FREE_THRESHOLD")

    # Feed and content limits
    feed_page_size: int = Field(default=10, alias="FEED_PAGE_SIZE")
    feed_cache_seconds: int = Field(default=30, alias="FEED_CACHE_SECONDS")
    holder_cache_seconds: int = Field(default=60, alias="HOLDER_CACHE_SECONDS")
    title_max_length: int = Field(default=120, alias="TITLE_MAX_LENGTH")
    comment_max_length: int = Field(default=500, alias="COMMENT_MAX_LENGTH")

    # Hosted checkout (Stripe) configuration
    stripe_secret_key: str | None = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_webhook_secret: str | None = Field(default=None, alias="STRIPE_WEBHOOK_SECRET")
    stripe_webhook_tolerance_seconds: int = Field(
        default=300,
        alias="STRIPE_WEBHOOK_TOLERANCE_SECONDS",
    )
    stripe_api_base: str = Field(default="https://api.stripe.com", alias="STRIPE_API_BASE")
    stripe_price_id: str = Field(
        default="price_1T2yvSLECHmgJcHTyztuGHca",
        alias="STRIPE_PRICE_ID",
    )
    checkout_success_url: str = Field(
        default="https://agentfails.wtf/merch/success?session_id={CHECKOUT_SESSION_ID}",
        alias="CHECKOUT_SUCCESS_URL",
    )
    checkout_cancel_url: str = Field(
        default="https://agentfails.wtf/merch",
        alias="CHECKOUT_CANCEL_URL",
    )
    shipping_countries: list[str] = Field(
        default=["US", "CA", "GB", "AU", "DE", "FR", "NL", "SE", "JP", "SG"],
        alias="SHIPPING_COUNTRIES",
    )

    # Print-on-demand (Printify) configuration
    printify_api_key: str | None = Field(default=None, alias="PRINTIFY_API_KEY")
    printify_api_base: str = Field(default="https://api.printify.com", alias="PRINTIFY_API_BASE")
    printify_shop_id: str = Field(default="5856939", alias="PRINTIFY_SHOP_ID")
    printify_product_id: str = Field(
        default="6998a9e635ddad0d0308cebd",
        alias="PRINTIFY_PRODUCT_ID",
    )
    printify_variant_ids: dict[str, int] = Field(
        default={"S": 18100, "M": 18101, "L": 18102, "XL": 18103, "2XL": 18104},
        alias="PRINTIFY_VARIANT_IDS",
    )
    provider_http_timeout_seconds: float = Field(
        default=15.0,
        alias="PROVIDER_HTTP_TIMEOUT_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def pricing(self) -> dict[str, int]:
        """Return per-action prices keyed by action name."""
        return {
            "signup": self.signup_usdc_amount,
            "post": self.post_usdc_amount,
            "comment": self.comment_usdc_amount,
        }


settings = Settings()
