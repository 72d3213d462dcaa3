"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """Bank ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Savings product rules
    savings_minimum_balance: Decimal = Decimal("100.00")
    savings_max_monthly_withdrawals: int = 6
    savings_withdrawal_penalty: Decimal = Decimal("25.00")
    savings_default_interest_rate: Decimal = Decimal("0.025")

    # Checking product rules
    checking_default_overdraft_limit: Decimal = Decimal("0.00")

    # Amount handling
    amount_precision: int = 2
    max_transaction_amount: Decimal = Decimal("999999999.99")
    recent_transactions_default: int = 5

    # Identifier generation
    account_number_max_attempts: int = 10


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
