import os


class Settings:
    """Configuration settings for the loan reconciliation process."""

    # MongoDB Configuration
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://host.docker.internal:27017")
    DB_NAME = os.getenv("MONGO_DB_NAME", "ndv_money")
    USERS_COLLECTION = os.getenv("USERS_COLLECTION", "users")
    LOANS_COLLECTION = os.getenv("LOANS_COLLECTION", "loans")
    NOTIFICATIONS_COLLECTION = os.getenv("NOTIFICATIONS_COLLECTION", "notifications")
    SYSTEM_CONFIG_COLLECTION = os.getenv("SYSTEM_CONFIG_COLLECTION", "system_config")
    RECON_RUNS_COLLECTION = os.getenv("RECON_RUNS_COLLECTION", "reconciliation_runs")

    # Lending
    DEFAULT_BUDGET = int(os.getenv("DEFAULT_BUDGET", "30000000"))


# Create a singleton instance
settings = Settings()
